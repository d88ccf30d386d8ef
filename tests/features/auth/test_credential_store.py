from datetime import timedelta

import pytest
from sqlalchemy import select

from hdnotes.features.auth.models.one_time_code import OneTimeCode
from hdnotes.features.auth.services.credential_store import CredentialStore
from hdnotes.platform.db.session import SessionLocal
from hdnotes.platform.timeutils import utcnow


async def _add_code(store, email="a@x.com", expires_in=timedelta(minutes=10), user_id=None):
    return await store.create_code(
        email=email, code_hash="hash", expires_at=utcnow() + expires_in, user_id=user_id
    )


@pytest.mark.asyncio
async def test_upsert_user_creates_then_reuses():
    async with SessionLocal() as db:
        store = CredentialStore(db)
        created = await store.upsert_user("a@x.com", name="Ann")
        await store.commit()

        again = await store.upsert_user("a@x.com", name="ignored")
        await store.commit()

        assert again.id == created.id
        assert again.name == "Ann"
        assert again.verified is False


@pytest.mark.asyncio
async def test_upsert_user_update_profile():
    async with SessionLocal() as db:
        store = CredentialStore(db)
        await store.upsert_user("a@x.com", name="Ann")
        await store.commit()

        user = await store.upsert_user("a@x.com", name="Annie", update_profile=True)
        await store.commit()

        assert user.name == "Annie"
        assert (await store.get_user_by_email("a@x.com")).name == "Annie"


@pytest.mark.asyncio
async def test_mark_user_verified_only_once():
    async with SessionLocal() as db:
        store = CredentialStore(db)
        user = await store.upsert_user("a@x.com")
        await store.commit()

        assert await store.mark_user_verified(user.id) is True
        assert await store.mark_user_verified(user.id) is False
        await store.commit()

    async with SessionLocal() as db:
        assert (await CredentialStore(db).get_user_by_id(user.id)).verified is True


@pytest.mark.asyncio
async def test_consume_code_is_single_use():
    async with SessionLocal() as db:
        store = CredentialStore(db)
        record = await _add_code(store)
        await store.commit()

        assert await store.consume_code(record.id) is True
        assert await store.consume_code(record.id) is False
        await store.commit()

        assert await store.latest_unused_code("a@x.com") is None


@pytest.mark.asyncio
async def test_invalidate_leaves_one_live_code():
    async with SessionLocal() as db:
        store = CredentialStore(db)
        await _add_code(store)
        await _add_code(store)
        await _add_code(store, email="b@x.com")
        await store.commit()

        assert await store.invalidate_unused_codes("a@x.com") == 2
        newest = await _add_code(store)
        await store.commit()

        assert (await store.latest_unused_code("a@x.com")).id == newest.id
        assert (await store.latest_unused_code("b@x.com")) is not None

        result = await db.execute(
            select(OneTimeCode).where(OneTimeCode.email == "a@x.com", OneTimeCode.used.is_(False))
        )
        assert [r.id for r in result.scalars().all()] == [newest.id]


@pytest.mark.asyncio
async def test_latest_unused_code_returns_expired_records_too():
    async with SessionLocal() as db:
        store = CredentialStore(db)
        record = await _add_code(store, expires_in=timedelta(minutes=-1))
        await store.commit()

        assert (await store.latest_unused_code("a@x.com")).id == record.id


@pytest.mark.asyncio
async def test_purge_stale_codes():
    async with SessionLocal() as db:
        store = CredentialStore(db)
        used = await _add_code(store)
        expired = await _add_code(store, email="b@x.com", expires_in=timedelta(minutes=-1))
        live = await _add_code(store, email="c@x.com")
        await store.consume_code(used.id)
        await store.commit()

        # nothing is old enough yet
        assert await store.purge_stale_codes(utcnow() - timedelta(hours=1)) == 0

        assert await store.purge_stale_codes(utcnow() + timedelta(seconds=1)) == 2
        await store.commit()

        remaining = (await db.execute(select(OneTimeCode.id))).scalars().all()
        assert remaining == [live.id]
        assert expired.id not in remaining
