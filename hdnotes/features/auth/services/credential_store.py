from datetime import date, datetime
from typing import Optional

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hdnotes.features.auth.models.one_time_code import OneTimeCode
from hdnotes.features.auth.models.user import User
from hdnotes.platform.logger import get_logger
from hdnotes.platform.timeutils import utcnow

logger = get_logger(__name__)


class CredentialStore:
    """
    Persistence for users and one-time codes.

    Every email argument must already be normalized; the store never
    normalizes on its own so that callers cannot silently diverge.
    Methods flush but do not commit unless stated otherwise.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    # ── Users ───────────────────────────────────

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def upsert_user(
        self,
        email: str,
        name: Optional[str] = None,
        date_of_birth: Optional[date] = None,
        update_profile: bool = False,
    ) -> User:
        """
        Return the user for `email`, creating it unverified when absent.

        With update_profile=True an existing user's name and date of birth
        are overwritten (registration re-submits the form).
        """
        user = await self.get_user_by_email(email)
        if user is None:
            user = User(email=email, name=name or "", date_of_birth=date_of_birth, verified=False)
            self.db.add(user)
            try:
                await self.db.flush()
            except IntegrityError:
                # lost a race against a concurrent insert of the same email;
                # this is the first write of the unit of work, so a full
                # rollback discards nothing else
                await self.db.rollback()
                logger.info(f"Concurrent user creation for {email}, reusing existing row")
                user = await self.get_user_by_email(email)
                if user is None:
                    raise
            else:
                return user

        if update_profile:
            user.name = name or ""
            user.date_of_birth = date_of_birth
            await self.db.flush()
        return user

    async def mark_user_verified(self, user_id: str) -> bool:
        """Flip verified false→true. Returns False when it was already set."""
        result = await self.db.execute(
            update(User)
            .where(User.id == user_id, User.verified.is_(False))
            .values(verified=True, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    # ── One-time codes ──────────────────────────

    async def invalidate_unused_codes(self, email: str) -> int:
        result = await self.db.execute(
            update(OneTimeCode)
            .where(OneTimeCode.email == email, OneTimeCode.used.is_(False))
            .values(used=True, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def create_code(
        self, email: str, code_hash: str, expires_at: datetime, user_id: Optional[str] = None
    ) -> OneTimeCode:
        record = OneTimeCode(
            email=email,
            code_hash=code_hash,
            expires_at=expires_at,
            used=False,
            user_id=user_id,
            created_at=utcnow(),
        )
        self.db.add(record)
        await self.db.flush()
        return record

    async def latest_unused_code(self, email: str) -> Optional[OneTimeCode]:
        """Most recently created unused code for the email, expired or not."""
        result = await self.db.execute(
            select(OneTimeCode)
            .where(OneTimeCode.email == email, OneTimeCode.used.is_(False))
            .order_by(OneTimeCode.created_at.desc(), OneTimeCode.id.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def consume_code(self, code_id: str) -> bool:
        """
        Mark the code used in a single conditional update.

        Returns False when another request consumed it first.
        """
        result = await self.db.execute(
            update(OneTimeCode)
            .where(OneTimeCode.id == code_id, OneTimeCode.used.is_(False))
            .values(used=True, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    async def purge_stale_codes(self, older_than: datetime) -> int:
        """Delete used or expired codes created before `older_than`."""
        now = utcnow()
        result = await self.db.execute(
            delete(OneTimeCode).where(
                OneTimeCode.created_at < older_than,
                or_(OneTimeCode.used.is_(True), OneTimeCode.expires_at < now),
            )
        )
        return result.rowcount
