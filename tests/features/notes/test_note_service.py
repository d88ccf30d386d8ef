import pytest
from unittest.mock import AsyncMock, MagicMock

from hdnotes.features.notes.models.note import Note
from hdnotes.features.notes.services.note_service import NoteService
from hdnotes.platform.exceptions import NoteNotFound


def make_db(note=None):
    db = AsyncMock()
    db.add = MagicMock()
    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = note
    db.execute.return_value = mock_result
    return db


@pytest.mark.asyncio
async def test_delete_note_success():
    note = Note(id="note_1", user_id="user_1", title="t", content="")
    db = make_db(note)

    await NoteService(db).delete_note("user_1", "note_1")

    db.delete.assert_awaited_once_with(note)
    db.commit.assert_awaited_once()
    db.rollback.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_note_not_found():
    db = make_db(None)

    with pytest.raises(NoteNotFound):
        await NoteService(db).delete_note("user_1", "note_1")

    db.delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_note_commit_failure_rolls_back():
    note = Note(id="note_1", user_id="user_1", title="t", content="")
    db = make_db(note)
    db.commit.side_effect = RuntimeError("db down")

    with pytest.raises(RuntimeError):
        await NoteService(db).delete_note("user_1", "note_1")

    db.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_note_always_touches_updated_at():
    note = Note(id="note_1", user_id="user_1", title="same", content="same", updated_at=None)
    db = make_db(note)

    updated = await NoteService(db).update_note("user_1", "note_1", "same", "same")

    assert updated.updated_at is not None
    db.commit.assert_awaited_once()
