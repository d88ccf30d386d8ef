from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hdnotes.features.notes.models.note import Note
from hdnotes.platform.exceptions import NoteNotFound
from hdnotes.platform.logger import get_logger
from hdnotes.platform.timeutils import utcnow

logger = get_logger(__name__)


class NoteService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_notes(self, user_id: str) -> List[Note]:
        """All notes owned by the user, most recently updated first."""
        result = await self.db.execute(
            select(Note)
            .where(Note.user_id == user_id)
            .order_by(Note.updated_at.desc(), Note.id.desc())
        )
        return list(result.scalars().all())

    async def get_note_for_owner(self, user_id: str, note_id: str) -> Note:
        """A note owned by someone else is reported exactly like a missing one."""
        result = await self.db.execute(select(Note).where(Note.id == note_id, Note.user_id == user_id))
        note = result.scalar_one_or_none()
        if note is None:
            raise NoteNotFound()
        return note

    async def create_note(self, user_id: str, title: str, content: str = "") -> Note:
        note = Note(user_id=user_id, title=title.strip(), content=content or "")
        self.db.add(note)
        try:
            await self.db.commit()
            await self.db.refresh(note)
        except Exception:
            await self.db.rollback()
            raise
        logger.info(f"Note {note.id} created for user {user_id}")
        return note

    async def update_note(self, user_id: str, note_id: str, title: str, content: str = "") -> Note:
        note = await self.get_note_for_owner(user_id, note_id)
        note.title = title.strip()
        note.content = content or ""
        # an unchanged payload emits no UPDATE, so onupdate alone would not fire
        note.updated_at = utcnow()
        try:
            await self.db.commit()
            await self.db.refresh(note)
        except Exception:
            await self.db.rollback()
            raise
        return note

    async def delete_note(self, user_id: str, note_id: str) -> None:
        note = await self.get_note_for_owner(user_id, note_id)
        await self.db.delete(note)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        logger.info(f"Note {note_id} deleted by user {user_id}")
