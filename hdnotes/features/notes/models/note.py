from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from hdnotes.platform.db.base import BaseModel


class Note(BaseModel):
    __tablename__ = "notes"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")

    user = relationship("User", back_populates="notes")

    def __repr__(self):
        return f"<Note(id={self.id}, user_id={self.user_id}, title={self.title!r})>"
