from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from hdnotes.platform.db.base import BaseModel


class OneTimeCode(BaseModel):
    """
    A single-use verification code. Only the bcrypt hash is stored.

    Issuance marks every earlier unused code for the same email as used,
    so at most one record per email is live (unused and unexpired).
    """

    __tablename__ = "one_time_codes"

    email = Column(String(255), nullable=False, index=True)
    code_hash = Column(String(255), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, nullable=False, default=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)

    user = relationship("User", back_populates="one_time_codes")

    __table_args__ = (Index("ix_one_time_codes_email_used", "email", "used"),)

    def __repr__(self):
        return f"<OneTimeCode(id={self.id}, email={self.email}, used={self.used})>"
