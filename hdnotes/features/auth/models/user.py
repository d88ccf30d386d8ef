from sqlalchemy import Boolean, Column, Date, String
from sqlalchemy.orm import relationship

from hdnotes.platform.db.base import BaseModel


class User(BaseModel):
    __tablename__ = "users"

    # always stored normalized (trimmed, lowercase)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, default="")
    date_of_birth = Column(Date, nullable=True)
    verified = Column(Boolean, nullable=False, default=False)

    one_time_codes = relationship(
        "OneTimeCode", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    notes = relationship("Note", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, verified={self.verified})>"
