import sqlalchemy
from sqlalchemy import Column, String
from sqlalchemy.orm import declarative_base
from uuid6 import uuid7

from hdnotes.platform.timeutils import utcnow

Base = declarative_base()


class BaseModel(Base):
    __abstract__ = True
    # uuid7 is time ordered, so ids double as a creation-order tie breaker
    id = Column(String(36), primary_key=True, default=lambda: str(uuid7()), index=True)
    created_at = Column(
        sqlalchemy.DateTime, default=utcnow, server_default=sqlalchemy.func.now(), nullable=False
    )
    updated_at = Column(
        sqlalchemy.DateTime,
        default=utcnow,
        server_default=sqlalchemy.func.now(),
        onupdate=utcnow,
        nullable=False,
    )

# Note: Models import this Base. Do not import models here to avoid circular imports.
# hdnotes.platform.db.models pulls them all in for create_all and alembic.
