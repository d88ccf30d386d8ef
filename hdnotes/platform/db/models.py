"""Import every model so Base.metadata knows about all tables."""

from hdnotes.features.auth.models.one_time_code import OneTimeCode
from hdnotes.features.auth.models.user import User
from hdnotes.features.notes.models.note import Note

__all__ = ["User", "OneTimeCode", "Note"]
