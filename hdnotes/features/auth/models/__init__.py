from hdnotes.features.auth.models.one_time_code import OneTimeCode
from hdnotes.features.auth.models.user import User

__all__ = ["User", "OneTimeCode"]
