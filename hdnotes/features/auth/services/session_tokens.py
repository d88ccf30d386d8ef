from datetime import timedelta
from typing import Optional

from hdnotes.features.auth.utils.security import create_access_token, decode_access_token
from hdnotes.platform.config import Settings


class SessionTokenIssuer:
    """Mints and decodes the signed bearer tokens handed out after OTP verification."""

    def __init__(self, settings: Settings):
        self.secret_key = settings.JWT_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.ttl = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)

    def mint(self, user_id: str, email: str, expires_delta: Optional[timedelta] = None) -> str:
        return create_access_token(
            data={"id": str(user_id), "email": email},
            secret_key=self.secret_key,
            algorithm=self.algorithm,
            expires_delta=expires_delta or self.ttl,
        )

    def decode(self, token: str) -> dict:
        """Raises TokenExpired or TokenInvalid."""
        return decode_access_token(token, self.secret_key, self.algorithm)
