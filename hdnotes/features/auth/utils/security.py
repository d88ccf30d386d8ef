import secrets
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
import jwt

from hdnotes.platform.exceptions import TokenExpired, TokenInvalid
from hdnotes.platform.timeutils import utcnow


def normalize_email(email: str) -> str:
    """Canonical form used for every lookup and write: trimmed and lowercased."""
    return email.strip().lower()


def generate_otp(length: int = 6) -> str:
    """Generate a numeric OTP from the OS CSPRNG"""
    return "".join(str(secrets.randbelow(10)) for _ in range(length))


def hash_otp(otp: str, rounds: int = 12) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(otp.encode("utf-8"), salt).decode("utf-8")


def verify_otp_hash(otp: str, otp_hash: str) -> bool:
    """
    Compare a submitted code against its stored bcrypt hash.
    Malformed hashes count as a mismatch.
    """
    try:
        return bcrypt.checkpw(otp.strip().encode("utf-8"), otp_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(
    data: dict,
    secret_key: str,
    algorithm: str = "HS256",
    expires_delta: Optional[timedelta] = None,
    now: Optional[datetime] = None,
) -> str:
    """Create a JWT access token"""
    issued_at = now or utcnow()
    to_encode = data.copy()
    to_encode.update({"iat": issued_at, "exp": issued_at + (expires_delta or timedelta(days=7))})
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_access_token(token: str, secret_key: str, algorithm: str = "HS256") -> dict:
    """Decode and verify a JWT access token"""
    try:
        return jwt.decode(token, secret_key, algorithms=[algorithm])
    except jwt.ExpiredSignatureError:
        raise TokenExpired()
    except jwt.PyJWTError:
        raise TokenInvalid()
