from hdnotes.features.auth.utils.security import (
    create_access_token,
    decode_access_token,
    generate_otp,
    hash_otp,
    normalize_email,
    verify_otp_hash,
)

__all__ = [
    "normalize_email",
    "generate_otp",
    "hash_otp",
    "verify_otp_hash",
    "create_access_token",
    "decode_access_token",
]
