from hdnotes.features.auth.schemas.auth import (
    EmailRequest,
    LoginResponse,
    MessageResponse,
    OTPRequest,
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
    SendOTPRequest,
    TokenResponse,
    UserResponse,
    VerifyOTPResponse,
)
from hdnotes.features.auth.schemas.identity import Identity
from hdnotes.features.auth.schemas.otp import OTPPurpose

__all__ = [
    "OTPPurpose",
    "Identity",
    "RegisterRequest",
    "SendOTPRequest",
    "EmailRequest",
    "OTPRequest",
    "UserResponse",
    "ProfileResponse",
    "MessageResponse",
    "RegisterResponse",
    "LoginResponse",
    "TokenResponse",
    "VerifyOTPResponse",
]
