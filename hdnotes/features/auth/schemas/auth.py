from datetime import date, datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

from hdnotes.features.auth.schemas.otp import OTPPurpose
from hdnotes.platform.config import get_settings


class _EmailBody(BaseModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v):
        return v.strip() if isinstance(v, str) else v


class RegisterRequest(_EmailBody):
    name: str = Field(..., min_length=1, max_length=255)
    date_of_birth: Optional[date] = Field(None, alias="dateOfBirth")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {"email": "ann@example.com", "name": "Ann", "dateOfBirth": "1990-04-01"}
        },
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class SendOTPRequest(_EmailBody):
    type: OTPPurpose = OTPPurpose.signup


class EmailRequest(_EmailBody):
    pass


class OTPRequest(_EmailBody):
    otp: str = Field(..., description="The numeric code received by email")

    @field_validator("otp")
    @classmethod
    def validate_otp(cls, v: str) -> str:
        v = v.strip()
        if not v.isdigit():
            raise ValueError("OTP must be numeric")
        length = get_settings().OTP_LENGTH
        if len(v) != length:
            raise ValueError(f"OTP must be {length} digits")
        return v


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    verified: bool

    model_config = ConfigDict(from_attributes=True)


class ProfileResponse(UserResponse):
    created_at: datetime = Field(
        ..., validation_alias=AliasChoices("created_at", "createdAt"), serialization_alias="createdAt"
    )

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class MessageResponse(BaseModel):
    message: str


class RegisterResponse(BaseModel):
    message: str
    user_id: str = Field(..., alias="userId")

    model_config = ConfigDict(populate_by_name=True)


class LoginResponse(BaseModel):
    message: str
    requires_otp: bool = Field(True, alias="requiresOTP")

    model_config = ConfigDict(populate_by_name=True)


class TokenResponse(BaseModel):
    token: str
    user: UserResponse


class VerifyOTPResponse(TokenResponse):
    message: str
