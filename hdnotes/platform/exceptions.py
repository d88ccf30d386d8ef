from enum import Enum
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from hdnotes.platform.logger import get_logger
from hdnotes.platform.response import error_response

logger = get_logger(__name__)


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_OTP = "INVALID_OTP"
    INVALID_OR_EXPIRED_OTP = "INVALID_OR_EXPIRED_OTP"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    TOKEN_MISSING = "TOKEN_MISSING"
    TOKEN_MALFORMED = "TOKEN_MALFORMED"
    TOKEN_INVALID = "TOKEN_INVALID"
    NOT_FOUND = "NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    NOTE_NOT_FOUND = "NOTE_NOT_FOUND"
    ALREADY_VERIFIED = "ALREADY_VERIFIED"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    EMAIL_DELIVERY_FAILED = "EMAIL_DELIVERY_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppError(Exception):
    """Base for every error the API reports to clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, hint: Optional[Dict[str, Any]] = None):
        self.message = message or self.message
        self.hint = hint or {}
        super().__init__(self.message)


# ── 400 ─────────────────────────────────────────


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = ErrorCode.VALIDATION_ERROR
    message = "Validation error"


class InvalidCode(ValidationError):
    code = ErrorCode.INVALID_OTP
    message = "Invalid OTP"


class InvalidOrExpiredCode(ValidationError):
    code = ErrorCode.INVALID_OR_EXPIRED_OTP
    message = "Invalid or expired OTP"


class CodeNotFound(InvalidOrExpiredCode):
    pass


class CodeExpired(InvalidOrExpiredCode):
    pass


class CodeAlreadyUsed(InvalidOrExpiredCode):
    pass


class NotVerified(ValidationError):
    code = ErrorCode.EMAIL_NOT_VERIFIED
    message = "Email not verified. Please complete verification first."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, hint={"needsVerification": True})


# ── 401 ─────────────────────────────────────────


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = ErrorCode.TOKEN_INVALID
    message = "Invalid or expired token"


class TokenMissing(Unauthenticated):
    code = ErrorCode.TOKEN_MISSING
    message = "Authorization header missing"


class TokenMalformed(Unauthenticated):
    code = ErrorCode.TOKEN_MALFORMED
    message = "Invalid authorization header format. Use: Bearer <token>"


class TokenInvalid(Unauthenticated):
    pass


class TokenExpired(TokenInvalid):
    pass


# ── 404 ─────────────────────────────────────────


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = ErrorCode.NOT_FOUND
    message = "Not found"


class UserNotFound(NotFound):
    code = ErrorCode.USER_NOT_FOUND
    message = "User not found. Please sign up first."


class NoteNotFound(NotFound):
    code = ErrorCode.NOTE_NOT_FOUND
    message = "Note not found"


# ── 409 ─────────────────────────────────────────


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = ErrorCode.ALREADY_VERIFIED
    message = "Conflict"


class AlreadyVerified(Conflict):
    code = ErrorCode.ALREADY_VERIFIED
    message = "Email already verified"


class AlreadyRegistered(Conflict):
    code = ErrorCode.ALREADY_REGISTERED
    message = "Email already registered and verified"


# ── 500 ─────────────────────────────────────────


class Internal(AppError):
    pass


class EmailDeliveryFailed(Internal):
    code = ErrorCode.EMAIL_DELIVERY_FAILED
    message = "Failed to send verification email"


def _code_for_status(status_code: int) -> ErrorCode:
    if status_code == status.HTTP_404_NOT_FOUND:
        return ErrorCode.NOT_FOUND
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return ErrorCode.TOKEN_INVALID
    if status_code < 500:
        return ErrorCode.VALIDATION_ERROR
    return ErrorCode.INTERNAL_ERROR


def add_exception_handlers(app):
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
        return error_response(
            message=exc.message,
            code=exc.code.value,
            status_code=exc.status_code,
            hint=exc.hint,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(
            message=str(exc.detail) or "Error",
            code=_code_for_status(exc.status_code).value,
            status_code=exc.status_code,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(
            message="Validation error",
            code=ErrorCode.VALIDATION_ERROR.value,
            status_code=status.HTTP_400_BAD_REQUEST,
            hint={"details": exc.errors()},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        return error_response(
            message="Internal server error",
            code=ErrorCode.INTERNAL_ERROR.value,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
