from fastapi import APIRouter, Depends, status

from hdnotes.features.auth.dependencies.auth import (
    get_credential_store,
    get_current_identity,
    get_otp_issuer,
    get_otp_verifier,
)
from hdnotes.features.auth.schemas import (
    EmailRequest,
    Identity,
    LoginResponse,
    MessageResponse,
    OTPPurpose,
    OTPRequest,
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
    SendOTPRequest,
    TokenResponse,
    VerifyOTPResponse,
)
from hdnotes.features.auth.services import CredentialStore, OTPIssuer, OTPVerifier
from hdnotes.platform.exceptions import TokenInvalid

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create (or refresh) an unverified account and email it a verification code",
)
async def register(request: RegisterRequest, issuer: OTPIssuer = Depends(get_otp_issuer)):
    result = await issuer.register(request.email, request.name, request.date_of_birth)
    return RegisterResponse(message=result.message, user_id=result.user_id)


@router.post(
    "/send-otp",
    response_model=MessageResponse,
    summary="Send a one-time code",
    description="Issue a code for signup (creates the account if needed) or login (verified accounts only)",
)
async def send_otp(request: SendOTPRequest, issuer: OTPIssuer = Depends(get_otp_issuer)):
    result = await issuer.issue(request.email, request.type)
    return MessageResponse(message=result.message)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Start passwordless login",
    description="Email a login code to a verified account",
)
async def login(request: EmailRequest, issuer: OTPIssuer = Depends(get_otp_issuer)):
    result = await issuer.request_login(request.email)
    return LoginResponse(message=result.message, requires_otp=True)


@router.post(
    "/login-otp",
    response_model=TokenResponse,
    summary="Complete login with a code",
)
async def login_with_otp(request: OTPRequest, verifier: OTPVerifier = Depends(get_otp_verifier)):
    result = await verifier.verify(request.email, request.otp, OTPPurpose.login)
    return TokenResponse(token=result.token, user=result.user)


@router.post(
    "/verify-otp",
    response_model=VerifyOTPResponse,
    summary="Verify email with OTP",
    description="Verify a newly registered email and sign the user in",
)
async def verify_otp(request: OTPRequest, verifier: OTPVerifier = Depends(get_otp_verifier)):
    result = await verifier.verify(request.email, request.otp, OTPPurpose.signup)
    return VerifyOTPResponse(message="Email verified successfully", token=result.token, user=result.user)


@router.post(
    "/resend-otp",
    response_model=MessageResponse,
    summary="Resend the verification code",
)
async def resend_otp(request: EmailRequest, issuer: OTPIssuer = Depends(get_otp_issuer)):
    result = await issuer.resend(request.email)
    return MessageResponse(message=result.message)


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get current user profile",
)
async def get_profile(
    identity: Identity = Depends(get_current_identity),
    store: CredentialStore = Depends(get_credential_store),
):
    user = await store.get_user_by_id(identity.user_id)
    if user is None:
        raise TokenInvalid()
    return ProfileResponse.model_validate(user)
