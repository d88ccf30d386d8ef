from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hdnotes.features.auth.schemas.identity import Identity
from hdnotes.features.auth.services.credential_store import CredentialStore
from hdnotes.features.auth.services.otp_issuer import OTPIssuer
from hdnotes.features.auth.services.otp_mailer import OTPMailer
from hdnotes.features.auth.services.otp_verifier import OTPVerifier
from hdnotes.features.auth.services.session_tokens import SessionTokenIssuer
from hdnotes.platform.config import Settings, get_settings
from hdnotes.platform.db.session import get_db
from hdnotes.platform.exceptions import TokenInvalid, TokenMalformed, TokenMissing
from hdnotes.platform.logger import get_logger

logger = get_logger(__name__)


def get_credential_store(db: AsyncSession = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


def get_token_issuer(settings: Settings = Depends(get_settings)) -> SessionTokenIssuer:
    return SessionTokenIssuer(settings)


def get_otp_mailer(settings: Settings = Depends(get_settings)) -> OTPMailer:
    return OTPMailer(settings)


def get_otp_issuer(
    store: CredentialStore = Depends(get_credential_store),
    mailer: OTPMailer = Depends(get_otp_mailer),
    settings: Settings = Depends(get_settings),
) -> OTPIssuer:
    return OTPIssuer(store, mailer, settings)


def get_otp_verifier(
    store: CredentialStore = Depends(get_credential_store),
    tokens: SessionTokenIssuer = Depends(get_token_issuer),
) -> OTPVerifier:
    return OTPVerifier(store, tokens)


def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise TokenMissing()
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme != "Bearer" or not token:
        raise TokenMalformed()
    return token


async def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(None),
    store: CredentialStore = Depends(get_credential_store),
    tokens: SessionTokenIssuer = Depends(get_token_issuer),
) -> Identity:
    """
    Auth gate for protected routes.

    Resolves the bearer token to a live user and stores the resulting
    Identity on request.state. Handlers depend on this instead of reading
    the token themselves.
    """
    token = extract_bearer_token(authorization)
    payload = tokens.decode(token)

    user_id = payload.get("id")
    if not user_id:
        raise TokenInvalid()

    user = await store.get_user_by_id(str(user_id))
    if user is None:
        # same answer as a bad token so account existence does not leak
        logger.info(f"Token for missing user {user_id} rejected")
        raise TokenInvalid()

    identity = Identity(user_id=user.id, email=user.email, name=user.name, verified=user.verified)
    request.state.identity = identity
    return identity
