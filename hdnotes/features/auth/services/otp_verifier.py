from dataclasses import dataclass

from fastapi.concurrency import run_in_threadpool

from hdnotes.features.auth.models.one_time_code import OneTimeCode
from hdnotes.features.auth.models.user import User
from hdnotes.features.auth.schemas.auth import UserResponse
from hdnotes.features.auth.schemas.otp import OTPPurpose
from hdnotes.features.auth.services.credential_store import CredentialStore
from hdnotes.features.auth.services.session_tokens import SessionTokenIssuer
from hdnotes.features.auth.utils.security import normalize_email, verify_otp_hash
from hdnotes.platform.exceptions import (
    CodeAlreadyUsed,
    CodeExpired,
    CodeNotFound,
    InvalidCode,
    InvalidOrExpiredCode,
    NotVerified,
)
from hdnotes.platform.logger import get_logger
from hdnotes.platform.timeutils import utcnow

logger = get_logger(__name__)


@dataclass
class VerificationResult:
    token: str
    user: UserResponse


class OTPVerifier:
    """
    Checks a submitted code and, on success, consumes it and mints a session token.

    Failure modes, in the order they are checked:
      CodeNotFound / CodeExpired  -> no live code for the email
      InvalidCode                 -> hash mismatch; the code stays usable
      NotVerified                 -> login with an unverified account
      CodeAlreadyUsed             -> lost the race to a concurrent verify
    The three InvalidOrExpiredCode subclasses render the same client error.
    """

    def __init__(self, store: CredentialStore, tokens: SessionTokenIssuer):
        self.store = store
        self.tokens = tokens

    async def verify(self, email: str, code: str, purpose: OTPPurpose) -> VerificationResult:
        email = normalize_email(email)

        record = await self._select_candidate(email)

        if not await run_in_threadpool(verify_otp_hash, code, record.code_hash):
            logger.info(f"OTP mismatch for {email} (record {record.id})")
            raise InvalidCode()

        user = await self._resolve_user(record)
        if purpose is OTPPurpose.login and not user.verified:
            raise NotVerified()

        try:
            if not await self.store.consume_code(record.id):
                await self.store.rollback()
                logger.warning(f"OTP {record.id} for {email} was consumed concurrently")
                raise CodeAlreadyUsed()

            if purpose is OTPPurpose.signup:
                if await self.store.mark_user_verified(user.id):
                    logger.info(f"User {user.id} verified")
                user.verified = True

            await self.store.commit()
        except InvalidOrExpiredCode:
            raise
        except Exception:
            await self.store.rollback()
            raise

        token = self.tokens.mint(user.id, user.email)
        logger.info(f"OTP {record.id} accepted for user {user.id} ({purpose.value})")

        return VerificationResult(token=token, user=UserResponse.model_validate(user))

    async def _select_candidate(self, email: str) -> OneTimeCode:
        record = await self.store.latest_unused_code(email)
        if record is None:
            logger.info(f"No unused OTP for {email}")
            raise CodeNotFound()
        if record.expires_at <= utcnow():
            logger.info(f"OTP {record.id} for {email} expired at {record.expires_at}")
            raise CodeExpired()
        return record

    async def _resolve_user(self, record: OneTimeCode) -> User:
        user = None
        if record.user_id:
            user = await self.store.get_user_by_id(record.user_id)
        if user is None:
            user = await self.store.get_user_by_email(record.email)
        if user is None:
            logger.warning(f"OTP {record.id} has no matching user")
            raise InvalidOrExpiredCode()
        return user
