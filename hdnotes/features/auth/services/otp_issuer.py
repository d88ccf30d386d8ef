from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from hdnotes.features.auth.models.user import User
from hdnotes.features.auth.schemas.otp import OTPPurpose
from hdnotes.features.auth.services.credential_store import CredentialStore
from hdnotes.features.auth.services.otp_mailer import OTPMailer
from hdnotes.features.auth.utils.security import generate_otp, hash_otp, normalize_email
from hdnotes.platform.config import Settings
from hdnotes.platform.exceptions import (
    AlreadyRegistered,
    AlreadyVerified,
    NotVerified,
    UserNotFound,
)
from hdnotes.platform.logger import get_logger
from hdnotes.platform.timeutils import utcnow

logger = get_logger(__name__)


@dataclass
class IssueResult:
    message: str
    email: str
    user_id: Optional[str] = None


class OTPIssuer:
    """
    Issues single-use codes.

    Each issuance invalidates every earlier unused code for the email,
    stores the bcrypt hash of a fresh code and commits before the
    plaintext is handed to the mailer. A failed dispatch raises
    EmailDeliveryFailed; the committed record is left in place and a
    later resend supersedes it.
    """

    def __init__(self, store: CredentialStore, mailer: OTPMailer, settings: Settings):
        self.store = store
        self.mailer = mailer
        self.settings = settings

    async def issue(self, email: str, purpose: OTPPurpose) -> IssueResult:
        email = normalize_email(email)

        if purpose is OTPPurpose.login:
            user = await self._require_verified_user(email)
        elif purpose is OTPPurpose.signup:
            user = await self.store.upsert_user(email)
        else:
            raise ValueError(f"Unhandled OTP purpose: {purpose!r}")

        await self._issue_for(email, user, purpose)
        return IssueResult(message="OTP sent successfully", email=email, user_id=user.id)

    async def register(
        self, email: str, name: str, date_of_birth: Optional[date] = None
    ) -> IssueResult:
        """Create or refresh an unverified account and send it a signup code."""
        email = normalize_email(email)

        existing = await self.store.get_user_by_email(email)
        if existing is not None and existing.verified:
            logger.warning(f"Registration rejected, email already verified: {email}")
            raise AlreadyRegistered()

        user = await self.store.upsert_user(
            email, name=name, date_of_birth=date_of_birth, update_profile=True
        )
        await self._issue_for(email, user, OTPPurpose.signup)
        return IssueResult(
            message="Registration successful. Please check your email for OTP verification.",
            email=email,
            user_id=user.id,
        )

    async def request_login(self, email: str) -> IssueResult:
        result = await self.issue(email, OTPPurpose.login)
        result.message = "OTP sent to your email. Please verify to login."
        return result

    async def resend(self, email: str) -> IssueResult:
        """Issue a fresh signup code for an account that has not been verified yet."""
        email = normalize_email(email)

        user = await self.store.get_user_by_email(email)
        if user is None:
            logger.warning(f"Resend failed - email not found: {email}")
            raise UserNotFound("User not found")
        if user.verified:
            logger.warning(f"Resend failed - email already verified: {email}")
            raise AlreadyVerified()

        await self._issue_for(email, user, OTPPurpose.signup)
        return IssueResult(message="OTP sent successfully", email=email, user_id=user.id)

    async def _require_verified_user(self, email: str) -> User:
        user = await self.store.get_user_by_email(email)
        if user is None:
            logger.info(f"Login OTP refused - no user for {email}")
            raise UserNotFound()
        if not user.verified:
            logger.info(f"Login OTP refused - user {user.id} not verified")
            raise NotVerified()
        return user

    async def _issue_for(self, email: str, user: Optional[User], purpose: OTPPurpose) -> None:
        otp = generate_otp(self.settings.OTP_LENGTH)
        # bcrypt is CPU bound; keep it off the event loop
        code_hash = await run_in_threadpool(hash_otp, otp, rounds=self.settings.OTP_HASH_ROUNDS)
        expires_at = utcnow() + timedelta(minutes=self.settings.OTP_TTL_MINUTES)

        try:
            invalidated = await self.store.invalidate_unused_codes(email)
            record = await self.store.create_code(
                email=email,
                code_hash=code_hash,
                expires_at=expires_at,
                user_id=user.id if user is not None else None,
            )
            await self.store.commit()
        except Exception:
            await self.store.rollback()
            raise

        logger.info(
            f"Issued {purpose.value} OTP {record.id} for {email}, invalidated {invalidated} earlier code(s)"
        )
        if self.settings.DEBUG:
            logger.debug(f"OTP for {email}: {otp}")

        await self.mailer.send_otp(email, otp, purpose)
        logger.info(f"OTP {record.id} dispatched to {email}")
