from hdnotes.features.auth.services.credential_store import CredentialStore
from hdnotes.features.auth.services.otp_issuer import IssueResult, OTPIssuer
from hdnotes.features.auth.services.otp_mailer import OTPMailer
from hdnotes.features.auth.services.otp_verifier import OTPVerifier, VerificationResult
from hdnotes.features.auth.services.session_tokens import SessionTokenIssuer

__all__ = [
    "CredentialStore",
    "OTPIssuer",
    "IssueResult",
    "OTPMailer",
    "OTPVerifier",
    "VerificationResult",
    "SessionTokenIssuer",
]
