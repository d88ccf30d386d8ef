from fastapi.concurrency import run_in_threadpool

from hdnotes.features.auth.schemas.otp import OTPPurpose
from hdnotes.platform.config import Settings
from hdnotes.platform.services.email import render_template, send_email

SUBJECTS = {
    OTPPurpose.signup: "Your OTP for {app_name} Verification",
    OTPPurpose.login: "Your {app_name} login code",
}

HEADINGS = {
    OTPPurpose.signup: "Email Verification",
    OTPPurpose.login: "Sign-in Code",
}


class OTPMailer:
    """Delivers plaintext codes out of band. Raises EmailDeliveryFailed on failure."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def send_otp(self, email: str, otp: str, purpose: OTPPurpose) -> None:
        subject = SUBJECTS[purpose].format(app_name=self.settings.APP_NAME)
        body = render_template(
            "otp_email.html",
            app_name=self.settings.APP_NAME,
            heading=HEADINGS[purpose],
            otp=otp,
            ttl_minutes=self.settings.OTP_TTL_MINUTES,
        )
        text = f"Your {self.settings.APP_NAME} code is {otp}. It expires in {self.settings.OTP_TTL_MINUTES} minutes."
        # smtplib/requests block; keep them off the event loop
        await run_in_threadpool(send_email, email, subject, body, text)
