"""
Tests for outbound email: the OTP mailer and the relay / SMTP transports.
Network calls are patched out.
"""

import smtplib
from unittest.mock import MagicMock, patch

import pytest
import requests

from hdnotes.features.auth.schemas.otp import OTPPurpose
from hdnotes.features.auth.services.otp_mailer import OTPMailer
from hdnotes.platform.config import get_settings
from hdnotes.platform.exceptions import EmailDeliveryFailed
from hdnotes.platform.services import email as email_service


@pytest.fixture
def relay_settings():
    settings = get_settings().model_copy(
        update={"EMAIL_RELAY_URL": "https://relay.example.com/send", "EMAIL_RELAY_API_KEY": "k"}
    )
    with patch.object(email_service, "get_settings", return_value=settings):
        yield settings


@pytest.fixture
def smtp_settings():
    settings = get_settings().model_copy(
        update={
            "EMAIL_RELAY_URL": "",
            "EMAIL_RELAY_API_KEY": "",
            "MAIL_HOST": "smtp.example.com",
            "MAIL_PORT": 587,
            "MAIL_USERNAME": "user",
            "MAIL_PASSWORD": "pw",
        }
    )
    with patch.object(email_service, "get_settings", return_value=settings):
        yield settings


def test_render_otp_template():
    html = email_service.render_template(
        "otp_email.html", app_name="HD Notes", heading="Email Verification", otp="123456", ttl_minutes=10
    )
    assert "123456" in html
    assert "10 minutes" in html


def test_relay_is_used_when_configured(relay_settings):
    with patch.object(email_service.requests, "post") as post:
        post.return_value = MagicMock(status_code=200)
        email_service.send_email("a@x.com", "Subject", "<p>hi</p>")

    post.assert_called_once()
    kwargs = post.call_args.kwargs
    assert kwargs["json"]["to_email"] == "a@x.com"
    assert kwargs["headers"]["X-API-Key"] == "k"
    assert kwargs["timeout"] == relay_settings.EMAIL_TIMEOUT


def test_relay_failure_raises(relay_settings):
    with patch.object(email_service.requests, "post", side_effect=requests.exceptions.Timeout()):
        with pytest.raises(EmailDeliveryFailed):
            email_service.send_email("a@x.com", "Subject", "<p>hi</p>")


def test_relay_failure_does_not_fall_back_to_smtp(relay_settings):
    with patch.object(email_service.requests, "post", side_effect=requests.exceptions.ConnectionError()), \
            patch.object(email_service.smtplib, "SMTP") as smtp:
        with pytest.raises(EmailDeliveryFailed):
            email_service.send_email("a@x.com", "Subject", "<p>hi</p>")

    smtp.assert_not_called()


def test_smtp_with_starttls(smtp_settings):
    with patch.object(email_service.smtplib, "SMTP") as smtp:
        server = smtp.return_value.__enter__.return_value
        email_service.send_email("a@x.com", "Subject", "<p>hi</p>", text="hi")

    smtp.assert_called_once_with("smtp.example.com", 587, timeout=smtp_settings.EMAIL_TIMEOUT)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("user", "pw")
    args = server.sendmail.call_args.args
    assert args[1] == "a@x.com"


def test_smtp_failure_raises(smtp_settings):
    with patch.object(email_service.smtplib, "SMTP", side_effect=smtplib.SMTPConnectError(421, "busy")):
        with pytest.raises(EmailDeliveryFailed):
            email_service.send_email("a@x.com", "Subject", "<p>hi</p>")


@pytest.mark.asyncio
async def test_otp_mailer_subjects():
    mailer = OTPMailer(get_settings())

    with patch("hdnotes.features.auth.services.otp_mailer.send_email") as send:
        await mailer.send_otp("a@x.com", "123456", OTPPurpose.signup)
        await mailer.send_otp("a@x.com", "654321", OTPPurpose.login)

    signup_call, login_call = send.call_args_list
    assert signup_call.args[0] == "a@x.com"
    assert "Verification" in signup_call.args[1]
    assert "123456" in signup_call.args[2]
    assert "login" in login_call.args[1]
    assert "654321" in login_call.args[3]
