import os
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import requests
from jinja2 import Environment, FileSystemLoader, select_autoescape

from hdnotes.platform.config import get_settings
from hdnotes.platform.exceptions import EmailDeliveryFailed
from hdnotes.platform.logger import get_logger

logger = get_logger("email_service")

current_dir = os.path.dirname(os.path.abspath(__file__))
template_dir = os.path.join(current_dir, "../../features/auth/template")

env = Environment(loader=FileSystemLoader(template_dir), autoescape=select_autoescape(["html"]))


def render_template(name: str, **context) -> str:
    return env.get_template(name).render(**context)


def send_email(to_email: str, subject: str, body: str, text: Optional[str] = None) -> None:
    """
    Send an email via the HTTP relay when configured, otherwise via SMTP.

    Sent once, no fallback or retry: any failure raises EmailDeliveryFailed.
    """
    settings = get_settings()
    if settings.EMAIL_RELAY_URL and settings.EMAIL_RELAY_API_KEY:
        send_email_via_relay(to_email, subject, body)
    else:
        send_email_direct_smtp(to_email, subject, body, text)


def send_email_via_relay(to_email: str, subject: str, body: str) -> None:
    """Send email via HTTP relay service"""
    settings = get_settings()
    payload = {
        "to_email": to_email,
        "subject": subject,
        "body": body,
        "from_address": settings.MAIL_FROM_ADDRESS,
    }

    headers = {
        "X-API-Key": settings.EMAIL_RELAY_API_KEY,
        "Content-Type": "application/json",
    }

    try:
        response = requests.post(
            settings.EMAIL_RELAY_URL,
            json=payload,
            headers=headers,
            timeout=settings.EMAIL_TIMEOUT,
        )
        response.raise_for_status()
    except requests.exceptions.Timeout as e:
        logger.error(f"Email relay timeout for {to_email}")
        raise EmailDeliveryFailed() from e
    except requests.exceptions.RequestException as e:
        logger.error(f"Email relay request failed: {str(e)}")
        if e.response is not None:
            logger.error(f"Response status: {e.response.status_code}")
            logger.error(f"Response body: {e.response.text}")
        raise EmailDeliveryFailed() from e

    logger.info(f"Email sent via relay to {to_email}")


def send_email_direct_smtp(to_email: str, subject: str, body: str, text: Optional[str] = None) -> None:
    """Send email via SMTP"""
    settings = get_settings()
    sender = f"{settings.MAIL_FROM_NAME} <{settings.MAIL_FROM_ADDRESS}>"

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = to_email
    if text:
        msg.attach(MIMEText(text, "plain"))
    msg.attach(MIMEText(body, "html"))

    port = settings.MAIL_PORT
    timeout = settings.EMAIL_TIMEOUT

    try:
        if port == 465:
            context = ssl.create_default_context()
            with smtplib.SMTP_SSL(settings.MAIL_HOST, port, context=context, timeout=timeout) as server:
                if settings.MAIL_USERNAME:
                    server.login(settings.MAIL_USERNAME, settings.MAIL_PASSWORD)
                server.sendmail(settings.MAIL_FROM_ADDRESS, to_email, msg.as_string())
        else:
            with smtplib.SMTP(settings.MAIL_HOST, port, timeout=timeout) as server:
                server.ehlo()

                if str(settings.MAIL_ENCRYPTION).upper() in ["TLS", "TRUE"]:
                    server.starttls(context=ssl.create_default_context())
                    server.ehlo()

                if settings.MAIL_USERNAME:
                    server.login(settings.MAIL_USERNAME, settings.MAIL_PASSWORD)
                server.sendmail(settings.MAIL_FROM_ADDRESS, to_email, msg.as_string())
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"SMTP delivery to {to_email} failed: {str(e)}")
        raise EmailDeliveryFailed() from e

    logger.info(f"Email sent via SMTP to {to_email}")
