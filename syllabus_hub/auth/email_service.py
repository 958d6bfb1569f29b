"""
Outbound email over SMTP.

smtplib is blocking, so each send runs in a worker thread. With
DISABLE_EMAIL=true (or no SMTP_HOST) messages are only logged.
"""
import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr

from syllabus_hub import config
from syllabus_hub.logging_config import get_logger

logger = get_logger("email")


class EmailDeliveryError(Exception):
    """SMTP delivery failed"""


def email_enabled() -> bool:
    return not config.DISABLE_EMAIL and bool(config.SMTP_HOST)


def _build_message(to: str, subject: str, html: str, text: str) -> EmailMessage:
    message = EmailMessage()
    message["From"] = formataddr((config.EMAIL_FROM_NAME, config.EMAIL_FROM or config.SMTP_USER or ""))
    message["To"] = to
    message["Subject"] = subject
    message.set_content(text)
    message.add_alternative(html, subtype="html")
    return message


def _deliver(message: EmailMessage) -> None:
    if config.SMTP_SECURE:
        server = smtplib.SMTP_SSL(config.SMTP_HOST, config.SMTP_PORT, context=ssl.create_default_context())
    else:
        server = smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT)
    with server:
        if not config.SMTP_SECURE:
            server.starttls(context=ssl.create_default_context())
        if config.SMTP_USER:
            server.login(config.SMTP_USER, config.SMTP_PASS or "")
        server.send_message(message)


async def send_email(to: str, subject: str, html: str, text: str) -> None:
    if not email_enabled():
        logger.info("Email disabled; would send %r to %s", subject, to)
        return

    message = _build_message(to, subject, html, text)
    try:
        await asyncio.to_thread(_deliver, message)
    except (smtplib.SMTPException, OSError) as e:
        raise EmailDeliveryError(f"Email send failed: {e}") from e
    logger.info("Email %r sent to %s", subject, to)


async def send_verification_email(email: str, name: str, token: str) -> None:
    verification_url = f"{config.FRONTEND_URL}/verify-email/{token}"
    subject = "Verify your Campus Syllabus Hub account"
    text = (
        f"Hi {name},\n\n"
        f"Confirm your email address by opening this link:\n{verification_url}\n\n"
        "The link expires in 24 hours. If you did not sign up, ignore this message."
    )
    html = (
        f"<p>Hi {name},</p>"
        f"<p>Confirm your email address by clicking "
        f"<a href=\"{verification_url}\">this link</a>.</p>"
        "<p>The link expires in 24 hours. If you did not sign up, ignore this message.</p>"
    )
    await send_email(email, subject, html, text)
