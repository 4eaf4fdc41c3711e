"""
Email Utility - plain SMTP delivery for account emails (password reset).
"""

import logging
import smtplib
from email.message import EmailMessage

from app.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


class EmailDeliveryError(Exception):
    """Raised when an email could not be handed to the SMTP server."""


def send_email(to: str, subject: str, body: str) -> None:
    """
    Send a plain-text email through the configured SMTP server.

    Raises:
        EmailDeliveryError when SMTP is not configured or delivery fails
    """
    if not settings.smtp_host:
        raise EmailDeliveryError("SMTP host is not configured")

    message = EmailMessage()
    message["From"] = f"{settings.from_name} <{settings.from_email}>"
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as server:
            server.ehlo()
            if server.has_extn("starttls"):
                server.starttls()
                server.ehlo()
            if settings.smtp_user:
                server.login(settings.smtp_user, settings.smtp_password)
            server.send_message(message)
    except (smtplib.SMTPException, OSError) as e:
        raise EmailDeliveryError(str(e)) from e

    logger.info("Email '%s' sent to %s", subject, to)
