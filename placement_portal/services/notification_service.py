"""
Notification Service - outbound email.

EmailService.send() delivers one message over SMTP. With mail disabled
(the default for local runs) messages are logged instead of sent.

fan_out() sends to many recipients one at a time. A failed recipient is
recorded and the loop continues; the caller gets the aggregate.
"""

import logging
import smtplib
from dataclasses import dataclass, field
from email.mime.text import MIMEText
from typing import Callable, Iterable, List, Optional

from placement_portal.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when a single email cannot be delivered."""


class EmailService:
    """Thin SMTP sender."""

    def __init__(self):
        self.enabled = settings.mail_enabled
        self.sender = settings.mail_from

    def send(self, recipient: str, subject: str, body: str, html: bool = False) -> None:
        """Send one email. Raises EmailDeliveryError on failure."""
        if not self.enabled:
            logger.info("Mail disabled, not sending to %s (subject=%s)", recipient, subject)
            return

        msg = MIMEText(body, "html" if html else "plain")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = recipient

        try:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=15) as smtp:
                if settings.smtp_use_tls:
                    smtp.starttls()
                if settings.smtp_username:
                    smtp.login(settings.smtp_username, settings.smtp_password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"Failed to send email to {recipient}: {e}") from e

        logger.info("Email sent to %s (subject=%s)", recipient, subject)


@dataclass
class FanOutResult:
    """Aggregate outcome of a multi-recipient send."""
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


def fan_out(
    email_service: EmailService,
    recipients: Iterable[str],
    subject: str,
    body: Callable[[str], str],
    html: bool = False,
) -> FanOutResult:
    """Send subject/body(recipient) to every recipient, collecting outcomes."""
    result = FanOutResult()
    for recipient in recipients:
        try:
            email_service.send(recipient, subject, body(recipient), html=html)
        except EmailDeliveryError as e:
            logger.error("%s", e)
            result.failed.append(recipient)
        else:
            result.succeeded.append(recipient)

    if result.failed:
        logger.warning(
            "Fan-out '%s': %d sent, %d failed", subject, len(result.succeeded), len(result.failed)
        )
    return result


# Singleton instance
_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Get or create email service (singleton pattern). Also a FastAPI dependency."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
