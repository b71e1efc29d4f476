from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional, Protocol

from ..core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    def send(self, *, to: str, subject: str, text: Optional[str] = None, html: Optional[str] = None) -> None:
        """Deliver one message; raises UpstreamError on failure."""

        raise NotImplementedError


@dataclass(frozen=True)
class SMTPSettings:
    host: str
    port: int
    user: str
    password: str
    sender: str
    use_tls: bool = True
    timeout: float = 15.0


class SMTPEmailSender(EmailSender):
    def __init__(self, settings: SMTPSettings):
        self._settings = settings

    def send(self, *, to: str, subject: str, text: Optional[str] = None, html: Optional[str] = None) -> None:
        s = self._settings
        msg = EmailMessage()
        msg["From"] = s.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text or "")
        if html:
            msg.add_alternative(html, subtype="html")

        try:
            with smtplib.SMTP(s.host, s.port, timeout=s.timeout) as smtp:
                if s.use_tls:
                    smtp.starttls()
                if s.user:
                    smtp.login(s.user, s.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise UpstreamError(f"Email sending failed: {e}")

        logger.info("Email sent to %s (subject=%r)", to, subject)


class LogOnlyEmailSender(EmailSender):
    """Used when no SMTP host is configured: records that a message was due.

    Bodies are not logged because they may carry OTP codes or reset links.
    """

    def send(self, *, to: str, subject: str, text: Optional[str] = None, html: Optional[str] = None) -> None:
        logger.warning("SMTP not configured; email to %s (subject=%r) was not delivered", to, subject)
