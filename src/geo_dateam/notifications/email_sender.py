from __future__ import annotations

import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional, Protocol

import structlog

from ..core.constants import REMINDER_SUBJECT

logger = structlog.get_logger(__name__)


def reminder_text(name: str) -> str:
    return (
        f"Bonjour {name},\n\n"
        "Nous avons remarqué que vous n'avez pas encore pointé votre présence aujourd'hui.\n\n"
        "N'oubliez pas de pointer votre arrivée sur l'application Geo DaTeam "
        "pour que votre présence soit enregistrée.\n\n"
        "Cordialement,\n"
        "L'équipe Geo DaTeam\n"
    )


class EmailSender(Protocol):
    def send_attendance_reminder(self, email: str, name: str) -> bool:
        """Attempt one delivery; True on success. No retry contract."""

        raise NotImplementedError


@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True
    mail_from: str = "noreply@geodateam.com"


class SmtpEmailSender(EmailSender):
    def __init__(self, settings: SmtpSettings, *, timeout: float = 10.0):
        self._settings = settings
        self._timeout = timeout

    def _build_message(self, email: str, name: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = REMINDER_SUBJECT
        msg["From"] = self._settings.mail_from
        msg["To"] = email
        msg.set_content(reminder_text(name))
        return msg

    def send_attendance_reminder(self, email: str, name: str) -> bool:
        s = self._settings
        msg = self._build_message(email, name)
        try:
            with smtplib.SMTP(s.host, s.port, timeout=self._timeout) as smtp:
                if s.use_tls:
                    smtp.starttls()
                if s.username and s.password:
                    smtp.login(s.username, s.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("reminder_email_failed", to=email, error=str(e))
            return False
        logger.info("reminder_email_sent", to=email)
        return True


class LoggingEmailSender(EmailSender):
    """Simulation mode used when no SMTP host is configured."""

    def send_attendance_reminder(self, email: str, name: str) -> bool:
        logger.info("reminder_email_simulated", to=email, subject=REMINDER_SUBJECT, body=reminder_text(name))
        return True
