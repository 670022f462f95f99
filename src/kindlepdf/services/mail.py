"""Delivery of the rendered PDF to a Kindle address over SMTP"""

import logging
import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage
from email.utils import formataddr

from kindlepdf.config import Settings


logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465
BODY_TEXT = "Sent from kindlepdf"


class Mailer(ABC):
    @abstractmethod
    def send(self, pdf: bytes, filename: str) -> None:
        raise NotImplementedError


def build_message(settings: Settings, pdf: bytes, filename: str) -> EmailMessage:
    """Email with the PDF attached; the subject is the file name without '.pdf'."""
    msg = EmailMessage()
    msg["From"] = formataddr((settings.author, settings.sender_email)) if settings.author else settings.sender_email
    msg["To"] = settings.kindle_email
    msg["Subject"] = filename[:-4] if filename.lower().endswith(".pdf") else filename
    msg.set_content(BODY_TEXT)
    msg.add_attachment(pdf, maintype="application", subtype="pdf", filename=filename)
    return msg


def smtp_port(settings: Settings) -> int:
    try:
        return int(settings.smtp_port)
    except ValueError as e:
        raise ValueError(f"Invalid SMTP port: {settings.smtp_port!r}") from e


class SmtpMailer(Mailer):
    """Send through the configured SMTP server; port 465 uses implicit TLS, others STARTTLS when offered."""

    def __init__(self, settings: Settings, timeout: float = 60.0):
        self.settings = settings
        self.timeout = timeout

    def _connect(self) -> smtplib.SMTP:
        port = smtp_port(self.settings)
        if port == IMPLICIT_TLS_PORT:
            return smtplib.SMTP_SSL(self.settings.smtp_host, port, timeout=self.timeout)
        smtp = smtplib.SMTP(self.settings.smtp_host, port, timeout=self.timeout)
        smtp.ehlo()
        if smtp.has_extn("starttls"):
            smtp.starttls()
            smtp.ehlo()
        return smtp

    def send(self, pdf: bytes, filename: str) -> None:
        msg = build_message(self.settings, pdf, filename)
        with self._connect() as smtp:
            smtp.login(self.settings.smtp_user, self.settings.smtp_pass)
            smtp.send_message(msg)
        logger.info("Sent %s to %s via %s", filename, self.settings.kindle_email, self.settings.smtp_host)
