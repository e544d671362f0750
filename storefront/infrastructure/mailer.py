"""SMTP mail sender for account emails."""

import smtplib
from email.mime.text import MIMEText
from typing import Protocol

import structlog

from storefront.config import get_settings

settings = get_settings()
logger = structlog.get_logger(__name__)


class Mailer(Protocol):
    def send(self, email: str, subject: str, message: str) -> None:
        """Deliver a plain-text message. Raises on failure."""
        ...


class SMTPMailer:
    """Sends plain-text mail through an SMTP server with STARTTLS."""

    def __init__(self, host: str, port: int, user: str, password: str, sender: str):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or user

        if not self.password:
            logger.warning("SMTP_PASSWORD not configured. Email sending will fail.")

    def send(self, email: str, subject: str, message: str) -> None:
        msg = MIMEText(message, "plain", "utf-8")
        msg["From"] = self.sender
        msg["To"] = email
        msg["Subject"] = subject

        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            server.starttls()
            if self.user:
                server.login(self.user, self.password)
            server.sendmail(self.sender, [email], msg.as_string())

        logger.info("Email sent", to=email, subject=subject)


def build_mailer() -> SMTPMailer:
    return SMTPMailer(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        user=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        sender=settings.SMTP_MAIL,
    )
