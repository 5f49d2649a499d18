"""Email delivery over SMTP."""

import smtplib
from email.message import EmailMessage

from django.conf import settings

import structlog

logger = structlog.get_logger(__name__)


class EmailService:
    """Sends plain-text email through the configured SMTP server."""

    def __init__(self) -> None:
        """Initialize email service with SMTP configuration."""
        self.smtp_host = settings.EMAIL_HOST
        self.smtp_port = settings.EMAIL_PORT
        self.smtp_user = settings.EMAIL_HOST_USER
        self.smtp_password = settings.EMAIL_HOST_PASSWORD
        self.use_tls = settings.EMAIL_USE_TLS
        self.from_email = settings.DEFAULT_FROM_EMAIL

    def send_mail(self, to_email: str, subject: str, body: str) -> None:
        """Send one email.

        Args:
            to_email: Recipient address
            subject: Subject line
            body: Plain-text body

        Raises:
            smtplib.SMTPException: If the SMTP exchange fails
            OSError: If the SMTP server cannot be reached
        """
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to_email
        msg.set_content(body)

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                if self.use_tls:
                    server.starttls()
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg)
        except smtplib.SMTPException as e:
            logger.error("email_send_failed", to_email=to_email, subject=subject, error=str(e))
            raise

        logger.info("email_sent", to_email=to_email, subject=subject)
