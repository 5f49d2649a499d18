"""Background jobs for sending email.

Mail requests are accepted by the API and sent from an RQ worker. SMTP
failures are retried through the RQ scheduler with exponential backoff.
"""

import smtplib
from datetime import timedelta

from django.conf import settings

import django_rq
import structlog

from core.services.email_service import EmailService

logger = structlog.get_logger(__name__)


def enqueue_mail(to_email: str, subject: str, body: str) -> str:
    """Queue an email for delivery. Returns the RQ job ID."""
    job = django_rq.get_queue("default").enqueue(send_mail_job, to_email, subject, body)
    logger.info("mail_queued", to_email=to_email, job_id=job.id)
    return job.id


def send_mail_job(to_email: str, subject: str, body: str, attempt: int = 1) -> None:
    """Send an email, rescheduling itself on SMTP failure.

    Args:
        to_email: Recipient address.
        subject: Subject line.
        body: Plain-text body.
        attempt: Delivery attempt number, starting at 1.
    """
    try:
        EmailService().send_mail(to_email=to_email, subject=subject, body=body)
    except (smtplib.SMTPException, OSError) as e:
        if attempt < settings.EMAIL_MAX_RETRIES:
            delay_minutes = 5 * (2 ** (attempt - 1))
            django_rq.get_scheduler("default").enqueue_in(
                timedelta(minutes=delay_minutes),
                send_mail_job,
                to_email,
                subject,
                body,
                attempt + 1,
            )
            logger.warning(
                "mail_send_failed_retry_scheduled",
                to_email=to_email,
                attempt=attempt,
                delay_minutes=delay_minutes,
                error=str(e),
            )
            return

        logger.error(
            "mail_send_failed_permanently",
            to_email=to_email,
            attempts=attempt,
            error=str(e),
        )
        return

    logger.info("mail_sent", to_email=to_email, attempt=attempt)
