"""Tests for email background jobs."""

import smtplib
from datetime import timedelta
from unittest.mock import Mock, patch

from django.test import SimpleTestCase

from core.jobs.email_jobs import enqueue_mail, send_mail_job


class TestEnqueueMail(SimpleTestCase):
    """Test suite for enqueue_mail."""

    @patch("core.jobs.email_jobs.django_rq.get_queue")
    def test_enqueue_mail(self, mock_get_queue):
        """Test a mail request becomes an RQ job."""
        mock_get_queue.return_value.enqueue.return_value = Mock(id="job-1")

        job_id = enqueue_mail("user@example.com", "Subject", "Body")

        self.assertEqual(job_id, "job-1")
        mock_get_queue.assert_called_once_with("default")
        mock_get_queue.return_value.enqueue.assert_called_once_with(
            send_mail_job, "user@example.com", "Subject", "Body"
        )


class TestSendMailJob(SimpleTestCase):
    """Test suite for send_mail_job."""

    @patch("core.jobs.email_jobs.EmailService")
    def test_send_mail_job_success(self, mock_email_service):
        """Test successful email sending."""
        send_mail_job("user@example.com", "Subject", "Body")

        mock_email_service.return_value.send_mail.assert_called_once_with(
            to_email="user@example.com", subject="Subject", body="Body"
        )

    @patch("core.jobs.email_jobs.django_rq.get_scheduler")
    @patch("core.jobs.email_jobs.EmailService")
    def test_send_mail_job_retry_on_failure(self, mock_email_service, mock_get_scheduler):
        """Test job schedules a retry with backoff on failure."""
        mock_email_service.return_value.send_mail.side_effect = smtplib.SMTPException(
            "SMTP error"
        )

        send_mail_job("user@example.com", "Subject", "Body", attempt=2)

        mock_get_scheduler.return_value.enqueue_in.assert_called_once_with(
            timedelta(minutes=10),
            send_mail_job,
            "user@example.com",
            "Subject",
            "Body",
            3,
        )

    @patch("core.jobs.email_jobs.django_rq.get_scheduler")
    @patch("core.jobs.email_jobs.EmailService")
    def test_send_mail_job_connection_error_is_retried(
        self, mock_email_service, mock_get_scheduler
    ):
        """Test unreachable SMTP servers are retried too."""
        mock_email_service.return_value.send_mail.side_effect = ConnectionRefusedError()

        send_mail_job("user@example.com", "Subject", "Body")

        mock_get_scheduler.return_value.enqueue_in.assert_called_once()

    @patch("core.jobs.email_jobs.django_rq.get_scheduler")
    @patch("core.jobs.email_jobs.EmailService")
    def test_send_mail_job_gives_up_after_max_retries(
        self, mock_email_service, mock_get_scheduler
    ):
        """Test no retry is scheduled once attempts run out."""
        mock_email_service.return_value.send_mail.side_effect = smtplib.SMTPException(
            "SMTP error"
        )

        send_mail_job("user@example.com", "Subject", "Body", attempt=3)

        mock_get_scheduler.assert_not_called()
