"""Service for sending emails."""

import logging
import smtplib
from datetime import date
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails via SMTP.

    When SMTP is not configured the service only logs what it would send and
    reports success, which is what development and tests rely on.
    """

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: str = "Avocado",
    ):
        self.smtp_host = smtp_host or ""
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username or ""
        self.smtp_password = smtp_password or ""
        self.from_email = from_email or ""
        self.from_name = from_name
        self.enabled = bool(self.smtp_host and self.smtp_username and self.from_email)

    def send_verification_email(self, to_email: str, verification_token: str, base_url: str) -> bool:
        """
        Send email verification email.

        Args:
            to_email: Recipient email
            verification_token: Verification token
            base_url: Base URL for verification link

        Returns:
            True if sent successfully, False otherwise
        """
        verification_url = f"{base_url}/verify?token={verification_token}"
        if not self.enabled:
            logger.info("Email disabled; verification link for %s: %s", to_email, verification_url)
            return True

        subject = "Verify your university email - Avocado"
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <h1 style="color: #558b2f;">Avocado</h1>
                <p>Thanks for joining the campus marketplace. Confirm your university email to start
                   buying, selling and renting with other students:</p>
                <p style="text-align: center; margin: 30px 0;">
                    <a href="{verification_url}"
                       style="background-color: #558b2f; color: white; padding: 15px 30px;
                              text-decoration: none; border-radius: 5px;">
                        Verify email
                    </a>
                </p>
                <p style="color: #64748b; font-size: 14px;">If you did not sign up, ignore this email.</p>
            </body>
        </html>
        """
        text_body = f"""
        Avocado - Verify your email

        Confirm your university email by opening the link below:
        {verification_url}

        If you did not sign up, ignore this email.
        """

        return self._send_email(to_email, subject, html_body, text_body)

    def send_rental_reminder(self, to_email: str, title: str, due_date: date) -> bool:
        """Remind a borrower that a rental is due soon."""
        subject = f"Rental Due Reminder - {title}"
        text_body = (
            f"Your rental of '{title}' is due on {due_date.isoformat()}. "
            "Please return it on time."
        )
        if not self.enabled:
            logger.info("Email disabled; rental reminder for %s: %s", to_email, text_body)
            return True

        html_body = f"<html><body><p>{text_body}</p></body></html>"
        return self._send_email(to_email, subject, html_body, text_body)

    def _send_email(self, to_email: str, subject: str, html_body: str, text_body: str) -> bool:
        """
        Send an email via SMTP.

        Returns:
            True if sent successfully, False otherwise
        """
        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = f"{self.from_name} <{self.from_email}>"
            msg["To"] = to_email

            msg.attach(MIMEText(text_body, "plain", "utf-8"))
            msg.attach(MIMEText(html_body, "html", "utf-8"))

            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)

            return True

        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", to_email, exc)
            return False
