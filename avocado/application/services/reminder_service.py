import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from ...domain.errors import AuthError
from ...domain.ports.persistence import RentalRepository
from ...services.email_service import EmailService

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReminderSweepResult:
    sent_count: int
    failed_count: int


class ReminderService:
    """Cron-triggered sweep that reminds borrowers about rentals due soon."""

    def __init__(
        self,
        rental_repository: RentalRepository,
        email_service: EmailService,
        api_key: Optional[str],
    ) -> None:
        self._rentals = rental_repository
        self._email = email_service
        self._api_key = api_key

    def authorize(self, api_key: Optional[str]) -> None:
        if not self._api_key or not api_key:
            raise AuthError("Unauthorized")
        if not secrets.compare_digest(api_key.encode("utf-8"), self._api_key.encode("utf-8")):
            raise AuthError("Unauthorized")

    def send_reminders(self, api_key: Optional[str]) -> ReminderSweepResult:
        """
        Send one reminder per due rental that has not been confirmed yet.

        Each record is stamped as attempted before dispatch and flagged as
        sent only after the email service confirms, so records whose dispatch
        failed or was interrupted are retried by the next sweep.
        """
        self.authorize(api_key)

        records = self._rentals.get_upcoming_reminders()
        logger.info("Reminder sweep started with %d due rentals", len(records))
        sent = 0
        failed = 0
        for record in records:
            self._rentals.mark_reminder_attempted(record.rental_id)
            delivered = self._email.send_rental_reminder(
                to_email=record.uni_email,
                title=record.title,
                due_date=record.rental_due_date,
            )
            if not delivered:
                failed += 1
                logger.warning("Reminder for rental %s not delivered; will retry", record.rental_id)
                continue
            self._rentals.mark_reminder_sent(record.rental_id)
            sent += 1

        logger.info("Reminder sweep finished: %d sent, %d failed", sent, failed)
        return ReminderSweepResult(sent_count=sent, failed_count=failed)
