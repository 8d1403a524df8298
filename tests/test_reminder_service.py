from datetime import date, timedelta

import pytest

from avocado.application.services.reminder_service import ReminderService
from avocado.domain.errors import AuthError
from avocado.domain.models import ReminderRecord


class FakeRentalRepository:
    def __init__(self, records):
        self.records = list(records)
        self.calls = []
        self.sent = set()

    def get_upcoming_reminders(self):
        return [record for record in self.records if record.rental_id not in self.sent]

    def mark_reminder_attempted(self, rental_id):
        self.calls.append(("attempted", rental_id))

    def mark_reminder_sent(self, rental_id):
        self.calls.append(("sent", rental_id))
        self.sent.add(rental_id)


class FlakyEmailService:
    def __init__(self, failures):
        self.failures = set(failures)
        self.delivered = []

    def send_rental_reminder(self, to_email, title, due_date):
        if to_email in self.failures:
            self.failures.discard(to_email)
            return False
        self.delivered.append(to_email)
        return True


def _record(rental_id, email):
    return ReminderRecord(
        rental_id=rental_id,
        borrower_name="Bob",
        uni_email=email,
        title="Projector",
        rental_due_date=date.today() + timedelta(days=1),
    )


def test_attempt_is_stamped_before_dispatch_and_sent_after():
    rentals = FakeRentalRepository([_record(1, "b@uni.edu")])
    service = ReminderService(rentals, FlakyEmailService([]), api_key="k")

    result = service.send_reminders("k")

    assert result.sent_count == 1
    assert rentals.calls == [("attempted", 1), ("sent", 1)]


def test_failed_dispatch_is_retried_by_next_sweep():
    rentals = FakeRentalRepository([_record(1, "b@uni.edu"), _record(2, "c@uni.edu")])
    email = FlakyEmailService(["c@uni.edu"])
    service = ReminderService(rentals, email, api_key="k")

    first = service.send_reminders("k")
    assert (first.sent_count, first.failed_count) == (1, 1)
    assert ("sent", 2) not in rentals.calls

    second = service.send_reminders("k")
    assert (second.sent_count, second.failed_count) == (1, 0)
    assert email.delivered == ["b@uni.edu", "c@uni.edu"]

    third = service.send_reminders("k")
    assert third.sent_count == 0


@pytest.mark.parametrize("configured, given", [(None, "k"), ("k", None), ("k", "other"), ("", "")])
def test_rejects_bad_or_unconfigured_key(configured, given):
    service = ReminderService(FakeRentalRepository([]), FlakyEmailService([]), api_key=configured)
    with pytest.raises(AuthError):
        service.send_reminders(given)
