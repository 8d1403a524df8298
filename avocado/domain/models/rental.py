"""Rental and reminder models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(slots=True)
class Rental:
    """
    A borrower renting a listed item until a due date.

    ``reminder_attempted_at`` is stamped before a reminder is dispatched and
    ``reminder_sent`` is only set once dispatch is confirmed, so a rental with
    an attempt but no confirmation is picked up again by the next sweep.
    """

    id: int
    item_id: int
    owner_id: int
    borrower_id: int
    rental_due_date: date
    reminder_sent: bool
    reminder_attempted_at: Optional[datetime]
    reminder_sent_at: Optional[datetime]
    created_at: datetime
    item_title: Optional[str] = None


@dataclass(slots=True)
class ReminderRecord:
    """Row of the upcoming reminders view."""

    rental_id: int
    borrower_name: str
    uni_email: str
    title: str
    rental_due_date: date
