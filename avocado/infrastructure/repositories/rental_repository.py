"""Repository for rentals and reminder bookkeeping."""

import sqlite3
from datetime import date
from typing import List

from avocado.domain.errors import ValidationError
from avocado.domain.models.rental import ReminderRecord, Rental
from avocado.infrastructure.persistence.sqlite import (
    SQLiteDatabase,
    parse_date,
    parse_datetime,
    parse_optional_datetime,
    utc_now,
)


class RentalRepository:
    """Repository for managing Rental entities in SQLite."""

    def __init__(self, database: SQLiteDatabase):
        self.database = database

    def create_rental(
        self,
        item_id: int,
        owner_id: int,
        borrower_id: int,
        rental_due_date: date,
    ) -> Rental:
        now = utc_now()
        try:
            with self.database.connection() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO rentals (
                        item_id, owner_id, borrower_id, rental_due_date, reminder_sent, created_at
                    )
                    VALUES (?, ?, ?, ?, 0, ?)
                    """,
                    (item_id, owner_id, borrower_id, rental_due_date.isoformat(), now),
                )
                row = conn.execute(
                    """
                    SELECT r.*, m.title AS item_title
                    FROM rentals r JOIN marketplace_items m ON m.id = r.item_id
                    WHERE r.id = ?
                    """,
                    (cursor.lastrowid,),
                ).fetchone()
        except sqlite3.IntegrityError as exc:
            raise ValidationError("Unknown item or user") from exc
        return self._row_to_rental(row)

    def list_for_borrower(self, borrower_id: int) -> List[Rental]:
        with self.database.connection() as conn:
            rows = conn.execute(
                """
                SELECT r.*, m.title AS item_title
                FROM rentals r JOIN marketplace_items m ON m.id = r.item_id
                WHERE r.borrower_id = ?
                ORDER BY r.rental_due_date ASC, r.id ASC
                """,
                (borrower_id,),
            ).fetchall()
        return [self._row_to_rental(row) for row in rows]

    def get_upcoming_reminders(self) -> List[ReminderRecord]:
        with self.database.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM upcoming_reminders_view ORDER BY rental_due_date ASC, rental_id ASC"
            ).fetchall()
        return [
            ReminderRecord(
                rental_id=row["rental_id"],
                borrower_name=row["borrower_name"],
                uni_email=row["uni_email"],
                title=row["title"],
                rental_due_date=parse_date(row["rental_due_date"]),
            )
            for row in rows
        ]

    def mark_reminder_attempted(self, rental_id: int) -> None:
        with self.database.connection() as conn:
            conn.execute(
                "UPDATE rentals SET reminder_attempted_at = ? WHERE id = ?",
                (utc_now(), rental_id),
            )

    def mark_reminder_sent(self, rental_id: int) -> None:
        with self.database.connection() as conn:
            conn.execute(
                "UPDATE rentals SET reminder_sent = 1, reminder_sent_at = ? WHERE id = ?",
                (utc_now(), rental_id),
            )

    @staticmethod
    def _row_to_rental(row: sqlite3.Row) -> Rental:
        return Rental(
            id=row["id"],
            item_id=row["item_id"],
            owner_id=row["owner_id"],
            borrower_id=row["borrower_id"],
            rental_due_date=parse_date(row["rental_due_date"]),
            reminder_sent=bool(row["reminder_sent"]),
            reminder_attempted_at=parse_optional_datetime(row["reminder_attempted_at"]),
            reminder_sent_at=parse_optional_datetime(row["reminder_sent_at"]),
            created_at=parse_datetime(row["created_at"]),
            item_title=row["item_title"],
        )
