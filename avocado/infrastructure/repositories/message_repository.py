"""Repository for direct messages."""

import sqlite3
from typing import List, Optional

from avocado.domain.errors import ValidationError
from avocado.domain.models.message import DirectMessage
from avocado.infrastructure.persistence.sqlite import (
    SQLiteDatabase,
    parse_datetime,
    parse_optional_datetime,
    utc_now,
)


class MessageRepository:
    """Repository for managing DirectMessage entities in SQLite."""

    def __init__(self, database: SQLiteDatabase):
        self.database = database

    def create_message(
        self,
        sender_id: int,
        receiver_id: int,
        item_id: Optional[int],
        content: str,
    ) -> DirectMessage:
        now = utc_now()
        try:
            with self.database.connection() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO direct_messages (
                        sender_id, receiver_id, item_id, message_content, is_read, created_at
                    )
                    VALUES (?, ?, ?, ?, 0, ?)
                    """,
                    (sender_id, receiver_id, item_id, content, now),
                )
                row = conn.execute(
                    "SELECT * FROM direct_messages WHERE id = ?", (cursor.lastrowid,)
                ).fetchone()
        except sqlite3.IntegrityError as exc:
            raise ValidationError("Unknown receiver or item") from exc
        return self._row_to_message(row)

    def get_conversation(self, user_id: int, other_user_id: int, limit: int) -> List[DirectMessage]:
        """Messages exchanged between the two users, oldest first."""
        with self.database.connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM direct_messages
                WHERE (sender_id = ? AND receiver_id = ?)
                   OR (sender_id = ? AND receiver_id = ?)
                ORDER BY created_at ASC, id ASC
                LIMIT ?
                """,
                (user_id, other_user_id, other_user_id, user_id, limit),
            ).fetchall()
        return [self._row_to_message(row) for row in rows]

    def mark_conversation_read(self, receiver_id: int, sender_id: int) -> int:
        """Mark every unread message from ``sender_id`` to ``receiver_id`` as read."""
        now = utc_now()
        with self.database.connection() as conn:
            cursor = conn.execute(
                """
                UPDATE direct_messages
                SET is_read = 1, read_at = ?
                WHERE receiver_id = ? AND sender_id = ? AND is_read = 0
                """,
                (now, receiver_id, sender_id),
            )
            return cursor.rowcount

    def get_message(self, message_id: int) -> Optional[DirectMessage]:
        with self.database.connection() as conn:
            row = conn.execute(
                "SELECT * FROM direct_messages WHERE id = ?", (message_id,)
            ).fetchone()
        return self._row_to_message(row) if row else None

    def mark_message_read(self, message_id: int) -> None:
        now = utc_now()
        with self.database.connection() as conn:
            conn.execute(
                "UPDATE direct_messages SET is_read = 1, read_at = ? WHERE id = ? AND is_read = 0",
                (now, message_id),
            )

    def get_unread(self, receiver_id: int, limit: int) -> List[DirectMessage]:
        with self.database.connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM direct_messages
                WHERE receiver_id = ? AND is_read = 0
                ORDER BY created_at DESC, id DESC
                LIMIT ?
                """,
                (receiver_id, limit),
            ).fetchall()
        return [self._row_to_message(row) for row in rows]

    @staticmethod
    def _row_to_message(row: sqlite3.Row) -> DirectMessage:
        return DirectMessage(
            id=row["id"],
            sender_id=row["sender_id"],
            receiver_id=row["receiver_id"],
            item_id=row["item_id"],
            content=row["message_content"],
            is_read=bool(row["is_read"]),
            created_at=parse_datetime(row["created_at"]),
            read_at=parse_optional_datetime(row["read_at"]),
        )
