"""Repository for User persistence."""

import sqlite3
from datetime import datetime
from typing import Optional

from avocado.domain.errors import ConflictError
from avocado.domain.models.user import User
from avocado.infrastructure.persistence.sqlite import (
    SQLiteDatabase,
    format_datetime,
    parse_datetime,
    parse_optional_datetime,
    utc_now,
)


class UserRepository:
    """Repository for managing User entities and verification tokens in SQLite."""

    def __init__(self, database: SQLiteDatabase):
        self.database = database

    def create(
        self,
        name: str,
        personal_email: str,
        uni_email: str,
        password_hash: str,
        avatar_color: str,
        verification_token: str,
        verification_expires_at: datetime,
    ) -> User:
        """
        Create a new unverified user together with its first verification token.

        Raises:
            ConflictError: If either email is already registered. The UNIQUE
                constraints are the source of truth, any pre-check is only a
                shortcut.
        """
        now = utc_now()
        try:
            with self.database.connection() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO users (
                        name, personal_email, uni_email, password_hash,
                        is_verified, role_id, avatar_color, created_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, 0, 1, ?, ?, ?)
                    """,
                    (name, personal_email, uni_email, password_hash, avatar_color, now, now),
                )
                user_id = cursor.lastrowid
                conn.execute(
                    """
                    INSERT INTO verification_tokens (token, user_id, created_at, expires_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (verification_token, user_id, now, format_datetime(verification_expires_at)),
                )
                row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        except sqlite3.IntegrityError as exc:
            raise ConflictError("User with this email already exists") from exc

        return self._row_to_user(row)

    def email_taken(self, personal_email: str, uni_email: str) -> bool:
        """Check whether either address is used by any account, in either column."""
        with self.database.connection() as conn:
            row = conn.execute(
                """
                SELECT 1 FROM users
                WHERE personal_email IN (?, ?) OR uni_email IN (?, ?)
                LIMIT 1
                """,
                (personal_email, uni_email, personal_email, uni_email),
            ).fetchone()
        return row is not None

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        with self.database.connection() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()

        if not row:
            return None

        return self._row_to_user(row)

    def get_by_login_email(self, email: str) -> Optional[User]:
        """Get user by personal or university email."""
        with self.database.connection() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE personal_email = ? OR uni_email = ?",
                (email, email),
            ).fetchone()

        if not row:
            return None

        return self._row_to_user(row)

    def consume_verification_token(self, token: str) -> Optional[int]:
        """
        Consume an active token and mark its owner verified, in one transaction.

        Returns:
            The verified user's id, or None when the token is unknown,
            expired or already consumed.
        """
        now = utc_now()
        with self.database.connection() as conn:
            cursor = conn.execute(
                """
                UPDATE verification_tokens
                SET consumed_at = ?
                WHERE token = ? AND consumed_at IS NULL AND expires_at > ?
                """,
                (now, token, now),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(
                "SELECT user_id FROM verification_tokens WHERE token = ?", (token,)
            ).fetchone()
            user_id = row["user_id"]
            conn.execute(
                """
                UPDATE users
                SET is_verified = 1, verification_date = ?, updated_at = ?
                WHERE id = ? AND is_verified = 0
                """,
                (now, now, user_id),
            )
        return user_id

    def reissue_verification_token(self, user_id: int, token: str, expires_at: datetime) -> None:
        """Revoke every active token of the user and store a new one."""
        now = utc_now()
        with self.database.connection() as conn:
            conn.execute(
                """
                UPDATE verification_tokens
                SET consumed_at = ?
                WHERE user_id = ? AND consumed_at IS NULL
                """,
                (now, user_id),
            )
            conn.execute(
                """
                INSERT INTO verification_tokens (token, user_id, created_at, expires_at)
                VALUES (?, ?, ?, ?)
                """,
                (token, user_id, now, format_datetime(expires_at)),
            )

    def _row_to_user(self, row: sqlite3.Row) -> User:
        """Convert database row to User entity."""
        return User(
            id=row["id"],
            name=row["name"],
            personal_email=row["personal_email"],
            uni_email=row["uni_email"],
            password_hash=row["password_hash"],
            is_verified=bool(row["is_verified"]),
            verification_date=parse_optional_datetime(row["verification_date"]),
            role_id=row["role_id"],
            avatar_color=row["avatar_color"],
            created_at=parse_datetime(row["created_at"]),
            updated_at=parse_datetime(row["updated_at"]),
        )
