import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterator

from ...domain.errors import InternalError, StoreUnavailableError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    personal_email TEXT NOT NULL UNIQUE,
    uni_email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    is_verified INTEGER NOT NULL DEFAULT 0,
    verification_date TEXT,
    role_id INTEGER NOT NULL DEFAULT 1,
    avatar_color TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TRIGGER IF NOT EXISTS users_email_cross_unique_insert
BEFORE INSERT ON users
WHEN EXISTS (
    SELECT 1 FROM users
    WHERE personal_email IN (NEW.personal_email, NEW.uni_email)
       OR uni_email IN (NEW.personal_email, NEW.uni_email)
)
BEGIN
    SELECT RAISE(ABORT, 'email already registered');
END;

CREATE TRIGGER IF NOT EXISTS users_email_cross_unique_update
BEFORE UPDATE OF personal_email, uni_email ON users
WHEN EXISTS (
    SELECT 1 FROM users
    WHERE id != NEW.id
      AND (personal_email IN (NEW.personal_email, NEW.uni_email)
           OR uni_email IN (NEW.personal_email, NEW.uni_email))
)
BEGIN
    SELECT RAISE(ABORT, 'email already registered');
END;

CREATE TABLE IF NOT EXISTS verification_tokens (
    token TEXT PRIMARY KEY,
    user_id INTEGER NOT NULL,
    created_at TEXT NOT NULL,
    expires_at TEXT NOT NULL,
    consumed_at TEXT,
    FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_verification_tokens_user
    ON verification_tokens(user_id);

CREATE TABLE IF NOT EXISTS marketplace_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id INTEGER NOT NULL,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    category TEXT NOT NULL CHECK (category IN ('buy', 'sell', 'rent', 'free')),
    item_type TEXT NOT NULL,
    price REAL NOT NULL DEFAULT 0 CHECK (price >= 0),
    condition TEXT NOT NULL DEFAULT 'Good',
    dorm_location TEXT NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    FOREIGN KEY(owner_id) REFERENCES users(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_marketplace_items_active_created
    ON marketplace_items(is_active, created_at DESC);

CREATE TABLE IF NOT EXISTS direct_messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    sender_id INTEGER NOT NULL,
    receiver_id INTEGER NOT NULL,
    item_id INTEGER,
    message_content TEXT NOT NULL,
    is_read INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    read_at TEXT,
    FOREIGN KEY(sender_id) REFERENCES users(id) ON DELETE CASCADE,
    FOREIGN KEY(receiver_id) REFERENCES users(id) ON DELETE CASCADE,
    FOREIGN KEY(item_id) REFERENCES marketplace_items(id) ON DELETE SET NULL
);

CREATE INDEX IF NOT EXISTS idx_direct_messages_pair
    ON direct_messages(sender_id, receiver_id, created_at);

CREATE TABLE IF NOT EXISTS rentals (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    item_id INTEGER NOT NULL,
    owner_id INTEGER NOT NULL,
    borrower_id INTEGER NOT NULL,
    rental_due_date TEXT NOT NULL,
    reminder_sent INTEGER NOT NULL DEFAULT 0,
    reminder_attempted_at TEXT,
    reminder_sent_at TEXT,
    created_at TEXT NOT NULL,
    FOREIGN KEY(item_id) REFERENCES marketplace_items(id) ON DELETE CASCADE,
    FOREIGN KEY(owner_id) REFERENCES users(id) ON DELETE CASCADE,
    FOREIGN KEY(borrower_id) REFERENCES users(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_rentals_due
    ON rentals(reminder_sent, rental_due_date);

CREATE VIEW IF NOT EXISTS upcoming_reminders_view AS
    SELECT
        r.id AS rental_id,
        u.name AS borrower_name,
        u.uni_email AS uni_email,
        m.title AS title,
        r.rental_due_date AS rental_due_date
    FROM rentals r
    JOIN users u ON u.id = r.borrower_id
    JOIN marketplace_items m ON m.id = r.item_id
    WHERE r.reminder_sent = 0
      AND r.rental_due_date BETWEEN date('now') AND date('now', '+1 day');
"""


class SQLiteDatabase:
    """SQLite store. Every operation gets its own connection and transaction."""

    def __init__(self, path: Path, timeout: int = 5) -> None:
        self._path = path
        self._timeout = timeout

    @property
    def path(self) -> Path:
        return self._path

    def initialize(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self.connection() as conn:
            conn.executescript(_SCHEMA)
        logger.info("Database ready at %s", self._path)

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection inside a transaction.

        Commits on success and rolls back on any exception. Integrity errors
        propagate untouched so the owning repository can translate them;
        other driver errors are mapped to redacted domain errors.
        """
        try:
            conn = sqlite3.connect(self._path, timeout=self._timeout)
        except sqlite3.Error as exc:
            logger.error("Unable to open database %s: %s", self._path, exc)
            raise StoreUnavailableError("Database temporarily unavailable.") from exc
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            with conn:
                yield conn
        except sqlite3.IntegrityError:
            raise
        except sqlite3.OperationalError as exc:
            logger.exception("Transient database failure")
            raise StoreUnavailableError("Database temporarily unavailable.") from exc
        except sqlite3.Error as exc:
            logger.exception("Database failure")
            raise InternalError("Database error.") from exc
        finally:
            conn.close()


def utc_now() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def parse_datetime(value: str) -> datetime:
    try:
        result = datetime.fromisoformat(value)
    except ValueError:
        # Fallback for timestamps written by SQLite itself
        result = datetime.strptime(value, "%Y-%m-%d %H:%M:%S")
    if result.tzinfo is None:
        return result.replace(tzinfo=timezone.utc)
    return result.astimezone(timezone.utc)


def parse_optional_datetime(value):
    return parse_datetime(value) if value else None


def parse_date(value: str) -> date:
    return date.fromisoformat(value[:10])


def format_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(microsecond=0).isoformat()
