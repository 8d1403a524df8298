"""User domain model for student accounts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(slots=True)
class User:
    """
    Registered student account.

    Attributes:
        id: Unique identifier
        name: Display name
        personal_email: Personal address used to log in (unique)
        uni_email: University address on an academic domain (unique)
        password_hash: bcrypt hash of the password
        is_verified: Whether the university address has been confirmed
        verification_date: When the account was verified
        role_id: Role identifier (1 = student)
        avatar_color: Hex color used for the avatar badge
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """

    id: int
    name: str
    personal_email: str
    uni_email: str
    password_hash: str
    is_verified: bool
    verification_date: Optional[datetime]
    role_id: int
    avatar_color: str
    created_at: datetime
    updated_at: datetime

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.personal_email} verified={self.is_verified}>"

