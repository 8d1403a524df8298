from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Protocol

from ..models import (
    DirectMessage,
    ItemSort,
    MarketplaceItem,
    ReminderRecord,
    Rental,
    User,
)


class UserRepository(Protocol):
    """Storage for accounts and their verification tokens."""

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
        ...

    def email_taken(self, personal_email: str, uni_email: str) -> bool:
        ...

    def get_by_id(self, user_id: int) -> Optional[User]:
        ...

    def get_by_login_email(self, email: str) -> Optional[User]:
        ...

    def consume_verification_token(self, token: str) -> Optional[int]:
        ...

    def reissue_verification_token(self, user_id: int, token: str, expires_at: datetime) -> None:
        ...


class ItemRepository(Protocol):
    """Storage for marketplace listings."""

    def create_item(
        self,
        owner_id: int,
        title: str,
        description: str,
        category: str,
        item_type: str,
        price: float,
        condition: str,
        dorm_location: str,
    ) -> MarketplaceItem:
        ...

    def get_item(self, item_id: int) -> Optional[MarketplaceItem]:
        ...

    def list_active_items(
        self,
        category: Optional[str],
        item_type: Optional[str],
        limit: int,
        offset: int,
        sort: ItemSort = ItemSort.NEWEST,
    ) -> List[MarketplaceItem]:
        ...

    def deactivate_item(self, item_id: int) -> None:
        ...


class MessageRepository(Protocol):
    """Storage for direct messages."""

    def create_message(
        self,
        sender_id: int,
        receiver_id: int,
        item_id: Optional[int],
        content: str,
    ) -> DirectMessage:
        ...

    def get_conversation(self, user_id: int, other_user_id: int, limit: int) -> List[DirectMessage]:
        ...

    def mark_conversation_read(self, receiver_id: int, sender_id: int) -> int:
        ...

    def get_message(self, message_id: int) -> Optional[DirectMessage]:
        ...

    def mark_message_read(self, message_id: int) -> None:
        ...

    def get_unread(self, receiver_id: int, limit: int) -> List[DirectMessage]:
        ...


class RentalRepository(Protocol):
    """Storage for rentals and the reminder bookkeeping."""

    def create_rental(
        self,
        item_id: int,
        owner_id: int,
        borrower_id: int,
        rental_due_date: date,
    ) -> Rental:
        ...

    def list_for_borrower(self, borrower_id: int) -> List[Rental]:
        ...

    def get_upcoming_reminders(self) -> List[ReminderRecord]:
        ...

    def mark_reminder_attempted(self, rental_id: int) -> None:
        ...

    def mark_reminder_sent(self, rental_id: int) -> None:
        ...
