from typing import List, Optional

from ...domain.errors import ForbiddenError, NotFoundError, ValidationError
from ...domain.models import DirectMessage
from ...domain.ports.persistence import MessageRepository

CONVERSATION_LIMIT = 100
UNREAD_LIMIT = 50


class MessageService:
    """Direct messaging between students."""

    def __init__(self, message_repository: MessageRepository) -> None:
        self._messages = message_repository

    def get_conversation(self, user_id: int, other_user_id: int) -> List[DirectMessage]:
        """
        Return the thread between two users, oldest first, capped at 100.

        Every message from ``other_user_id`` to ``user_id`` is marked read
        before the thread is loaded, so the result reflects the stored state.
        """
        if user_id <= 0 or other_user_id <= 0:
            raise ValidationError("Invalid user IDs")
        self._messages.mark_conversation_read(receiver_id=user_id, sender_id=other_user_id)
        return self._messages.get_conversation(user_id, other_user_id, CONVERSATION_LIMIT)

    def send_message(
        self,
        sender_id: int,
        receiver_id: int,
        content: str,
        item_id: Optional[int] = None,
    ) -> DirectMessage:
        content = (content or "").strip()
        if sender_id <= 0 or receiver_id <= 0 or not content:
            raise ValidationError("Missing required fields")
        if sender_id == receiver_id:
            raise ValidationError("Cannot send a message to yourself")
        return self._messages.create_message(
            sender_id=sender_id,
            receiver_id=receiver_id,
            item_id=item_id if item_id and item_id > 0 else None,
            content=content,
        )

    def get_unread(self, user_id: int) -> List[DirectMessage]:
        return self._messages.get_unread(user_id, UNREAD_LIMIT)

    def mark_read(self, user_id: int, message_id: int) -> DirectMessage:
        """Mark a single message read. Only its receiver may do so."""
        message = self._messages.get_message(message_id) if message_id > 0 else None
        if not message:
            raise NotFoundError("Message not found")
        if message.receiver_id != user_id:
            raise ForbiddenError("Only the receiver can mark this message as read")
        if message.is_read:
            return message
        self._messages.mark_message_read(message_id)
        return self._messages.get_message(message_id)
