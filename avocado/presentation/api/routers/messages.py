from typing import Optional

from fastapi import APIRouter, Depends, status

from ....application.services.message_service import MessageService
from ....core.dependencies import get_message_service
from ....domain.models import DirectMessage, User
from ..dependencies import ensure_acting_user, get_current_user
from ..schemas.messages import (
    ConversationResponse,
    DirectMessageResponse,
    MessageReadRequest,
    MessageSendRequest,
    MessageSendResponse,
)

router = APIRouter(prefix="/api/messages", tags=["Messages"])


@router.get("/get", response_model=ConversationResponse)
async def get_conversation(
    other_user_id: int,
    user_id: Optional[int] = None,
    user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
) -> ConversationResponse:
    """Thread with another user. Marks their messages to the caller as read."""
    ensure_acting_user(user, user_id, "user_id")
    messages = service.get_conversation(user.id, other_user_id)
    return ConversationResponse(
        messages=[_serialize_message(message) for message in messages],
        count=len(messages),
    )


@router.post("/send", response_model=MessageSendResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    payload: MessageSendRequest,
    user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
) -> MessageSendResponse:
    ensure_acting_user(user, payload.sender_id, "sender_id")
    message = service.send_message(
        sender_id=user.id,
        receiver_id=payload.receiver_id,
        content=payload.message,
        item_id=payload.item_id,
    )
    return MessageSendResponse(message_id=message.id)


@router.get("/unread", response_model=ConversationResponse)
async def get_unread(
    user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
) -> ConversationResponse:
    messages = service.get_unread(user.id)
    return ConversationResponse(
        messages=[_serialize_message(message) for message in messages],
        count=len(messages),
    )


@router.post("/read", response_model=DirectMessageResponse)
async def mark_read(
    payload: MessageReadRequest,
    user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
) -> DirectMessageResponse:
    """Mark one message addressed to the caller as read."""
    return _serialize_message(service.mark_read(user.id, payload.message_id))


def _serialize_message(message: DirectMessage) -> DirectMessageResponse:
    return DirectMessageResponse(
        message_id=message.id,
        sender_id=message.sender_id,
        receiver_id=message.receiver_id,
        item_id=message.item_id,
        message_content=message.content,
        is_read=message.is_read,
        created_at=message.created_at,
        read_at=message.read_at,
    )
