from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class MessageSendRequest(BaseModel):
    sender_id: Optional[int] = None
    receiver_id: int = 0
    message: str = ""
    item_id: Optional[int] = None


class MessageReadRequest(BaseModel):
    message_id: int = 0


class MessageSendResponse(BaseModel):
    message: str = "Message sent"
    message_id: int


class DirectMessageResponse(BaseModel):
    message_id: int
    sender_id: int
    receiver_id: int
    item_id: Optional[int]
    message_content: str
    is_read: bool
    created_at: datetime
    read_at: Optional[datetime]


class ConversationResponse(BaseModel):
    messages: List[DirectMessageResponse]
    count: int
