"""Direct message model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(slots=True)
class DirectMessage:
    id: int
    sender_id: int
    receiver_id: int
    item_id: Optional[int]
    content: str
    is_read: bool
    created_at: datetime
    read_at: Optional[datetime]
