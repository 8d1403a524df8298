"""Marketplace listing model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ItemCategory(str, Enum):
    BUY = "buy"
    SELL = "sell"
    RENT = "rent"
    FREE = "free"


class ItemSort(str, Enum):
    NEWEST = "newest"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"


DEFAULT_CONDITION = "Good"


@dataclass(slots=True)
class MarketplaceItem:
    """
    A listing posted by a student.

    Attributes:
        id: Unique identifier
        owner_id: User who posted the listing
        title: Short title
        description: Free-text description
        category: One of buy/sell/rent/free
        item_type: Kind of item (furniture, electronics, ...)
        price: Non-negative amount; always 0 for free listings
        condition: Free-text condition, "Good" when omitted
        dorm_location: Where the item can be picked up
        is_active: Listed only while True
        created_at: Posting timestamp
        seller_name: Owner display name when loaded with the owner join
    """

    id: int
    owner_id: int
    title: str
    description: str
    category: ItemCategory
    item_type: str
    price: float
    condition: str
    dorm_location: str
    is_active: bool
    created_at: datetime
    seller_name: Optional[str] = None
