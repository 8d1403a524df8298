"""Domain models for the Avocado marketplace."""

from .item import DEFAULT_CONDITION, ItemCategory, ItemSort, MarketplaceItem
from .message import DirectMessage
from .rental import ReminderRecord, Rental
from .user import User

__all__ = [
    "DEFAULT_CONDITION",
    "DirectMessage",
    "ItemCategory",
    "ItemSort",
    "MarketplaceItem",
    "ReminderRecord",
    "Rental",
    "User",
]
