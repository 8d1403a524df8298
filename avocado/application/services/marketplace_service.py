import logging
import math
from typing import List, Optional

from ...domain.errors import ForbiddenError, NotFoundError, ValidationError
from ...domain.models import DEFAULT_CONDITION, ItemCategory, ItemSort, MarketplaceItem, User
from ...domain.ports.persistence import ItemRepository

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50


class MarketplaceService:
    """Application service for browsing and managing listings."""

    def __init__(self, item_repository: ItemRepository) -> None:
        self._items = item_repository

    def list_items(
        self,
        category: Optional[str] = None,
        item_type: Optional[str] = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        sort: Optional[str] = None,
    ) -> List[MarketplaceItem]:
        """
        Active listings, newest first unless ``sort`` says otherwise.

        ``sort`` is one of newest, price-low, price-high. ``limit`` is clamped
        to [0, 100].
        """
        category = (category or "").strip().lower() or None
        if category is not None:
            category = self._parse_category(category).value
        item_type = (item_type or "").strip() or None
        order = self._parse_sort(sort)
        limit = max(0, min(limit, MAX_PAGE_SIZE))
        offset = max(0, offset)
        if limit == 0:
            return []
        return self._items.list_active_items(
            category=category,
            item_type=item_type,
            limit=limit,
            offset=offset,
            sort=order,
        )

    def get_item(self, item_id: int) -> MarketplaceItem:
        item = self._items.get_item(item_id) if item_id > 0 else None
        if not item or not item.is_active:
            raise NotFoundError("Item not found")
        return item

    def create_item(
        self,
        owner: User,
        title: str,
        description: str,
        category: str,
        item_type: str,
        price: float,
        dorm_location: str,
        condition: Optional[str] = None,
    ) -> MarketplaceItem:
        title = (title or "").strip()
        description = (description or "").strip()
        item_type = (item_type or "").strip()
        dorm_location = (dorm_location or "").strip()
        if not title or not category or not item_type or not dorm_location:
            raise ValidationError("Missing required fields")

        parsed_category = self._parse_category(category)
        if not math.isfinite(price) or price < 0:
            raise ValidationError("Price must be a non-negative amount")
        if parsed_category is ItemCategory.FREE and price != 0:
            raise ValidationError("Free items must have a price of 0")

        item = self._items.create_item(
            owner_id=owner.id,
            title=title,
            description=description,
            category=parsed_category.value,
            item_type=item_type,
            price=round(float(price), 2),
            condition=(condition or "").strip() or DEFAULT_CONDITION,
            dorm_location=dorm_location,
        )
        logger.info("User %s listed item %s (%s)", owner.id, item.id, item.category.value)
        return item

    def deactivate_item(self, owner: User, item_id: int) -> None:
        item = self._items.get_item(item_id) if item_id > 0 else None
        if not item or not item.is_active:
            raise NotFoundError("Item not found")
        if item.owner_id != owner.id:
            raise ForbiddenError("Only the owner can remove this item")
        self._items.deactivate_item(item_id)
        logger.info("User %s removed item %s", owner.id, item_id)

    @staticmethod
    def _parse_sort(value: Optional[str]) -> ItemSort:
        value = (value or "").strip().lower()
        if not value:
            return ItemSort.NEWEST
        try:
            return ItemSort(value)
        except ValueError as exc:
            allowed = ", ".join(order.value for order in ItemSort)
            raise ValidationError(f"Sort must be one of: {allowed}") from exc

    @staticmethod
    def _parse_category(value: str) -> ItemCategory:
        try:
            return ItemCategory(value.strip().lower())
        except ValueError as exc:
            allowed = ", ".join(category.value for category in ItemCategory)
            raise ValidationError(f"Category must be one of: {allowed}") from exc
