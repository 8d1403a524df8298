import logging
from datetime import date, datetime, timezone
from typing import List

from ...domain.errors import NotFoundError, ValidationError
from ...domain.models import ItemCategory, Rental, User
from ...domain.ports.persistence import ItemRepository, RentalRepository

logger = logging.getLogger(__name__)


class RentalService:
    """Borrowing of items listed for rent."""

    def __init__(self, rental_repository: RentalRepository, item_repository: ItemRepository) -> None:
        self._rentals = rental_repository
        self._items = item_repository

    def create_rental(self, borrower: User, item_id: int, due_date: date) -> Rental:
        item = self._items.get_item(item_id) if item_id > 0 else None
        if not item or not item.is_active:
            raise NotFoundError("Item not found")
        if item.category is not ItemCategory.RENT:
            raise ValidationError("Item is not listed for rent")
        if item.owner_id == borrower.id:
            raise ValidationError("Cannot rent your own item")
        if due_date < today():
            raise ValidationError("Due date cannot be in the past")

        rental = self._rentals.create_rental(
            item_id=item.id,
            owner_id=item.owner_id,
            borrower_id=borrower.id,
            rental_due_date=due_date,
        )
        logger.info("User %s rented item %s until %s", borrower.id, item.id, due_date)
        return rental

    def list_active(self, borrower: User) -> List[Rental]:
        return self._rentals.list_for_borrower(borrower.id)


def today() -> date:
    return datetime.now(timezone.utc).date()
