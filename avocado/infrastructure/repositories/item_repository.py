"""Repository for marketplace listings."""

import sqlite3
from typing import Any, List, Optional

from avocado.domain.models.item import ItemCategory, ItemSort, MarketplaceItem
from avocado.infrastructure.persistence.sqlite import SQLiteDatabase, parse_datetime, utc_now

_SELECT_WITH_SELLER = """
    SELECT m.*, u.name AS seller_name
    FROM marketplace_items m
    JOIN users u ON m.owner_id = u.id
"""

_ORDER_BY = {
    ItemSort.NEWEST: "m.created_at DESC, m.id DESC",
    ItemSort.PRICE_LOW: "m.price ASC, m.created_at DESC, m.id DESC",
    ItemSort.PRICE_HIGH: "m.price DESC, m.created_at DESC, m.id DESC",
}


class ItemRepository:
    """Repository for managing MarketplaceItem entities in SQLite."""

    def __init__(self, database: SQLiteDatabase):
        self.database = database

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
        now = utc_now()
        with self.database.connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO marketplace_items (
                    owner_id, title, description, category, item_type,
                    price, condition, dorm_location, is_active, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, 1, ?)
                """,
                (
                    owner_id,
                    title,
                    description,
                    category,
                    item_type,
                    price,
                    condition,
                    dorm_location,
                    now,
                ),
            )
            row = conn.execute(
                _SELECT_WITH_SELLER + " WHERE m.id = ?", (cursor.lastrowid,)
            ).fetchone()
        if not row:
            raise RuntimeError("Failed to persist marketplace item.")
        return self._row_to_item(row)

    def get_item(self, item_id: int) -> Optional[MarketplaceItem]:
        with self.database.connection() as conn:
            row = conn.execute(_SELECT_WITH_SELLER + " WHERE m.id = ?", (item_id,)).fetchone()
        return self._row_to_item(row) if row else None

    def list_active_items(
        self,
        category: Optional[str],
        item_type: Optional[str],
        limit: int,
        offset: int,
        sort: ItemSort = ItemSort.NEWEST,
    ) -> List[MarketplaceItem]:
        query = _SELECT_WITH_SELLER + " WHERE m.is_active = 1"
        params: List[Any] = []
        if category:
            query += " AND m.category = ?"
            params.append(category)
        if item_type:
            query += " AND m.item_type = ?"
            params.append(item_type)
        query += f" ORDER BY {_ORDER_BY[sort]} LIMIT ? OFFSET ?"
        params.extend([limit, offset])
        with self.database.connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_item(row) for row in rows]

    def deactivate_item(self, item_id: int) -> None:
        with self.database.connection() as conn:
            conn.execute("UPDATE marketplace_items SET is_active = 0 WHERE id = ?", (item_id,))

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> MarketplaceItem:
        return MarketplaceItem(
            id=row["id"],
            owner_id=row["owner_id"],
            title=row["title"],
            description=row["description"],
            category=ItemCategory(row["category"]),
            item_type=row["item_type"],
            price=row["price"],
            condition=row["condition"],
            dorm_location=row["dorm_location"],
            is_active=bool(row["is_active"]),
            created_at=parse_datetime(row["created_at"]),
            seller_name=row["seller_name"],
        )
