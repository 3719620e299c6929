"""
Inventory Repository - Data Access Layer

Nothing here commits; callers own the transaction.
"""
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from sqlalchemy import select, update, func, desc
from sqlalchemy.orm import Session

from storefront.models.inventory import InventoryRecord, InventoryMovement


class InventoryRepository:
    """Repository for inventory rows and their audit trail"""

    def __init__(self, db: Session):
        self.db = db

    def _sku_filter(self, product_id: int, size: str, color: str):
        return (
            InventoryRecord.product_id == product_id,
            InventoryRecord.size == size,
            InventoryRecord.color == color,
        )

    def get_quantity(self, product_id: int, size: str, color: str) -> Optional[int]:
        """Current quantity straight from the database, None when no row exists"""
        return self.db.execute(
            select(InventoryRecord.quantity).where(*self._sku_filter(product_id, size, color))
        ).scalar_one_or_none()

    def get_record(self, product_id: int, size: str, color: str) -> Optional[InventoryRecord]:
        return self.db.execute(
            select(InventoryRecord).where(*self._sku_filter(product_id, size, color))
        ).scalar_one_or_none()

    def get_by_product(self, product_id: int) -> List[InventoryRecord]:
        """Get all rows of a product ordered by size and color"""
        return list(self.db.execute(
            select(InventoryRecord)
            .where(InventoryRecord.product_id == product_id)
            .order_by(InventoryRecord.size, InventoryRecord.color)
        ).scalars())

    def conditional_decrement(self, product_id: int, size: str, color: str, quantity: int) -> bool:
        """
        Subtract quantity only if at least that much is on hand

        Returns:
            True if the row was updated, False if stock was insufficient or missing
        """
        result = self.db.execute(
            update(InventoryRecord)
            .where(*self._sku_filter(product_id, size, color), InventoryRecord.quantity >= quantity)
            .values(
                quantity=InventoryRecord.quantity - quantity,
                updated_at=datetime.now(timezone.utc),
            )
        )
        return result.rowcount > 0

    def increment(self, product_id: int, size: str, color: str, quantity: int) -> bool:
        """
        Add quantity to an existing row

        Returns:
            True if a row was updated, False if no row exists
        """
        result = self.db.execute(
            update(InventoryRecord)
            .where(*self._sku_filter(product_id, size, color))
            .values(
                quantity=InventoryRecord.quantity + quantity,
                updated_at=datetime.now(timezone.utc),
            )
        )
        return result.rowcount > 0

    def create(self, product_id: int, size: str, color: str, quantity: int) -> InventoryRecord:
        record = InventoryRecord(product_id=product_id, size=size, color=color, quantity=quantity)
        self.db.add(record)
        self.db.flush()
        return record

    def set_quantity(self, record: InventoryRecord, quantity: int) -> InventoryRecord:
        record.quantity = quantity
        record.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return record

    def get_low_stock(self, threshold: int) -> List[Tuple[int, int]]:
        """Products whose summed stock is at or below threshold, lowest first"""
        stock = func.coalesce(func.sum(InventoryRecord.quantity), 0).label("stock_quantity")
        rows = self.db.execute(
            select(InventoryRecord.product_id, stock)
            .group_by(InventoryRecord.product_id)
            .having(stock <= threshold)
            .order_by(stock, InventoryRecord.product_id)
        ).all()
        return [(row.product_id, row.stock_quantity) for row in rows]

    def add_movement(self, **fields) -> InventoryMovement:
        """Record one stock change in the audit trail"""
        movement = InventoryMovement(**fields)
        self.db.add(movement)
        self.db.flush()
        return movement

    def get_movements(self, product_id: int, limit: int = 50) -> List[InventoryMovement]:
        """Get the most recent movements of a product"""
        return list(self.db.execute(
            select(InventoryMovement)
            .where(InventoryMovement.product_id == product_id)
            .order_by(desc(InventoryMovement.id))
            .limit(limit)
        ).scalars())
