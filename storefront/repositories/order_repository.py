"""
Order Repository - Data Access Layer

Nothing here commits; callers own the transaction.
"""
from typing import List, Optional
from sqlalchemy import select, update, func, desc
from sqlalchemy.orm import Session

from storefront.models.order import Order, OrderItem


class OrderRepository:
    """Repository for Order reads and writes"""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self, skip: int = 0, limit: int = 100, status: Optional[str] = None) -> List[Order]:
        """Get all orders with pagination, newest first"""
        query = select(Order)
        if status:
            query = query.where(Order.status == status)
        query = query.order_by(desc(Order.created_at), desc(Order.id)).offset(skip).limit(limit)
        return list(self.db.execute(query).scalars())

    def count(self, status: Optional[str] = None) -> int:
        """Get total count of orders"""
        query = select(func.count(Order.id))
        if status:
            query = query.where(Order.status == status)
        return self.db.execute(query).scalar_one()

    def get_by_id(self, order_id: int) -> Optional[Order]:
        """Get order by ID"""
        return self.db.get(Order, order_id, populate_existing=True)

    def get_for_update(self, order_id: int) -> Optional[Order]:
        """Get order by ID holding a row lock until the transaction ends"""
        return self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_by_user(self, user_id: int) -> List[Order]:
        """Get orders of one user, newest first"""
        return list(self.db.execute(
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(desc(Order.created_at), desc(Order.id))
        ).scalars())

    def get_items(self, order_id: int) -> List[OrderItem]:
        """Get order lines in insertion order"""
        return list(self.db.execute(
            select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id)
        ).scalars())

    def order_number_exists(self, order_number: str) -> bool:
        return self.db.execute(
            select(Order.id).where(Order.order_number == order_number)
        ).first() is not None

    def create(self, order_data: dict, items: List[dict]) -> Order:
        """
        Add an order header and its lines

        Args:
            order_data: Dictionary with order fields
            items: Dictionaries with order item fields, in line order

        Returns:
            Created order (flushed, not committed)
        """
        order = Order(**order_data)
        order.items = [OrderItem(**item) for item in items]
        self.db.add(order)
        self.db.flush()
        return order

    def update_if_status(self, order_id: int, expected_status: str, values: dict) -> bool:
        """
        Update an order only if its status is still expected_status

        Returns:
            True if the row was updated
        """
        result = self.db.execute(
            update(Order)
            .where(Order.id == order_id, Order.status == expected_status)
            .values(**values)
        )
        return result.rowcount > 0
