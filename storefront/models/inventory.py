"""
SQLAlchemy inventory models
"""
from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint, UniqueConstraint
from sqlalchemy.sql import func

from storefront.database import Base

DEFAULT_SIZE = "One Size"
DEFAULT_COLOR = "Default"


def normalize_size(size):
    return size or DEFAULT_SIZE


def normalize_color(color):
    return color or DEFAULT_COLOR


class InventoryRecord(Base):
    """Stock on hand for one (product, size, color) combination"""

    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    product_id = Column(Integer, nullable=False, index=True)
    size = Column(String(50), nullable=False, default=DEFAULT_SIZE)
    color = Column(String(50), nullable=False, default=DEFAULT_COLOR)
    quantity = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("product_id", "size", "color", name="uq_inventory_sku"),
        CheckConstraint("quantity >= 0", name="check_inventory_non_negative"),
    )

    def __repr__(self):
        return (
            f"<InventoryRecord(product_id={self.product_id}, size='{self.size}', "
            f"color='{self.color}', quantity={self.quantity})>"
        )


class InventoryMovement(Base):
    """Audit row for every stock change"""

    __tablename__ = "inventory_movements"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    product_id = Column(Integer, nullable=False, index=True)
    size = Column(String(50), nullable=False)
    color = Column(String(50), nullable=False)
    quantity_change = Column(Integer, nullable=False)
    movement_type = Column(String(20), nullable=False)  # deduct, restore, adjustment
    reason = Column(String(255), nullable=True)
    order_id = Column(Integer, nullable=True, index=True)
    previous_quantity = Column(Integer, nullable=False)
    new_quantity = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return (
            f"<InventoryMovement(product_id={self.product_id}, type='{self.movement_type}', "
            f"change={self.quantity_change})>"
        )
