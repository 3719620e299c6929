"""
SQLAlchemy Order and OrderItem models
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from storefront.database import Base

ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled", "refunded")

# Stock for the order's items has left the ledger while in one of these
DEDUCTED_STATUSES = frozenset({"processing", "shipped", "delivered"})
# Entering one of these hands previously deducted stock back
RETURNED_STATUSES = frozenset({"cancelled", "refunded"})

PAYMENT_STATUS_ON_ENTRY = {
    "delivered": "paid",
    "refunded": "refunded",
    "cancelled": "cancelled",
}


class Order(Base):
    """Order header"""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_number = Column(String(50), nullable=False, unique=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    customer_email = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    payment_status = Column(String(20), nullable=False, default="pending")
    payment_method = Column(String(50), nullable=False)
    subtotal = Column(Float, nullable=False, default=0)
    shipping_amount = Column(Float, nullable=False, default=0)
    total_amount = Column(Float, nullable=False, default=0)
    tracking_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    shipped_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    items = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'processing', 'shipped', 'delivered', 'cancelled', 'refunded')",
            name="check_order_status_valid",
        ),
    )

    def __repr__(self):
        return f"<Order(id={self.id}, order_number='{self.order_number}', status='{self.status}')>"


class OrderItem(Base):
    """Order line, snapshotted at order time and never mutated"""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False, index=True)
    product_name = Column(String(255), nullable=False)  # Denormalized for history
    size = Column(String(50), nullable=True)
    color = Column(String(50), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_item_quantity_positive"),
    )

    def __repr__(self):
        return f"<OrderItem(order_id={self.order_id}, product_id={self.product_id}, quantity={self.quantity})>"
