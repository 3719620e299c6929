"""
Inventory Ledger - per-SKU stock accounting

Every stock change made by the order subsystem goes through this class:
conditional decrements for deductions, plain increments for restorations.
The ledger never commits; the session it is given is the atomic context and
the caller's unit of work decides whether the writes stick.
"""
import logging
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session

from storefront.errors import InsufficientStockError, ValidationError
from storefront.models.inventory import InventoryRecord, normalize_size, normalize_color
from storefront.repositories.inventory_repository import InventoryRepository
from storefront.schemas.inventory import (
    AvailabilityResult,
    InsufficientItem,
    BulkInventoryResult,
    LowStockProduct,
    ProductInventoryResponse,
    InventoryRecordResponse,
)

logger = logging.getLogger(__name__)


def _field(item, name, default=None):
    # Items arrive as ORM rows, pydantic models or plain dicts
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def _product_name(item) -> str:
    return _field(item, "product_name") or f"Product {_field(item, 'product_id')}"


class InventoryLedger:
    """Stock store keyed by (product_id, size, color)"""

    def __init__(self, db: Session):
        self.repository = InventoryRepository(db)

    def available(self, product_id: int, size: Optional[str] = None, color: Optional[str] = None) -> int:
        """Quantity on hand, 0 when the combination has no row"""
        quantity = self.repository.get_quantity(product_id, normalize_size(size), normalize_color(color))
        return quantity or 0

    def check_availability(self, items: Iterable) -> AvailabilityResult:
        """
        Compare every requested quantity against stock on hand

        Side-effect free. Reports all insufficient lines, not just the first.
        """
        insufficient = []
        for item in items:
            size = normalize_size(_field(item, "size"))
            color = normalize_color(_field(item, "color"))
            required = _field(item, "quantity")
            available = self.available(_field(item, "product_id"), size, color)

            if available < required:
                insufficient.append(InsufficientItem(
                    product_id=_field(item, "product_id"),
                    product_name=_product_name(item),
                    required=required,
                    available=available,
                    size=size,
                    color=color,
                ))

        if insufficient:
            return AvailabilityResult(
                success=False,
                message="Insufficient inventory for some items",
                insufficient_items=insufficient,
            )
        return AvailabilityResult(success=True)

    def deduct(self, items: List, order_id: Optional[int] = None, reason: str = "Order fulfilment"):
        """
        Remove stock for every item

        Raises:
            InsufficientStockError: If any line can't be covered. Decrements
                already applied in this call are left for the caller's unit
                of work to roll back.
        """
        logger.info("Deducting inventory for %d items (order %s)", len(items), order_id)

        check = self.check_availability(items)
        if not check.success:
            raise InsufficientStockError([i.model_dump() for i in check.insufficient_items])

        for item in items:
            product_id = _field(item, "product_id")
            quantity = _field(item, "quantity")
            size = normalize_size(_field(item, "size"))
            color = normalize_color(_field(item, "color"))

            if not self.repository.conditional_decrement(product_id, size, color, quantity):
                # Lost a race against another deduction since the pre-check
                current = self.available(product_id, size, color)
                logger.error(
                    "Failed to deduct %d of product %s (%s, %s): available %d",
                    quantity, product_id, size, color, current,
                )
                raise InsufficientStockError(
                    [{
                        "product_id": product_id,
                        "product_name": _product_name(item),
                        "required": quantity,
                        "available": current,
                        "size": size,
                        "color": color,
                    }],
                    message=(
                        f"Insufficient stock for {_product_name(item)}. "
                        f"Available: {current}, Required: {quantity}"
                    ),
                )

            new_quantity = self.available(product_id, size, color)
            self.repository.add_movement(
                product_id=product_id,
                size=size,
                color=color,
                quantity_change=-quantity,
                movement_type="deduct",
                reason=reason,
                order_id=order_id,
                previous_quantity=new_quantity + quantity,
                new_quantity=new_quantity,
            )
            logger.info("Deducted %d units from product %s (%s, %s)", quantity, product_id, size, color)

    def restore(self, items: List, order_id: Optional[int] = None, reason: str = "Order returned"):
        """
        Hand stock back for every item

        A combination without a row is skipped; restoration always follows a
        deduction that needed the row to exist.
        """
        logger.info("Restoring inventory for %d items (order %s)", len(items), order_id)

        for item in items:
            product_id = _field(item, "product_id")
            quantity = _field(item, "quantity")
            size = normalize_size(_field(item, "size"))
            color = normalize_color(_field(item, "color"))

            if not self.repository.increment(product_id, size, color, quantity):
                logger.warning(
                    "No inventory row for product %s (%s, %s); skipping restore of %d",
                    product_id, size, color, quantity,
                )
                continue

            new_quantity = self.available(product_id, size, color)
            self.repository.add_movement(
                product_id=product_id,
                size=size,
                color=color,
                quantity_change=quantity,
                movement_type="restore",
                reason=reason,
                order_id=order_id,
                previous_quantity=new_quantity - quantity,
                new_quantity=new_quantity,
            )
            logger.info("Restored %d units to product %s (%s, %s)", quantity, product_id, size, color)

    def update_quantity(
        self,
        product_id: int,
        size: Optional[str],
        color: Optional[str],
        quantity: int,
        reason: str = "Manual adjustment",
    ) -> BulkInventoryResult:
        """
        Set stock of one combination to an absolute value

        Creates the row when the combination is new.

        Raises:
            ValidationError: If quantity is negative
        """
        if quantity is None or quantity < 0:
            raise ValidationError(f"Invalid quantity for product {product_id}")

        size = normalize_size(size)
        color = normalize_color(color)
        record = self.repository.get_record(product_id, size, color)

        if record is None:
            previous = 0
            self.repository.create(product_id, size, color, quantity)
        else:
            previous = record.quantity
            self.repository.set_quantity(record, quantity)

        self.repository.add_movement(
            product_id=product_id,
            size=size,
            color=color,
            quantity_change=quantity - previous,
            movement_type="adjustment",
            reason=reason,
            previous_quantity=previous,
            new_quantity=quantity,
        )
        logger.info("Set product %s (%s, %s) stock: %d -> %d", product_id, size, color, previous, quantity)

        return BulkInventoryResult(
            product_id=product_id,
            size=size,
            color=color,
            previous_quantity=previous,
            new_quantity=quantity,
            change=quantity - previous,
        )

    def bulk_update(self, updates: List) -> List[BulkInventoryResult]:
        """Apply update_quantity to every row; one bad row fails them all"""
        if not updates:
            raise ValidationError("Updates array is required")
        return [
            self.update_quantity(
                _field(row, "product_id"),
                _field(row, "size"),
                _field(row, "color"),
                _field(row, "quantity"),
                reason="Bulk inventory update",
            )
            for row in updates
        ]

    def get_product_inventory(self, product_id: int) -> ProductInventoryResponse:
        records: List[InventoryRecord] = self.repository.get_by_product(product_id)
        return ProductInventoryResponse(
            product_id=product_id,
            inventory=[InventoryRecordResponse.model_validate(r) for r in records],
            total_stock=sum(r.quantity for r in records),
        )

    def low_stock(self, threshold: int) -> List[LowStockProduct]:
        return [
            LowStockProduct(product_id=product_id, stock_quantity=stock)
            for product_id, stock in self.repository.get_low_stock(threshold)
        ]

    def movements(self, product_id: int, limit: int = 50):
        return self.repository.get_movements(product_id, limit=limit)
