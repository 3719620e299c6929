"""
Inventory Service - administrative stock management
"""
from typing import List
from sqlalchemy.orm import Session

from storefront.database import unit_of_work
from storefront.schemas.inventory import (
    AvailabilityResult,
    BulkInventoryResult,
    BulkInventoryRow,
    InventoryMovementResponse,
    InventoryUpdate,
    LowStockProduct,
    ProductInventoryResponse,
    StockRequestItem,
)
from storefront.services.inventory_ledger import InventoryLedger


class InventoryService:
    """Service layer wrapping ledger writes in their own transaction"""

    def __init__(self, db: Session):
        self.db = db
        self.ledger = InventoryLedger(db)

    def get_product_inventory(self, product_id: int) -> ProductInventoryResponse:
        return self.ledger.get_product_inventory(product_id)

    def check_availability(self, items: List[StockRequestItem]) -> AvailabilityResult:
        return self.ledger.check_availability(items)

    def update_inventory(self, product_id: int, data: InventoryUpdate) -> BulkInventoryResult:
        """Set stock of one combination; negative quantities raise ValidationError"""
        with unit_of_work(self.db):
            return self.ledger.update_quantity(product_id, data.size, data.color, data.quantity)

    def bulk_update_inventory(self, updates: List[BulkInventoryRow]) -> List[BulkInventoryResult]:
        """Set stock of many combinations; all rows apply or none do"""
        with unit_of_work(self.db):
            return self.ledger.bulk_update(updates)

    def get_low_stock(self, threshold: int) -> List[LowStockProduct]:
        return self.ledger.low_stock(threshold)

    def get_movements(self, product_id: int, limit: int = 50) -> List[InventoryMovementResponse]:
        return [InventoryMovementResponse.model_validate(m) for m in self.ledger.movements(product_id, limit)]
