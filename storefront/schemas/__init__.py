"""
Schemas package
"""
from storefront.schemas.order import (
    OrderStatus,
    OrderItemCreate,
    OrderCreate,
    OrderStatusUpdate,
    OrderItemResponse,
    OrderResponse,
    OrderListResponse
)
from storefront.schemas.inventory import (
    StockRequestItem,
    AvailabilityCheck,
    InsufficientItem,
    AvailabilityResult,
    InventoryUpdate,
    BulkInventoryRow,
    BulkInventoryUpdate,
    BulkInventoryResult,
    InventoryRecordResponse,
    ProductInventoryResponse,
    LowStockProduct,
    InventoryMovementResponse
)

__all__ = [
    "OrderStatus",
    "OrderItemCreate",
    "OrderCreate",
    "OrderStatusUpdate",
    "OrderItemResponse",
    "OrderResponse",
    "OrderListResponse",
    "StockRequestItem",
    "AvailabilityCheck",
    "InsufficientItem",
    "AvailabilityResult",
    "InventoryUpdate",
    "BulkInventoryRow",
    "BulkInventoryUpdate",
    "BulkInventoryResult",
    "InventoryRecordResponse",
    "ProductInventoryResponse",
    "LowStockProduct",
    "InventoryMovementResponse"
]
