"""
Pydantic schemas for inventory request/response validation
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime


class StockRequestItem(BaseModel):
    """One SKU combination and the quantity wanted from it"""
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    size: Optional[str] = None
    color: Optional[str] = None
    product_name: Optional[str] = None


class AvailabilityCheck(BaseModel):
    """Schema for an availability pre-check"""
    items: List[StockRequestItem]


class InsufficientItem(BaseModel):
    """A line that the ledger cannot cover"""
    product_id: int
    product_name: str
    required: int
    available: int
    size: str
    color: str


class AvailabilityResult(BaseModel):
    """Outcome of an availability check"""
    success: bool
    message: Optional[str] = None
    insufficient_items: List[InsufficientItem] = []


class InventoryUpdate(BaseModel):
    """Schema for setting stock of one SKU combination"""
    # Negative values reach the ledger so they fail as a ValidationError
    quantity: int = Field(..., description="New absolute quantity")
    size: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=50)


class BulkInventoryRow(InventoryUpdate):
    """One row of a bulk update"""
    product_id: int = Field(..., gt=0)


class BulkInventoryUpdate(BaseModel):
    """Schema for a bulk inventory update"""
    updates: List[BulkInventoryRow]


class BulkInventoryResult(BaseModel):
    """Per-row outcome of a bulk update"""
    product_id: int
    size: str
    color: str
    previous_quantity: int
    new_quantity: int
    change: int


class InventoryRecordResponse(BaseModel):
    """Schema for an inventory row"""
    id: int
    product_id: int
    size: str
    color: str
    quantity: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductInventoryResponse(BaseModel):
    """All rows for one product plus their total"""
    product_id: int
    inventory: List[InventoryRecordResponse]
    total_stock: int


class LowStockProduct(BaseModel):
    """A product whose summed stock is at or below the threshold"""
    product_id: int
    stock_quantity: int


class InventoryMovementResponse(BaseModel):
    """Schema for an audit row"""
    id: int
    product_id: int
    size: str
    color: str
    quantity_change: int
    movement_type: str
    reason: Optional[str]
    order_id: Optional[int]
    previous_quantity: int
    new_quantity: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
