"""
Inventory API endpoints (admin)
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from storefront.api.deps import CurrentUser, get_current_user, require_admin, to_http_exception
from storefront.config import settings
from storefront.database import get_db
from storefront.errors import StorefrontError
from storefront.services.inventory_service import InventoryService
from storefront.schemas.inventory import (
    AvailabilityCheck,
    AvailabilityResult,
    BulkInventoryResult,
    BulkInventoryUpdate,
    InventoryMovementResponse,
    InventoryUpdate,
    LowStockProduct,
    ProductInventoryResponse,
)

router = APIRouter(prefix="/inventory", tags=["inventory"])


def get_inventory_service(db: Session = Depends(get_db)) -> InventoryService:
    """Dependency to get InventoryService instance"""
    return InventoryService(db)


@router.get("/low-stock", response_model=List[LowStockProduct], summary="Get low stock products")
def get_low_stock(
    threshold: Optional[int] = Query(None, ge=0, description="Stock at or below this is low"),
    admin: CurrentUser = Depends(require_admin),
    service: InventoryService = Depends(get_inventory_service)
):
    """
    Products whose summed stock is at or below the threshold, lowest first

    - **threshold**: defaults to LOW_STOCK_THRESHOLD
    """
    if threshold is None:
        threshold = settings.LOW_STOCK_THRESHOLD
    return service.get_low_stock(threshold)


@router.post("/check", response_model=AvailabilityResult, summary="Check stock availability")
def check_availability(
    check: AvailabilityCheck,
    user: CurrentUser = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service)
):
    """Pre-check a cart; lists every line that can't be covered"""
    return service.check_availability(check.items)


@router.put("/bulk", response_model=List[BulkInventoryResult], summary="Bulk update inventory")
def bulk_update_inventory(
    data: BulkInventoryUpdate,
    admin: CurrentUser = Depends(require_admin),
    service: InventoryService = Depends(get_inventory_service)
):
    """
    Set stock for many product/size/color combinations at once

    Any invalid row rejects the whole batch.
    """
    try:
        return service.bulk_update_inventory(data.updates)
    except StorefrontError as e:
        raise to_http_exception(e)


@router.get("/{product_id}", response_model=ProductInventoryResponse, summary="Get product inventory")
def get_product_inventory(
    product_id: int,
    admin: CurrentUser = Depends(require_admin),
    service: InventoryService = Depends(get_inventory_service)
):
    return service.get_product_inventory(product_id)


@router.put("/{product_id}", response_model=BulkInventoryResult, summary="Update product inventory")
def update_inventory(
    product_id: int,
    data: InventoryUpdate,
    admin: CurrentUser = Depends(require_admin),
    service: InventoryService = Depends(get_inventory_service)
):
    """
    Set stock for one size/color of a product

    - **quantity**: New absolute quantity (must be non-negative)
    - **size**: Defaults to 'One Size'
    - **color**: Defaults to 'Default'
    """
    try:
        return service.update_inventory(product_id, data)
    except StorefrontError as e:
        raise to_http_exception(e)


@router.get("/{product_id}/movements", response_model=List[InventoryMovementResponse], summary="Get inventory movements")
def get_inventory_movements(
    product_id: int,
    limit: int = Query(50, ge=1, le=500, description="Maximum number of movements to return"),
    admin: CurrentUser = Depends(require_admin),
    service: InventoryService = Depends(get_inventory_service)
):
    return service.get_movements(product_id, limit=limit)
