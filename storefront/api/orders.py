"""
Order API endpoints
"""
from fastapi import APIRouter, Depends, status, Query
from typing import List, Optional

from storefront.api.deps import (
    CurrentUser,
    get_current_user,
    require_admin,
    get_order_service,
    get_order_lifecycle,
    to_http_exception,
)
from storefront.errors import StorefrontError
from storefront.services.order_lifecycle import OrderLifecycle
from storefront.services.order_service import OrderService
from storefront.schemas.order import (
    OrderCreate,
    OrderStatusUpdate,
    OrderResponse,
    OrderListResponse
)

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("/admin/all", response_model=OrderListResponse, summary="Get all orders (admin)")
def get_all_orders(
    skip: int = Query(0, ge=0, description="Number of orders to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of orders to return"),
    order_status: Optional[str] = Query(None, alias="status", description="Only orders in this status"),
    admin: CurrentUser = Depends(require_admin),
    service: OrderService = Depends(get_order_service)
):
    """
    Retrieve all orders with pagination

    - **skip**: Number of orders to skip (default: 0)
    - **limit**: Maximum number of orders to return (default: 100, max: 1000)
    - **status**: Optional status filter
    """
    return service.get_all_orders(skip=skip, limit=limit, status=order_status)


@router.get("/admin/{order_id}", response_model=OrderResponse, summary="Get any order by ID (admin)")
def get_order_admin(
    order_id: int,
    admin: CurrentUser = Depends(require_admin),
    service: OrderService = Depends(get_order_service)
):
    try:
        return service.get_order(order_id)
    except StorefrontError as e:
        raise to_http_exception(e)


@router.patch("/admin/{order_id}/status", response_model=OrderResponse, summary="Update order status (admin)")
def update_order_status(
    order_id: int,
    status_data: OrderStatusUpdate,
    admin: CurrentUser = Depends(require_admin),
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle)
):
    """
    Move an order to a new status

    Deducts stock on the first move into processing/shipped/delivered and
    restores it when a deducted order is cancelled or refunded.

    - **status**: pending, processing, shipped, delivered, cancelled, refunded
    - **tracking_number**: Optional tracking number
    - **notes**: Optional admin notes
    """
    try:
        return lifecycle.admin_update_status(
            order_id,
            status_data.status,
            tracking_number=status_data.tracking_number,
            notes=status_data.notes
        )
    except StorefrontError as e:
        raise to_http_exception(e)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED, summary="Create order")
def create_order(
    order_data: OrderCreate,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """
    Create a new order

    Process:
    1. Validate items
    2. Check stock availability for every line
    3. Save order and its lines as pending
    4. Publish OrderCreated event to RabbitMQ
    """
    try:
        return service.create_order(user.id, order_data)
    except StorefrontError as e:
        raise to_http_exception(e)


@router.get("", response_model=List[OrderResponse], summary="Get my orders")
def get_my_orders(
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    return service.get_user_orders(user.id)


@router.get("/{order_id}", response_model=OrderResponse, summary="Get my order by ID")
def get_my_order(
    order_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    try:
        return service.get_user_order(user.id, order_id)
    except StorefrontError as e:
        raise to_http_exception(e)


@router.put("/{order_id}/cancel", response_model=OrderResponse, summary="Cancel my order")
def cancel_order(
    order_id: int,
    user: CurrentUser = Depends(get_current_user),
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle)
):
    """
    Cancel one of the caller's own orders

    Only allowed while the order is still pending.
    """
    try:
        return lifecycle.cancel_by_user(user.id, order_id)
    except StorefrontError as e:
        raise to_http_exception(e)
