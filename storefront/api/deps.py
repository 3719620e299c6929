"""
Shared API dependencies
"""
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.errors import (
    StorefrontError,
    ValidationError,
    InsufficientStockError,
    NotFoundError,
    ConflictError,
    DependencyError,
    PermissionDeniedError,
)
from storefront.services.notification_hook import NotificationHook, get_notification_hook
from storefront.services.order_lifecycle import OrderLifecycle
from storefront.services.order_service import OrderService

ERROR_STATUS_CODES = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InsufficientStockError: status.HTTP_409_CONFLICT,
    ConflictError: status.HTTP_409_CONFLICT,
    DependencyError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@dataclass
class CurrentUser:
    """Identity handed over by the auth provider"""
    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def get_current_user(
    x_user_id: int = Header(..., description="Authenticated user id"),
    x_user_role: str = Header("customer", description="Authenticated user role"),
) -> CurrentUser:
    """Dependency reading the identity set by the upstream auth layer"""
    return CurrentUser(id=x_user_id, role=x_user_role)


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Dependency rejecting non-admin callers"""
    if not user.is_admin:
        raise to_http_exception(PermissionDeniedError("Admin access required"))
    return user


def get_order_service(
    db: Session = Depends(get_db),
    notifier: NotificationHook = Depends(get_notification_hook),
) -> OrderService:
    """Dependency to get OrderService instance"""
    return OrderService(db, notifier)


def get_order_lifecycle(
    db: Session = Depends(get_db),
    notifier: NotificationHook = Depends(get_notification_hook),
) -> OrderLifecycle:
    """Dependency to get OrderLifecycle instance"""
    return OrderLifecycle(db, notifier)


def to_http_exception(error: StorefrontError) -> HTTPException:
    """Map a domain error onto a structured failure response"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in ERROR_STATUS_CODES.items():
        if isinstance(error, error_type):
            status_code = code
            break

    detail = {"success": False, "message": error.message}
    if isinstance(error, InsufficientStockError):
        detail["insufficient_items"] = error.items
    return HTTPException(status_code=status_code, detail=detail)
