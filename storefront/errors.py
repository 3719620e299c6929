"""Error taxonomy for order and inventory operations."""
from typing import List, Optional


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(StorefrontError):
    """Caller supplied something unusable; no state was changed."""

    pass


class InsufficientStockError(StorefrontError):
    """One or more SKU combinations cannot cover the requested quantity.

    ``items`` holds every offending line as a dict with ``product_id``,
    ``product_name``, ``required``, ``available``, ``size`` and ``color``.
    """

    def __init__(self, items: List[dict], message: Optional[str] = None):
        self.items = items
        if message is None:
            message = "Insufficient stock: " + ", ".join(
                f"{item['product_name']} (need {item['required']}, have {item['available']})"
                for item in items
            )
        super().__init__(message)


class NotFoundError(StorefrontError):
    """Raised when an order doesn't exist or isn't visible to the caller."""

    def __init__(self, resource: str, resource_id):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} with id={resource_id} not found")


class ConflictError(StorefrontError):
    """Raised when an order's status changed underneath a transition."""

    pass


class DependencyError(StorefrontError):
    """Raised when the persistence layer fails mid-transaction."""

    pass


class NotificationError(StorefrontError):
    """Raised when an order event could not be delivered to the broker."""

    pass


class PermissionDeniedError(StorefrontError):
    """Raised when the caller's role doesn't allow the operation."""

    pass
