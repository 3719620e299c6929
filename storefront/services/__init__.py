"""
Services package
"""
from storefront.services.inventory_ledger import InventoryLedger
from storefront.services.inventory_service import InventoryService
from storefront.services.order_lifecycle import OrderLifecycle
from storefront.services.order_service import OrderService

__all__ = ["InventoryLedger", "InventoryService", "OrderLifecycle", "OrderService"]
