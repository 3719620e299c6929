"""
Order Lifecycle - the single authority for order status changes

    pending -> processing -> shipped -> delivered
    cancelled / refunded reachable from any non-terminal state

Stock leaves the ledger on the first move into processing, shipped or
delivered, and comes back when an order that had it moves into cancelled or
refunded. The inventory movement and the order row update share one unit of
work, so a failed transition leaves every row as it was.
"""
import logging
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.database import unit_of_work
from storefront.errors import ConflictError, NotFoundError, ValidationError
from storefront.models.order import (
    ORDER_STATUSES,
    DEDUCTED_STATUSES,
    RETURNED_STATUSES,
    PAYMENT_STATUS_ON_ENTRY,
)
from storefront.repositories.order_repository import OrderRepository
from storefront.schemas.order import OrderResponse
from storefront.services.inventory_ledger import InventoryLedger
from storefront.services.notification_hook import NotificationHook, fire

logger = logging.getLogger(__name__)


def inventory_action(current_status: str, requested_status: str) -> Optional[str]:
    """
    Decide what a transition does to stock

    Returns:
        "deduct", "restore" or None
    """
    was_deducted = current_status in DEDUCTED_STATUSES
    will_be_deducted = requested_status in DEDUCTED_STATUSES
    will_be_returned = requested_status in RETURNED_STATUSES

    if not was_deducted and will_be_deducted:
        return "deduct"
    if was_deducted and will_be_returned:
        return "restore"
    return None


class OrderLifecycle:
    """Validates and applies order status transitions"""

    def __init__(self, db: Session, notifier: NotificationHook):
        self.db = db
        self.repository = OrderRepository(db)
        self.ledger = InventoryLedger(db)
        self.notifier = notifier

    def transition(
        self,
        order_id: int,
        requested_status: str,
        tracking_number: Optional[str] = None,
        notes: Optional[str] = None,
        expected_user_id: Optional[int] = None,
        allowed_from: Optional[frozenset] = None,
        disallowed_message: Optional[str] = None,
    ) -> OrderResponse:
        """
        Move an order to requested_status

        Args:
            order_id: Order ID
            requested_status: Target status
            tracking_number: Stored when given
            notes: Stored when given
            expected_user_id: Treat orders of other users as missing
            allowed_from: Reject the transition unless the current status is in this set
            disallowed_message: Error message used when allowed_from rejects

        Returns:
            Updated order with items

        Raises:
            ValidationError: Unrecognized status, a move back into pending,
                or current status not in allowed_from
            NotFoundError: Order missing or not owned by expected_user_id
            InsufficientStockError: Deduction could not be covered
            ConflictError: Status changed between read and write
            DependencyError: Database failure
        """
        if requested_status not in ORDER_STATUSES:
            raise ValidationError(f"Invalid status: {requested_status}")

        with unit_of_work(self.db):
            order = self.repository.get_for_update(order_id)
            if order is None or (expected_user_id is not None and order.user_id != expected_user_id):
                raise NotFoundError("Order", order_id)

            current_status = order.status
            if allowed_from is not None and current_status not in allowed_from:
                raise ValidationError(
                    disallowed_message or f"Order cannot move from {current_status} to {requested_status}"
                )
            # pending is only ever the initial state
            if requested_status == "pending" and current_status != "pending":
                raise ValidationError(f"Order cannot move from {current_status} back to pending")

            items = self.repository.get_items(order_id)
            action = inventory_action(current_status, requested_status)
            logger.info("Order %s: %s -> %s (inventory: %s)",
                        order.order_number, current_status, requested_status, action or "none")

            if action == "deduct":
                self.ledger.deduct(items, order_id=order_id)
            elif action == "restore":
                self.ledger.restore(items, order_id=order_id)

            now = datetime.now(timezone.utc)
            values = {"status": requested_status, "updated_at": now}
            if tracking_number:
                values["tracking_number"] = tracking_number
            if notes is not None:
                values["notes"] = notes
            # Stamped on entry only, never cleared
            if requested_status != current_status:
                if requested_status == "shipped":
                    values["shipped_at"] = now
                elif requested_status == "delivered":
                    values["delivered_at"] = now
            if requested_status in PAYMENT_STATUS_ON_ENTRY:
                values["payment_status"] = PAYMENT_STATUS_ON_ENTRY[requested_status]

            if not self.repository.update_if_status(order_id, current_status, values):
                raise ConflictError(
                    f"Order {order_id} changed status while moving from {current_status} to {requested_status}"
                )

        updated = OrderResponse.model_validate(self.repository.get_by_id(order_id))
        fire(self.notifier, updated, requested_status)
        return updated

    def admin_update_status(
        self,
        order_id: int,
        status: str,
        tracking_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> OrderResponse:
        """Arbitrary transition requested by an administrator"""
        return self.transition(order_id, status, tracking_number=tracking_number, notes=notes)

    def cancel_by_user(self, user_id: int, order_id: int) -> OrderResponse:
        """Cancellation requested by the order's owner"""
        return self.transition(
            order_id,
            "cancelled",
            expected_user_id=user_id,
            allowed_from=frozenset(settings.USER_CANCELLABLE_STATUSES),
            disallowed_message="Order cannot be cancelled",
        )
