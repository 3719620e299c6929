"""
Order Service - Business Logic Layer
"""
import logging
import random
import string
import time
from typing import List, Optional
from sqlalchemy.orm import Session
from tenacity import retry, stop_after_attempt, retry_if_exception_type

from storefront.config import settings
from storefront.database import unit_of_work
from storefront.errors import InsufficientStockError, NotFoundError, ValidationError, ConflictError
from storefront.repositories.order_repository import OrderRepository
from storefront.schemas.order import OrderCreate, OrderResponse, OrderListResponse
from storefront.services.inventory_ledger import InventoryLedger
from storefront.services.notification_hook import NotificationHook, fire

logger = logging.getLogger(__name__)


class OrderNumberTakenError(ConflictError):
    """A freshly generated order number already exists"""

    pass


def generate_order_number(prefix: Optional[str] = None) -> str:
    """Prefix + last six digits of the millisecond clock + six random characters"""
    prefix = settings.ORDER_NUMBER_PREFIX if prefix is None else prefix
    timestamp = str(int(time.time() * 1000))
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=6))
    return f"{prefix}{timestamp[-6:]}{suffix}"


class OrderService:
    """Service layer for order placement and lookups"""

    def __init__(self, db: Session, notifier: NotificationHook):
        self.db = db
        self.repository = OrderRepository(db)
        self.ledger = InventoryLedger(db)
        self.notifier = notifier

    def get_all_orders(self, skip: int = 0, limit: int = 100, status: Optional[str] = None) -> OrderListResponse:
        """Get all orders with pagination"""
        orders = self.repository.get_all(skip=skip, limit=limit, status=status)
        total = self.repository.count(status=status)

        return OrderListResponse(
            orders=[OrderResponse.model_validate(o) for o in orders],
            total=total
        )

    def get_order(self, order_id: int) -> OrderResponse:
        """Get order by ID"""
        order = self.repository.get_by_id(order_id)
        if not order:
            raise NotFoundError("Order", order_id)
        return OrderResponse.model_validate(order)

    def get_user_order(self, user_id: int, order_id: int) -> OrderResponse:
        """Get order by ID, hiding orders of other users"""
        order = self.repository.get_by_id(order_id)
        if not order or order.user_id != user_id:
            raise NotFoundError("Order", order_id)
        return OrderResponse.model_validate(order)

    def get_user_orders(self, user_id: int) -> List[OrderResponse]:
        """Get orders of one user"""
        return [OrderResponse.model_validate(o) for o in self.repository.get_by_user(user_id)]

    @retry(
        stop=stop_after_attempt(settings.ORDER_NUMBER_MAX_ATTEMPTS),
        retry=retry_if_exception_type(OrderNumberTakenError),
        reraise=True
    )
    def _allocate_order_number(self) -> str:
        candidate = generate_order_number()
        if self.repository.order_number_exists(candidate):
            logger.warning("Order number %s already taken, regenerating", candidate)
            raise OrderNumberTakenError(f"Order number {candidate} already exists")
        return candidate

    def create_order(self, user_id: int, order_data: OrderCreate) -> OrderResponse:
        """
        Create new order

        Steps:
        1. Validate input
        2. Check stock availability for every line
        3. Save order header and lines in one transaction
        4. Announce the order (best effort)

        Stock is not deducted here; that happens on the first move into a
        deducted status.

        Raises:
            ValidationError: If the order has no items
            InsufficientStockError: If any line can't be covered
            DependencyError: If the database fails
        """
        if not order_data.items:
            raise ValidationError("Order must contain at least one item")

        with unit_of_work(self.db):
            check = self.ledger.check_availability(order_data.items)
            if not check.success:
                raise InsufficientStockError([i.model_dump() for i in check.insufficient_items])

            order_dict = {
                'user_id': user_id,
                'order_number': self._allocate_order_number(),
                'customer_email': order_data.customer_email,
                'status': 'pending',
                'payment_status': 'pending',
                'payment_method': order_data.payment_method,
                'subtotal': order_data.subtotal,
                'shipping_amount': order_data.shipping_amount,
                'total_amount': order_data.total_amount,
            }
            items = [
                {
                    'product_id': item.product_id,
                    'product_name': item.product_name,
                    'size': item.size,
                    'color': item.color,
                    'quantity': item.quantity,
                    'unit_price': item.unit_price,
                    'total_price': item.quantity * item.unit_price,
                }
                for item in order_data.items
            ]
            order = self.repository.create(order_dict, items)
            order_id = order.id

        created = OrderResponse.model_validate(self.repository.get_by_id(order_id))
        logger.info("Order %s created for user %s with %d items", created.order_number, user_id, len(items))

        fire(self.notifier, created)
        return created
