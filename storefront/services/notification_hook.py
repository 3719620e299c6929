"""
Notification Hook - post-commit order notifications
"""
import logging
from typing import Optional, Protocol

from storefront.config import settings
from storefront.publishers.event_publisher import EventPublisher
from storefront.schemas.order import OrderResponse

logger = logging.getLogger(__name__)


class NotificationHook(Protocol):
    """Capability invoked after an order change has been committed"""

    def notify(self, order: OrderResponse, new_status: str) -> None:
        ...

    def order_placed(self, order: OrderResponse) -> None:
        ...


class EventNotificationHook:
    """Hands order changes to the notification consumer through RabbitMQ"""

    def __init__(self, publisher: Optional[EventPublisher] = None):
        self.publisher = publisher or EventPublisher()

    def notify(self, order: OrderResponse, new_status: str) -> None:
        data = order.model_dump(mode="json")
        data["order_id"] = order.id
        data["new_status"] = new_status
        self.publisher.publish_order_status_changed(data)

    def order_placed(self, order: OrderResponse) -> None:
        data = order.model_dump(mode="json")
        data["order_id"] = order.id
        self.publisher.publish_order_created(data)


class NullNotificationHook:
    """Used when notifications are switched off"""

    def notify(self, order: OrderResponse, new_status: str) -> None:
        logger.debug("Notifications disabled; order %s -> %s not announced", order.order_number, new_status)

    def order_placed(self, order: OrderResponse) -> None:
        logger.debug("Notifications disabled; order %s not announced", order.order_number)


def get_notification_hook() -> NotificationHook:
    """Dependency to get the configured notification hook"""
    if settings.NOTIFICATIONS_ENABLED:
        return EventNotificationHook()
    return NullNotificationHook()


def fire(hook: NotificationHook, order: OrderResponse, new_status: Optional[str] = None) -> bool:
    """
    Run the hook without letting a failure escape

    Only call this after the order change is committed.

    Returns:
        True if the hook ran cleanly
    """
    try:
        if new_status is None:
            hook.order_placed(order)
        else:
            hook.notify(order, new_status)
        return True
    except Exception as e:
        # The order change already committed; the caller must not see this
        logger.warning("Notification for order %s failed: %s", order.order_number, e)
        return False
