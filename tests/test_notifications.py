"""Tests for order event publishing and notification delivery."""

import json
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from pika.exceptions import AMQPConnectionError

from storefront.config import settings
from storefront.consumers import notification_consumer
from storefront.errors import NotificationError
from storefront.publishers import event_publisher
from storefront.publishers.event_publisher import EventPublisher
from storefront.schemas.order import OrderResponse
from storefront.services.notification_hook import EventNotificationHook, NullNotificationHook, fire
from storefront.services.notification_service import NotificationService


class FakeChannel:
    def __init__(self):
        self.published = []
        self.acked = []
        self.nacked = []

    def exchange_declare(self, **kwargs):
        pass

    def confirm_delivery(self):
        pass

    def basic_publish(self, exchange, routing_key, body, properties):
        self.published.append((exchange, routing_key, json.loads(body)))

    def basic_ack(self, delivery_tag):
        self.acked.append(delivery_tag)

    def basic_nack(self, delivery_tag, requeue):
        self.nacked.append(delivery_tag)


class FakeConnection:
    def __init__(self, channel):
        self._channel = channel
        self.closed = False

    def channel(self):
        return self._channel

    def close(self):
        self.closed = True


@pytest.fixture
def channel(monkeypatch):
    channel = FakeChannel()
    monkeypatch.setattr(event_publisher.pika, "BlockingConnection", lambda params: FakeConnection(channel))
    return channel


@pytest.fixture
def order():
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    return OrderResponse(
        id=12,
        order_number="TT123456ABCDEF",
        user_id=1,
        customer_email="shopper@threadedtreasure.com",
        status="shipped",
        payment_status="pending",
        payment_method="card",
        subtotal=40.0,
        shipping_amount=5.0,
        total_amount=45.0,
        tracking_number="1Z999",
        notes=None,
        shipped_at=now,
        delivered_at=None,
        created_at=now,
        updated_at=now,
        items=[{
            "id": 1,
            "product_id": 3,
            "product_name": "Linen Shirt",
            "size": "M",
            "color": None,
            "quantity": 2,
            "unit_price": 20.0,
            "total_price": 40.0,
        }],
    )


class TestEventPublisher:
    def test_status_change_envelope(self, channel):
        event_id = EventPublisher().publish_order_status_changed({"order_id": 12, "new_status": "shipped"})

        exchange, routing_key, event = channel.published[0]
        assert exchange == "orders_exchange"
        assert routing_key == "order.status.changed"
        assert event["event_type"] == "OrderStatusChanged"
        assert event["event_id"] == event_id
        assert event["data"] == {"order_id": 12, "new_status": "shipped"}

    def test_order_created_routing_key(self, channel):
        EventPublisher().publish_order_created({"order_id": 12})
        assert channel.published[0][1] == "order.created"

    def test_unreachable_broker_raises_after_retries(self, monkeypatch):
        attempts = []

        def refuse(params):
            attempts.append(params)
            raise AMQPConnectionError("connection refused")

        monkeypatch.setattr(event_publisher.pika, "BlockingConnection", refuse)
        monkeypatch.setattr(EventPublisher._publish.retry, "sleep", lambda seconds: None)

        with pytest.raises(NotificationError):
            EventPublisher().publish_order_created({"order_id": 1})

        assert len(attempts) == settings.MAX_RETRIES == 2

    def test_connection_is_time_bounded(self):
        params = EventPublisher().connection_parameters()

        assert params.socket_timeout == settings.RABBITMQ_CONNECTION_TIMEOUT
        assert params.blocked_connection_timeout == settings.RABBITMQ_CONNECTION_TIMEOUT
        assert params.connection_attempts == 1

    def test_outage_wait_is_capped(self, monkeypatch):
        waits = []

        def refuse(params):
            raise AMQPConnectionError("connection refused")

        monkeypatch.setattr(event_publisher.pika, "BlockingConnection", refuse)
        monkeypatch.setattr(EventPublisher._publish.retry, "sleep", waits.append)

        with pytest.raises(NotificationError):
            EventPublisher().publish_order_created({"order_id": 1})

        assert waits and all(seconds <= 4 for seconds in waits)


class TestNotificationHook:
    def test_event_hook_publishes_order(self, channel, order):
        EventNotificationHook().notify(order, "shipped")

        event = channel.published[0][2]
        assert event["data"]["order_id"] == 12
        assert event["data"]["new_status"] == "shipped"
        assert event["data"]["items"][0]["product_name"] == "Linen Shirt"

    def test_fire_swallows_failures(self, order):
        class Broken:
            def notify(self, order, new_status):
                raise NotificationError("broker down")

        assert fire(Broken(), order, "shipped") is False

    def test_null_hook(self, order):
        assert fire(NullNotificationHook(), order) is True


class TestNotificationService:
    def test_status_update_mentions_tracking(self, order):
        data = order.model_dump(mode="json")
        data["new_status"] = "shipped"

        subject, body = NotificationService().render_status_update(data)

        assert subject == "Order Status Update #TT123456ABCDEF - shipped"
        assert "Tracking Number: 1Z999" in body
        assert "on its way" in body

    def test_confirmation_lists_items(self, order):
        subject, body = NotificationService().render_order_confirmation(order.model_dump(mode="json"))

        assert subject == "Order Confirmation #TT123456ABCDEF"
        assert "Linen Shirt (M, Default) x2 - 40.00" in body
        assert "Total: 45.00" in body

    def test_console_delivery(self, order):
        assert NotificationService().send_order_created_notification(order.model_dump(mode="json")) is True

    def test_unknown_email_service(self, order):
        service = NotificationService()
        service.email_service = "pigeon"
        assert service.send_order_created_notification(order.model_dump(mode="json")) is False


class TestConsumer:
    def test_acks_handled_event(self, order):
        channel = FakeChannel()
        body = json.dumps({
            "event_type": "OrderStatusChanged",
            "event_id": "abc",
            "data": {**order.model_dump(mode="json"), "new_status": "shipped"},
        })

        notification_consumer.callback(channel, SimpleNamespace(delivery_tag=1), None, body)

        assert channel.acked == [1]

    def test_nacks_unknown_event(self):
        channel = FakeChannel()
        body = json.dumps({"event_type": "OrderExploded", "event_id": "abc", "data": {}})

        notification_consumer.callback(channel, SimpleNamespace(delivery_tag=2), None, body)

        assert channel.nacked == [2]

    def test_nacks_invalid_json(self):
        channel = FakeChannel()
        notification_consumer.callback(channel, SimpleNamespace(delivery_tag=3), None, b"{not json")
        assert channel.nacked == [3]
