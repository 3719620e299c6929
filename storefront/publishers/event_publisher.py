"""
RabbitMQ Event Publisher
"""
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict

import pika
from pika.exceptions import AMQPConnectionError, AMQPError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from storefront.config import settings
from storefront.errors import NotificationError

logger = logging.getLogger(__name__)


class EventPublisher:
    """Publisher for sending order events to RabbitMQ"""

    def __init__(self):
        self.rabbitmq_url = settings.RABBITMQ_URL
        self.exchange = settings.RABBITMQ_EXCHANGE

    def build_event(self, event_type: str, data: Dict) -> Dict:
        return {
            "event_type": event_type,
            "event_id": str(uuid.uuid4()),
            "event_version": "1.0",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source": settings.SERVICE_NAME,
            "data": data
        }

    def connection_parameters(self) -> pika.URLParameters:
        """Broker parameters bounded so an outage can't stall the request for long"""
        params = pika.URLParameters(self.rabbitmq_url)
        params.socket_timeout = settings.RABBITMQ_CONNECTION_TIMEOUT
        params.blocked_connection_timeout = settings.RABBITMQ_CONNECTION_TIMEOUT
        params.connection_attempts = 1
        return params

    @retry(
        stop=stop_after_attempt(settings.MAX_RETRIES),
        wait=wait_exponential(multiplier=settings.RETRY_DELAY, min=1, max=4),
        retry=retry_if_exception_type(AMQPConnectionError),
        reraise=True
    )
    def _publish(self, routing_key: str, event: Dict):
        connection = pika.BlockingConnection(self.connection_parameters())
        try:
            channel = connection.channel()

            channel.exchange_declare(
                exchange=self.exchange,
                exchange_type='topic',
                durable=True
            )

            # Enable publisher confirms
            channel.confirm_delivery()

            channel.basic_publish(
                exchange=self.exchange,
                routing_key=routing_key,
                body=json.dumps(event, default=str),
                properties=pika.BasicProperties(
                    delivery_mode=2,  # Persistent message
                    content_type='application/json',
                    correlation_id=event["event_id"]
                )
            )
        finally:
            connection.close()

    def publish(self, event_type: str, routing_key: str, data: Dict) -> str:
        """
        Publish an order event

        Returns:
            The event id

        Raises:
            NotificationError: If the broker could not be reached or refused the message
        """
        event = self.build_event(event_type, data)
        try:
            self._publish(routing_key, event)
        except AMQPError as e:
            raise NotificationError(f"Failed to publish {event_type}: {e!r}") from e

        logger.info("Event published: %s (ID: %s)", event_type, event["event_id"])
        return event["event_id"]

    def publish_order_created(self, order_data: Dict) -> str:
        """Publish OrderCreated event"""
        return self.publish("OrderCreated", settings.RABBITMQ_CREATED_ROUTING_KEY, order_data)

    def publish_order_status_changed(self, order_data: Dict) -> str:
        """Publish OrderStatusChanged event"""
        return self.publish("OrderStatusChanged", settings.RABBITMQ_STATUS_ROUTING_KEY, order_data)
