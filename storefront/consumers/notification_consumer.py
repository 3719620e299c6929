"""
RabbitMQ Consumer for OrderCreated and OrderStatusChanged events
"""
import json
import logging
import sys

import pika
from pika.exceptions import AMQPError

from storefront.config import settings
from storefront.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def handle_event(event: dict, notification_service: NotificationService) -> bool:
    """
    Dispatch one decoded event to the matching notification

    Returns:
        True if the event was handled
    """
    event_type = event.get("event_type")
    event_data = event.get("data", {})

    if event_type == "OrderCreated":
        return notification_service.send_order_created_notification(event_data)
    elif event_type == "OrderStatusChanged":
        return notification_service.send_order_status_changed_notification(event_data)

    logger.warning("Unknown event type: %s", event_type)
    return False


def callback(ch, method, properties, body):
    """
    Callback function to process order events

    Args:
        ch: Channel
        method: Method
        properties: Properties
        body: Message body (JSON string)
    """
    try:
        event = json.loads(body)
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON: %s", e)
        ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
        return

    event_id = event.get("event_id")
    logger.info("Received event: %s (ID: %s)", event.get("event_type"), event_id)

    try:
        success = handle_event(event, NotificationService())
    except Exception:
        logger.exception("Error processing event %s", event_id)
        success = False

    if success:
        ch.basic_ack(delivery_tag=method.delivery_tag)
        logger.info("Event %s processed successfully", event_id)
    else:
        # Reject and don't requeue
        ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
        logger.warning("Event %s processing failed", event_id)


def start_consumer():
    """
    Start RabbitMQ consumer

    Connects to RabbitMQ and starts consuming order events
    """
    connection = None
    try:
        logger.info("Connecting to RabbitMQ: %s", settings.RABBITMQ_URL)
        connection = pika.BlockingConnection(
            pika.URLParameters(settings.RABBITMQ_URL)
        )
        channel = connection.channel()

        channel.exchange_declare(
            exchange=settings.RABBITMQ_EXCHANGE,
            exchange_type='topic',
            durable=True
        )
        channel.queue_declare(
            queue=settings.RABBITMQ_NOTIFICATION_QUEUE,
            durable=True
        )
        for routing_key in (settings.RABBITMQ_CREATED_ROUTING_KEY, settings.RABBITMQ_STATUS_ROUTING_KEY):
            channel.queue_bind(
                exchange=settings.RABBITMQ_EXCHANGE,
                queue=settings.RABBITMQ_NOTIFICATION_QUEUE,
                routing_key=routing_key
            )
            logger.info("Queue bound to exchange with routing key: %s", routing_key)

        # Set prefetch count (QoS)
        channel.basic_qos(prefetch_count=5)

        channel.basic_consume(
            queue=settings.RABBITMQ_NOTIFICATION_QUEUE,
            on_message_callback=callback,
            auto_ack=False  # Manual acknowledgement
        )

        logger.info("Waiting for order events on queue: %s", settings.RABBITMQ_NOTIFICATION_QUEUE)
        channel.start_consuming()

    except KeyboardInterrupt:
        logger.info("Consumer stopped by user")
        if connection is not None and connection.is_open:
            connection.close()
        sys.exit(0)
    except AMQPError as e:
        logger.error("Error starting consumer: %s", e)
        sys.exit(1)
