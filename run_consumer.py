#!/usr/bin/env python
"""
Script to run the RabbitMQ consumer that sends order notifications
"""
from storefront.config import configure_logging
from storefront.consumers.notification_consumer import start_consumer

if __name__ == "__main__":
    configure_logging()
    start_consumer()
