"""
Notification Service - renders and sends order emails
"""
import logging
import smtplib
from email.message import EmailMessage
from typing import Dict

from storefront.config import settings

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    "pending": "We have received your order.",
    "processing": "Your order is being prepared.",
    "shipped": "Your order is on its way.",
    "delivered": "Your order has been delivered.",
    "cancelled": "Your order has been cancelled.",
    "refunded": "Your order has been refunded.",
}


class NotificationService:
    """Service for sending order notifications"""

    def __init__(self):
        self.email_service = settings.EMAIL_SERVICE

    def render_order_confirmation(self, order_data: Dict) -> tuple:
        """Subject and plain-text body for a new order"""
        order_number = order_data.get("order_number")
        lines = "\n".join(
            f"  {item['product_name']} ({item.get('size') or 'One Size'}, {item.get('color') or 'Default'})"
            f" x{item['quantity']} - {item['total_price']:.2f}"
            for item in order_data.get("items", [])
        )
        subject = f"Order Confirmation #{order_number}"
        body = f"""
Hi!

Thank you for your order.

Order Number: {order_number}
Payment Method: {order_data.get("payment_method")}

Items:
{lines}

Subtotal: {order_data.get("subtotal", 0):.2f}
Shipping: {order_data.get("shipping_amount", 0):.2f}
Total: {order_data.get("total_amount", 0):.2f}

---
ThreadedTreasure
        """
        return subject, body

    def render_status_update(self, order_data: Dict) -> tuple:
        """Subject and plain-text body for a status change"""
        order_number = order_data.get("order_number")
        new_status = order_data.get("new_status") or order_data.get("status")
        subject = f"Order Status Update #{order_number} - {new_status}"
        body = f"""
Hi!

{STATUS_MESSAGES.get(new_status, "Your order status has been updated.")}

Order Number: {order_number}
New Status: {new_status}
"""
        if order_data.get("tracking_number"):
            body += f"Tracking Number: {order_data['tracking_number']}\n"
        body += """
---
ThreadedTreasure
        """
        return subject, body

    def send_order_created_notification(self, order_data: Dict) -> bool:
        """
        Send notification for OrderCreated event

        Returns:
            True if notification sent successfully
        """
        subject, body = self.render_order_confirmation(order_data)
        return self._send(order_data.get("customer_email"), subject, body, order_data.get("order_number"))

    def send_order_status_changed_notification(self, order_data: Dict) -> bool:
        """
        Send notification for OrderStatusChanged event

        Returns:
            True if notification sent successfully
        """
        subject, body = self.render_status_update(order_data)
        return self._send(order_data.get("customer_email"), subject, body, order_data.get("order_number"))

    def _send(self, to: str, subject: str, body: str, order_number: str) -> bool:
        if not to:
            logger.info("Order %s has no customer email; skipping notification", order_number)
            return True

        if self.email_service == "console":
            return self._send_console_notification(to, subject, body, order_number)
        elif self.email_service == "smtp":
            return self._send_smtp_notification(to, subject, body)
        else:
            logger.error("Unknown email service: %s", self.email_service)
            return False

    def _send_console_notification(self, to: str, subject: str, body: str, order_number: str) -> bool:
        """
        Simulate email sending by logging it

        This is for development/testing purposes
        """
        logger.info("EMAIL NOTIFICATION (console mode)\nTo: %s\nSubject: %s\n%s", to, subject, body)
        logger.info("Notification sent for order %s", order_number)
        return True

    def _send_smtp_notification(self, to: str, subject: str, body: str) -> bool:
        """Send email via SMTP"""
        message = EmailMessage()
        message["From"] = settings.EMAIL_FROM
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        try:
            with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
                smtp.starttls()
                if settings.SMTP_USER:
                    smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", to, e)
            return False
        return True
