"""Delivery confirmation template — sent when an order is delivered."""

from notifications.notification.notification import NotificationChannel, NotificationType


class DeliveryConfirmationTemplate:
    notification_type = NotificationType.ORDER_DELIVERED.value
    default_channels = [NotificationChannel.EMAIL.value, NotificationChannel.SMS.value]
    sms_priority = 2

    @staticmethod
    def render(context: dict) -> dict:
        name = context.get("customer_name", "there")
        order_number = context.get("order_number", "N/A")
        store = context.get("store_name", "ThePlug")
        order_url = context.get("order_url")
        view = f" View: {order_url}" if order_url else ""
        return {
            "subject": f"Order {order_number} Delivered",
            "body": (
                f"Hi {name},\n\n"
                f"Your order {order_number} has been delivered successfully.\n\n"
                "We hope you love your purchase! Reviews from verified buyers help other shoppers."
            ),
            "sms": (
                f"Hi {name}! Your order {order_number} has been delivered. "
                f"We hope you love your purchase! Please leave a review.{view} - {store}"
            ),
        }
