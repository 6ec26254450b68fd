"""Order processing template — sent when the warehouse starts on an order."""

from notifications.notification.notification import NotificationChannel, NotificationType


class OrderProcessingTemplate:
    notification_type = NotificationType.ORDER_PROCESSING.value
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
            "subject": f"Order {order_number} Is Being Prepared",
            "body": (
                f"Hi {name},\n\n"
                f"Your order {order_number} is currently being processed.\n\n"
                "We'll let you know as soon as it ships."
            ),
            "sms": f"Hi {name}! Your order {order_number} is being prepared for shipment.{view} - {store}",
        }
