"""Order cancellation template."""

from notifications.notification.notification import NotificationChannel, NotificationType


class OrderCancellationTemplate:
    notification_type = NotificationType.ORDER_CANCELLED.value
    default_channels = [NotificationChannel.EMAIL.value, NotificationChannel.SMS.value]
    sms_priority = 1

    @staticmethod
    def render(context: dict) -> dict:
        name = context.get("customer_name", "there")
        order_number = context.get("order_number", "N/A")
        reason = context.get("reason")
        store = context.get("store_name", "ThePlug")
        reason_text = f" Reason: {reason}" if reason else ""
        return {
            "subject": f"Order {order_number} Cancelled",
            "body": (
                f"Hi {name},\n\n"
                f"Your order {order_number} has been cancelled.{reason_text}\n\n"
                "Any payment will be refunded within 3-5 business days."
            ),
            "sms": (
                f"Hi {name}, your order {order_number} has been cancelled.{reason_text} "
                f"Any payment will be refunded within 3-5 business days. - {store}"
            ),
        }
