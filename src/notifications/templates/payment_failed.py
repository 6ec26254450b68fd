"""Payment failure template."""

from notifications.notification.notification import NotificationChannel, NotificationType


class PaymentFailedTemplate:
    notification_type = NotificationType.PAYMENT_FAILED.value
    default_channels = [NotificationChannel.EMAIL.value, NotificationChannel.SMS.value]
    sms_priority = 1

    @staticmethod
    def render(context: dict) -> dict:
        name = context.get("customer_name", "there")
        order_number = context.get("order_number", "N/A")
        store = context.get("store_name", "ThePlug")
        return {
            "subject": f"Payment for Order {order_number} Failed",
            "body": (
                f"Hi {name},\n\n"
                f"We could not complete payment for order {order_number}. "
                "Please try again or contact support. Your order is on hold."
            ),
            "sms": (
                f"Hi {name}, payment for order {order_number} failed. "
                f"Please try again or contact support. Your order is on hold. - {store}"
            ),
        }
