"""Order confirmation template — sent once payment is confirmed."""

from notifications.notification.notification import NotificationChannel, NotificationType


class OrderConfirmationTemplate:
    notification_type = NotificationType.ORDER_CONFIRMATION.value
    default_channels = [NotificationChannel.EMAIL.value, NotificationChannel.SMS.value]
    sms_priority = 1

    @staticmethod
    def render(context: dict) -> dict:
        name = context.get("customer_name", "there")
        order_number = context.get("order_number", "N/A")
        total = context.get("total", 0.0)
        currency = context.get("currency", "GHS")
        store = context.get("store_name", "ThePlug")
        order_url = context.get("order_url")
        track = f" Track: {order_url}" if order_url else ""
        return {
            "subject": f"Order {order_number} Confirmed",
            "body": (
                f"Hi {name},\n\n"
                f"Your order {order_number} has been confirmed.\n\n"
                f"Order Total: {currency} {total:.2f}\n\n"
                "We'll notify you once your order ships.\n\n"
                f"Thank you for shopping with {store}!"
            ),
            "sms": (
                f"Hi {name}! Your order {order_number} has been confirmed. Total: {currency} {total:.2f}. "
                f"We'll notify you when it ships.{track} Thank you for shopping with {store}!"
            ),
        }
