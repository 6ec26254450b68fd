"""Shipping update template — sent when an order ships."""

from notifications.notification.notification import NotificationChannel, NotificationType


class ShippingUpdateTemplate:
    notification_type = NotificationType.ORDER_SHIPPED.value
    default_channels = [NotificationChannel.EMAIL.value, NotificationChannel.SMS.value]
    sms_priority = 2

    @staticmethod
    def render(context: dict) -> dict:
        name = context.get("customer_name", "there")
        order_number = context.get("order_number", "N/A")
        tracking_number = context.get("tracking_number")
        estimated_delivery = context.get("estimated_delivery") or "soon"
        store = context.get("store_name", "ThePlug")
        order_url = context.get("order_url")
        tracking = f" Tracking: {tracking_number}" if tracking_number else ""
        track = f" Track: {order_url}" if order_url else ""
        return {
            "subject": "Your Order Has Shipped!",
            "body": (
                f"Hi {name},\n\n"
                f"Great news! Your order {order_number} has shipped.\n\n"
                f"Tracking Number: {tracking_number or 'N/A'}\n"
                f"Estimated Delivery: {estimated_delivery}\n"
            ),
            "sms": (
                f"Hi {name}! Your order {order_number} has been shipped and is on its way to you."
                f"{tracking}{track} Thank you for choosing {store}!"
            ),
        }
