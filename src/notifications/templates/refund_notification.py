"""Refund decision templates — approval (email + SMS) and rejection (email only)."""

from notifications.notification.notification import NotificationChannel, NotificationType


class RefundApprovedTemplate:
    notification_type = NotificationType.REFUND_APPROVED.value
    default_channels = [NotificationChannel.EMAIL.value, NotificationChannel.SMS.value]
    sms_priority = 1

    @staticmethod
    def render(context: dict) -> dict:
        name = context.get("customer_name", "there")
        order_number = context.get("order_number", "N/A")
        amount = context.get("amount", 0.0)
        currency = context.get("currency", "GHS")
        store = context.get("store_name", "ThePlug")
        return {
            "subject": f"Refund Approved - {currency} {amount:.2f}",
            "body": (
                f"Hi {name},\n\n"
                f"Your refund of {currency} {amount:.2f} for order {order_number} has been approved.\n\n"
                "The refund should appear in your account within 3-5 business days, "
                "depending on your payment provider."
            ),
            "sms": (
                f"Hi {name}! Your refund for order {order_number} ({currency} {amount:.2f}) has been approved "
                f"and will be processed within 3-5 business days. - {store}"
            ),
        }


class RefundRejectedTemplate:
    notification_type = NotificationType.REFUND_REJECTED.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        name = context.get("customer_name", "there")
        order_number = context.get("order_number", "N/A")
        reason = context.get("reason")
        return {
            "subject": f"Refund Request for Order {order_number}",
            "body": (
                f"Hi {name},\n\n"
                f"We're sorry, your refund request for order {order_number} was not approved."
                + (f"\n\nNote from our team: {reason}" if reason else "")
                + "\n\nYou may submit a new request while your order is still within the refund window."
            ),
        }
