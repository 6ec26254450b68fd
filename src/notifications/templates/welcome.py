"""Welcome template — sent when a customer signs up."""

from notifications.notification.notification import NotificationChannel, NotificationType


class WelcomeTemplate:
    notification_type = NotificationType.WELCOME.value
    default_channels = [NotificationChannel.SMS.value]
    sms_priority = 3

    @staticmethod
    def render(context: dict) -> dict:
        name = context.get("customer_name", "there")
        store = context.get("store_name", "ThePlug")
        return {
            "subject": f"Welcome to {store}, {name}!",
            "body": f"Hi {name},\n\nThank you for joining {store}! Discover the latest fashion trends and exclusive deals.",
            "sms": f"Welcome to {store}, {name}! Discover the latest fashion trends and exclusive deals. Start shopping now!",
        }
