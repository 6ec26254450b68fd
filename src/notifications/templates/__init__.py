"""Template registry — maps NotificationType to template classes.

Each template knows its channels, the SMS queue priority for its type,
and how to render subject, email body and SMS text from a context dict.
"""

from notifications.notification.notification import NotificationType
from notifications.templates.delivery_confirmation import DeliveryConfirmationTemplate
from notifications.templates.order_cancellation import OrderCancellationTemplate
from notifications.templates.order_confirmation import OrderConfirmationTemplate
from notifications.templates.order_processing import OrderProcessingTemplate
from notifications.templates.payment_failed import PaymentFailedTemplate
from notifications.templates.refund_notification import RefundApprovedTemplate, RefundRejectedTemplate
from notifications.templates.shipping_update import ShippingUpdateTemplate
from notifications.templates.welcome import WelcomeTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.WELCOME.value: WelcomeTemplate,
    NotificationType.ORDER_CONFIRMATION.value: OrderConfirmationTemplate,
    NotificationType.ORDER_PROCESSING.value: OrderProcessingTemplate,
    NotificationType.ORDER_SHIPPED.value: ShippingUpdateTemplate,
    NotificationType.ORDER_DELIVERED.value: DeliveryConfirmationTemplate,
    NotificationType.ORDER_CANCELLED.value: OrderCancellationTemplate,
    NotificationType.PAYMENT_FAILED.value: PaymentFailedTemplate,
    NotificationType.REFUND_APPROVED.value: RefundApprovedTemplate,
    NotificationType.REFUND_REJECTED.value: RefundRejectedTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
