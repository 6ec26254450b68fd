"""Order lifecycle — admin status updates and customer cancellation.

The status change is the authoritative outcome. Moving an order to
processing, shipped or delivered (or cancelling it) submits a notification
task; the task runs after the response and its failure never reverts the
status change.
"""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel

from notifications.notification.dispatch import submit_notification
from notifications.notification.notification import NotificationTask, NotificationType
from ordering.order.order import CUSTOMER_CANCELLABLE_STATES, Order, OrderRepository, OrderStatus
from ordering.utils.logging import logger
from shared.exceptions import InvalidStateError, ValidationError

_STATUS_NOTIFICATIONS = {
    OrderStatus.PROCESSING: NotificationType.ORDER_PROCESSING,
    OrderStatus.SHIPPED: NotificationType.ORDER_SHIPPED,
    OrderStatus.DELIVERED: NotificationType.ORDER_DELIVERED,
    OrderStatus.CANCELLED: NotificationType.ORDER_CANCELLED,
}


class UpdateOrderStatus(BaseModel):
    order_id: str
    status: OrderStatus
    tracking_number: str | None = None
    estimated_delivery: datetime | None = None
    cancel_reason: str | None = None


class CancelOrder(BaseModel):
    order_id: str
    user_id: str
    reason: str


@dataclass
class StatusChange:
    order: Order
    notification: NotificationTask | None = None


class OrderLifecycleHandler:
    def update_order_status(self, command: UpdateOrderStatus) -> StatusChange:
        repo = OrderRepository()
        order = repo.get(command.order_id)
        target = OrderStatus(command.status)
        previous = order.status

        if target == OrderStatus.CANCELLED:
            order.cancel(command.cancel_reason or "Cancelled by store")
        else:
            order.transition_to(
                target,
                tracking_number=command.tracking_number,
                estimated_delivery=command.estimated_delivery,
            )
        repo.add(order)

        logger.info(
            "order_status_updated",
            order_id=order.id,
            order_number=order.order_number,
            from_status=previous,
            to_status=order.status,
        )

        notification = None
        if target in _STATUS_NOTIFICATIONS:
            payload = {"order_id": order.id}
            if target == OrderStatus.CANCELLED:
                payload["reason"] = order.cancel_reason
            notification = submit_notification(_STATUS_NOTIFICATIONS[target].value, **payload)
        return StatusChange(order=order, notification=notification)

    def cancel_order(self, command: CancelOrder) -> StatusChange:
        """Customers may cancel their own orders before processing starts."""
        if not command.reason or not command.reason.strip():
            raise ValidationError({"reason": ["Cancel reason is required when cancelling an order"]})

        repo = OrderRepository()
        order = repo.for_user(command.user_id, command.order_id)
        if OrderStatus(order.status) not in CUSTOMER_CANCELLABLE_STATES:
            raise InvalidStateError({"status": [f"Cannot change order status from {order.status} to cancelled"]})

        order.cancel(command.reason.strip())
        repo.add(order)
        logger.info("order_cancelled_by_customer", order_id=order.id, order_number=order.order_number)

        notification = submit_notification(
            NotificationType.ORDER_CANCELLED.value, order_id=order.id, reason=order.cancel_reason
        )
        return StatusChange(order=order, notification=notification)
