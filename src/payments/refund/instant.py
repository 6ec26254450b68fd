"""Instant refund — an admin refunds a paid order before processing starts.

No customer request is needed. The gateway refund happens first; on
success the order is cancelled and refunded, stock is restored and an
approved ``RefundRequest`` is written for the audit trail.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import BaseModel

from notifications.notification.dispatch import submit_notification
from notifications.notification.notification import NotificationTask, NotificationType
from ordering.order.inventory import restore_inventory
from ordering.order.order import Order, OrderRepository, OrderStatus, PaymentStatus
from payments.gateway import get_gateway
from payments.refund.refund_request import RefundRequest, RefundRequestRepository, RefundRequestStatus
from payments.utils.logging import logger
from shared.exceptions import ExternalServiceError, InvalidStateError, ValidationError
from shared.money import to_minor_units

INSTANT_REFUND_REASON = "Admin instant refund before processing."
INSTANT_REFUND_STATES = {OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value}


class InstantRefund(BaseModel):
    order_id: str
    admin_id: str


@dataclass
class InstantRefundResult:
    order: Order
    refund: RefundRequest
    notification: NotificationTask | None = None


class InstantRefundHandler:
    def instant_refund(self, command: InstantRefund) -> InstantRefundResult:
        orders = OrderRepository()
        order = orders.get(command.order_id)

        if order.payment_status != PaymentStatus.PAID.value:
            raise InvalidStateError({"order": ["Order is not paid"]})
        if order.status not in INSTANT_REFUND_STATES:
            raise InvalidStateError({"order": ["Instant refund allowed only before processing"]})
        if not order.payment_reference:
            raise ValidationError({"order": ["Order has no payment reference to refund"]})

        try:
            result = get_gateway().refund_payment(order.payment_reference, to_minor_units(order.total))
        except Exception as e:
            logger.error("instant_refund_gateway_error", order_id=order.id, error=str(e))
            raise ExternalServiceError({"gateway": [f"Refund failed: {e}"]}) from e
        if not result.success:
            raise ExternalServiceError({"gateway": [result.message or "Refund failed"]})

        refunded = orders.mark_refunded(order.id, cancel=True, reason=INSTANT_REFUND_REASON)
        if refunded is None:
            raise InvalidStateError({"order": ["Order is no longer paid"]})

        restore_inventory(refunded)
        refund = self._record_audit(refunded, command.admin_id)
        logger.info(
            "instant_refund_processed",
            order_id=refunded.id,
            order_number=refunded.order_number,
            amount=refunded.total,
            admin_id=command.admin_id,
        )

        notification = submit_notification(
            NotificationType.REFUND_APPROVED.value, order_id=refunded.id, amount=refunded.total
        )
        return InstantRefundResult(order=refunded, refund=refund, notification=notification)

    def _record_audit(self, order: Order, admin_id: str) -> RefundRequest:
        repo = RefundRequestRepository()
        refund = repo.for_order(order.id, order.user_id)
        if refund is None:
            refund = RefundRequest(order_id=order.id, user_id=order.user_id, amount=order.total)

        now = datetime.now(UTC)
        refund.status = RefundRequestStatus.APPROVED.value
        refund.reason = refund.reason or INSTANT_REFUND_REASON
        refund.is_instant = True
        refund.processed_by = admin_id
        refund.processed_at = now
        refund.updated_at = now
        repo.add(refund)
        return refund
