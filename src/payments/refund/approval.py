"""Admin refund decisions — approve through the gateway, reject, or mark refunded.

Approval calls the gateway first. Nothing changes locally unless the
gateway accepts the refund; once it does, the request is approved, the
order moves to ``refunded``, ordered quantities go back into stock and the
customer is notified. ``mark_refunded`` records a refund settled outside
the gateway (e.g. a manual mobile money transfer).
"""

from dataclasses import dataclass

from pydantic import BaseModel

from notifications.notification.dispatch import submit_notification
from notifications.notification.notification import NotificationTask, NotificationType
from ordering.order.inventory import restore_inventory
from ordering.order.order import Order, OrderRepository, PaymentStatus
from payments.gateway import get_gateway
from payments.refund.refund_request import RefundRequest, RefundRequestRepository, RefundRequestStatus
from payments.utils.logging import logger
from shared.exceptions import ExternalServiceError, InvalidStateError, ValidationError
from shared.money import to_minor_units


class ApproveRefund(BaseModel):
    refund_id: str
    admin_id: str
    note: str | None = None


class RejectRefund(BaseModel):
    refund_id: str
    admin_id: str
    note: str | None = None


class MarkRefunded(BaseModel):
    refund_id: str
    admin_id: str
    note: str | None = None


@dataclass
class RefundDecision:
    refund: RefundRequest
    order: Order | None
    notification: NotificationTask | None = None


class RefundApprovalHandler:
    def __init__(self) -> None:
        self.refunds = RefundRequestRepository()
        self.orders = OrderRepository()

    def _load_pending(self, refund_id: str) -> RefundRequest:
        refund = self.refunds.get(refund_id)
        if not refund.is_pending:
            raise InvalidStateError({"status": ["Refund request already processed"]})
        return refund

    def approve_refund(self, command: ApproveRefund) -> RefundDecision:
        refund = self._load_pending(command.refund_id)
        order = self.orders.get(refund.order_id)

        if order.payment_status != PaymentStatus.PAID.value:
            raise InvalidStateError({"order": [f"Order payment is {order.payment_status}, not paid"]})
        if not order.payment_reference:
            raise ValidationError({"order": ["Order has no payment reference to refund"]})

        amount = to_minor_units(order.total)
        try:
            result = get_gateway().refund_payment(order.payment_reference, amount)
        except Exception as e:
            logger.error("refund_gateway_error", refund_id=refund.id, order_id=order.id, error=str(e))
            raise ExternalServiceError({"gateway": [f"Refund failed: {e}"]}) from e
        if not result.success:
            logger.error("refund_rejected_by_gateway", refund_id=refund.id, order_id=order.id, message=result.message)
            raise ExternalServiceError({"gateway": [result.message or "Refund failed"]})

        return self._settle(refund, order, command.admin_id, command.note)

    def mark_refunded(self, command: MarkRefunded) -> RefundDecision:
        refund = self._load_pending(command.refund_id)
        order = self.orders.get(refund.order_id)
        if order.payment_status != PaymentStatus.PAID.value:
            raise InvalidStateError({"order": [f"Order payment is {order.payment_status}, not paid"]})
        return self._settle(refund, order, command.admin_id, command.note or "Refunded outside the gateway")

    def reject_refund(self, command: RejectRefund) -> RefundDecision:
        refund = self._load_pending(command.refund_id)
        refund.decide(RefundRequestStatus.REJECTED, command.admin_id, command.note)
        self.refunds.add(refund)
        logger.info("refund_rejected", refund_id=refund.id, order_id=refund.order_id, admin_id=command.admin_id)

        order = self.orders.find_one({"_id": refund.order_id})
        notification = None
        if order is not None:
            notification = submit_notification(
                NotificationType.REFUND_REJECTED.value, order_id=order.id, reason=command.note
            )
        return RefundDecision(refund=refund, order=order, notification=notification)

    def _settle(self, refund: RefundRequest, order: Order, admin_id: str, note: str | None) -> RefundDecision:
        refunded = self.orders.mark_refunded(order.id)
        if refunded is None:
            raise InvalidStateError({"order": ["Order is no longer paid"]})

        refund.decide(RefundRequestStatus.APPROVED, admin_id, note)
        self.refunds.add(refund)

        restore_inventory(refunded)
        logger.info(
            "refund_approved",
            refund_id=refund.id,
            order_id=refunded.id,
            order_number=refunded.order_number,
            amount=refunded.total,
            admin_id=admin_id,
        )

        notification = submit_notification(
            NotificationType.REFUND_APPROVED.value, order_id=refunded.id, amount=refunded.total
        )
        return RefundDecision(refund=refund, order=refunded, notification=notification)
