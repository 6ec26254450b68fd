"""Customer refund requests — submission and status lookup.

A refund may be requested only by the order's owner, only while the order
is paid, and only within the refund window (six hours after payment by
default, see ``REFUND_WINDOW_HOURS``).
"""

from datetime import UTC, datetime, timedelta

from pydantic import BaseModel

from ordering.order.order import OrderRepository, PaymentStatus
from payments.refund.refund_request import (
    MAX_REASON_LENGTH,
    RefundRequest,
    RefundRequestRepository,
    RefundRequestStatus,
)
from payments.utils.logging import logger
from shared.config import get_settings
from shared.exceptions import InvalidStateError, ValidationError


class RequestRefund(BaseModel):
    order_id: str
    user_id: str
    reason: str | None = None


class RefundRequestHandler:
    def request_refund(self, command: RequestRefund, now: datetime | None = None) -> RefundRequest:
        now = now or datetime.now(UTC)
        order = OrderRepository().for_user(command.user_id, command.order_id)

        if order.payment_status != PaymentStatus.PAID.value:
            raise ValidationError({"order": ["Refund not available for unpaid orders"]})
        if order.paid_at is None:
            raise ValidationError({"order": ["Refund window not available"]})

        window_hours = get_settings().refund_window_hours
        if now - order.paid_at > timedelta(hours=window_hours):
            raise ValidationError({"order": [f"Refund window ({window_hours} hours) has expired"]})

        reason = command.reason[:MAX_REASON_LENGTH] if command.reason else None
        repo = RefundRequestRepository()
        existing = repo.for_order(order.id, order.user_id)

        if existing is not None:
            if existing.status == RefundRequestStatus.PENDING.value:
                raise InvalidStateError({"refund": ["Refund request already submitted"]})
            if existing.status == RefundRequestStatus.APPROVED.value:
                raise InvalidStateError({"refund": ["Refund already approved for this order"]})
            existing.resubmit(reason)
            repo.add(existing)
            logger.info("refund_request_resubmitted", refund_id=existing.id, order_id=order.id)
            return existing

        refund = RefundRequest(order_id=order.id, user_id=order.user_id, reason=reason, amount=order.total)
        repo.add(refund)
        logger.info("refund_requested", refund_id=refund.id, order_id=order.id, amount=order.total)
        return refund

    def refund_status(self, order_id: str, user_id: str) -> RefundRequest | None:
        order = OrderRepository().for_user(user_id, order_id)
        return RefundRequestRepository().for_order(order.id, order.user_id)
