"""Checkout payment — initialisation and confirmation.

Confirmation is the only place an order becomes paid. The sequence after a
successful gateway verification is:

1. the verified amount must match the order total in minor units
2. the order is claimed atomically (pending or failed payment -> paid, and
   pending -> confirmed); a second confirmation stops here
3. inventory is reserved (shortfalls are logged, never rolled back)
4. one purchase event is recorded per line item
5. the user's cart and the session's guest cart are deleted
6. an order_confirmation notification task is submitted

The same confirmation runs for the customer's verify call and for the
gateway's webhook callback, whichever arrives first.

A failed verification marks the payment failed and submits a
payment_failed notification. Stock and carts are left alone.

Refunded orders are settled for good: verifying them again, successfully
or not, is a state conflict.
"""

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import BaseModel

from catalogue.product.analytics import ProductEventType, record_product_event
from notifications.notification.dispatch import submit_notification
from notifications.notification.notification import NotificationTask, NotificationType
from ordering.cart.cart import CartRepository
from ordering.order.inventory import InventoryShortfall, reserve_inventory
from ordering.order.order import (
    CLAIMABLE_PAYMENT_STATES,
    Order,
    OrderRepository,
    OrderStatus,
    PaymentDetails,
    PaymentStatus,
)
from ordering.utils.logging import logger
from payments.gateway import get_gateway
from shared.exceptions import (
    ExternalServiceError,
    InvalidStateError,
    ObjectNotFoundError,
    PaymentMismatchError,
    ValidationError,
)
from shared.money import to_minor_units


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
class InitializePayment(BaseModel):
    order_id: str
    user_id: str


class ConfirmPayment(BaseModel):
    reference: str
    order_id: str | None = None
    user_id: str | None = None
    session_id: str | None = None


class ProcessPaymentWebhook(BaseModel):
    """A gateway callback, already authenticated by its signature."""

    event: str
    reference: str
    order_id: str | None = None


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------
@dataclass
class PaymentInitialization:
    order: Order
    reference: str
    amount: int


@dataclass
class PaymentConfirmation:
    order: Order
    success: bool
    already_paid: bool = False
    failure_reason: str | None = None
    shortfalls: list[InventoryShortfall] | None = None
    notification: NotificationTask | None = None


# Gateway callback events that settle a payment; others are acknowledged and ignored
WEBHOOK_PAYMENT_EVENTS = ("charge.success", "charge.failed")


def generate_payment_reference(order_number: str) -> str:
    return f"PSK-{order_number}-{secrets.token_hex(4)}"


class CheckoutPaymentHandler:
    def __init__(self) -> None:
        self.orders = OrderRepository()

    def initialize_payment(self, command: InitializePayment) -> PaymentInitialization:
        order = self.orders.for_user(command.user_id, command.order_id)
        if order.payment_status not in CLAIMABLE_PAYMENT_STATES:
            raise InvalidStateError({"payment_status": [f"Order payment is already {order.payment_status}"]})
        if order.status != OrderStatus.PENDING.value:
            raise InvalidStateError({"status": [f"Cannot pay for an order that is {order.status}"]})

        order.payment_reference = generate_payment_reference(order.order_number)
        order.updated_at = datetime.now(UTC)
        self.orders.add(order)

        logger.info(
            "payment_initialized",
            order_id=order.id,
            order_number=order.order_number,
            reference=order.payment_reference,
        )
        return PaymentInitialization(
            order=order,
            reference=order.payment_reference,
            amount=to_minor_units(order.total),
        )

    def confirm_payment(self, command: ConfirmPayment) -> PaymentConfirmation:
        reference = (command.reference or "").strip()
        if not reference:
            raise ValidationError({"reference": ["Payment reference is required"]})

        try:
            verification = get_gateway().verify_payment(reference)
        except Exception as e:
            logger.error("payment_verification_error", reference=reference, error=str(e))
            raise ExternalServiceError({"gateway": [f"Failed to verify payment: {e}"]}) from e

        order = self._locate_order(command, reference)
        self._assert_not_refunded(order)

        if not verification.success:
            return self._record_failure(order, reference, verification.gateway_response)

        expected = to_minor_units(order.total)
        if verification.amount != expected:
            logger.error(
                "payment_amount_mismatch",
                order_id=order.id,
                reference=reference,
                expected=expected,
                received=verification.amount,
            )
            raise PaymentMismatchError(expected, verification.amount)

        details = PaymentDetails(
            authorization_code=verification.authorization_code,
            gateway_response=verification.gateway_response,
            channel=verification.channel,
            paid_at=verification.paid_at or datetime.now(UTC),
        )
        claimed = self.orders.claim_payment(order.id, reference, details)
        if claimed is None:
            current = self.orders.get(order.id)
            self._assert_not_refunded(current)
            logger.info("payment_already_confirmed", order_id=order.id, reference=reference)
            return PaymentConfirmation(order=current, success=True, already_paid=True)

        shortfalls = reserve_inventory(claimed)
        self._record_purchases(claimed)
        self._clear_carts(claimed, command.session_id)

        logger.info(
            "payment_confirmed",
            order_id=claimed.id,
            order_number=claimed.order_number,
            reference=reference,
            amount=expected,
        )
        notification = submit_notification(NotificationType.ORDER_CONFIRMATION.value, order_id=claimed.id)
        return PaymentConfirmation(
            order=claimed,
            success=True,
            shortfalls=shortfalls,
            notification=notification,
        )

    def process_webhook(self, command: ProcessPaymentWebhook) -> PaymentConfirmation | None:
        """Settle a payment from a gateway callback.

        The event only says which transaction changed. Its outcome is read
        back from the gateway through ``confirm_payment``, so a success and a
        failure callback share the same amount check and atomic claim, and a
        redelivered callback is a no-op.
        """
        if command.event not in WEBHOOK_PAYMENT_EVENTS:
            logger.info("payment_webhook_ignored", webhook_event=command.event, reference=command.reference)
            return None

        logger.info("payment_webhook_received", webhook_event=command.event, reference=command.reference)
        return self.confirm_payment(ConfirmPayment(reference=command.reference, order_id=command.order_id))

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _locate_order(self, command: ConfirmPayment, reference: str) -> Order:
        if command.order_id:
            order = self.orders.find_one({"_id": command.order_id})
        else:
            order = self.orders.find_one({"payment_reference": reference})

        if order is None or (command.user_id and order.user_id != command.user_id):
            raise ObjectNotFoundError({"order": ["Order not found for this payment"]})
        return order

    def _assert_not_refunded(self, order: Order) -> None:
        if order.payment_status in (PaymentStatus.REFUNDED.value, PaymentStatus.PARTIALLY_REFUNDED.value):
            logger.warning("payment_verification_on_refunded_order", order_id=order.id, payment_status=order.payment_status)
            raise InvalidStateError({"payment_status": [f"Order payment has been {order.payment_status}"]})

    def _record_failure(self, order: Order, reference: str, reason: str | None) -> PaymentConfirmation:
        if order.payment_status == PaymentStatus.PAID.value:
            return PaymentConfirmation(order=order, success=True, already_paid=True)
        if order.payment_status == PaymentStatus.FAILED.value and order.payment_reference == reference:
            # Same failed transaction reported again; the customer was already told
            return PaymentConfirmation(order=order, success=False, failure_reason=order.payment_details.failure_reason)

        order.record_payment_failure(reference, reason)
        self.orders.add(order)
        logger.warning("payment_failed", order_id=order.id, reference=reference, reason=reason)

        notification = submit_notification(
            NotificationType.PAYMENT_FAILED.value, order_id=order.id, reason=reason
        )
        return PaymentConfirmation(
            order=order,
            success=False,
            failure_reason=reason,
            notification=notification,
        )

    def _record_purchases(self, order: Order) -> None:
        for item in order.items:
            try:
                record_product_event(
                    item.product_id,
                    ProductEventType.PURCHASE.value,
                    quantity=item.quantity,
                    user_id=order.user_id,
                    order_id=order.id,
                )
            except Exception as e:
                logger.error("purchase_event_failed", order_id=order.id, product_id=item.product_id, error=str(e))

    def _clear_carts(self, order: Order, session_id: str | None) -> None:
        try:
            CartRepository().delete_for_owner(user_id=order.user_id)
            if session_id:
                CartRepository().delete_for_owner(session_id=session_id)
        except Exception as e:
            logger.error("cart_clear_failed", order_id=order.id, error=str(e))
