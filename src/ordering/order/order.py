"""Order document — a checkout snapshot with fulfilment and payment state.

Order status and payment status are separate but correlated. Inventory is
reserved exactly once, when payment status moves to ``paid``; the atomic
``OrderRepository.claim_payment`` makes that transition idempotent.

State Machine (order status):
    pending → confirmed → processing → shipped → delivered → returned
    cancelled reachable from pending, confirmed, processing

Payment status:
    pending → paid | failed
    failed → paid (retried payment)
    paid → refunded | partially_refunded
    refunded and partially_refunded are final; verification cannot reopen them
"""

import random
import string
from datetime import UTC, datetime, timedelta
from enum import Enum

from pydantic import BaseModel, Field
from pymongo import ReturnDocument

from shared.document import Document, as_naive, utcnow
from shared.exceptions import InvalidStateError, ObjectNotFoundError, ValidationError
from shared.repository import Repository

ESTIMATED_DELIVERY_DAYS = 4


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class PaymentMethod(Enum):
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    WALLET = "wallet"
    MOBILE_MONEY = "mobile_money"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: {OrderStatus.RETURNED},
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.RETURNED: set(),  # Terminal
}

# States a customer may cancel from
CUSTOMER_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.CONFIRMED}

# Payment states a verification may still settle; refunded orders never return to paid
CLAIMABLE_PAYMENT_STATES = (PaymentStatus.PENDING.value, PaymentStatus.FAILED.value)


def _random_suffix(length: int, alphabet: str = string.digits) -> str:
    return "".join(random.choices(alphabet, k=length))


def generate_order_number(now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    return f"ORD-{now:%Y%m%d}-{_random_suffix(6)}"


def generate_tracking_number(now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    return f"TRK-{now:%Y%m%d}-{_random_suffix(8, string.ascii_uppercase + string.digits)}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
class ShippingAddress(BaseModel):
    """Where the order ships. Captured at checkout and never updated."""

    recipient_name: str
    recipient_phone: str | None = None
    street: str
    city: str
    state: str | None = None
    zip_code: str | None = None
    country: str = "Ghana"


class OrderItem(BaseModel):
    product_id: str
    variant_id: str | None = None
    product_name: str
    product_image: str | None = None
    size: str | None = None
    color: str | None = None
    quantity: int
    unit_price: float
    total_price: float


class PaymentDetails(BaseModel):
    authorization_code: str | None = None
    gateway_response: str | None = None
    channel: str | None = None
    paid_at: datetime | None = None
    failed_at: datetime | None = None
    failure_reason: str | None = None


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
class Order(Document):
    order_number: str = Field(default_factory=generate_order_number)
    user_id: str
    items: list[OrderItem]
    subtotal: float
    tax: float = 0.0
    shipping: float = 0.0
    discount: float = 0.0
    total: float
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.CARD
    payment_reference: str | None = None
    payment_details: PaymentDetails = Field(default_factory=PaymentDetails)
    shipping_address: ShippingAddress
    tracking_number: str | None = None
    estimated_delivery: datetime | None = None
    cancel_reason: str | None = None
    refunded_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        user_id,
        items: list[OrderItem],
        shipping_address: ShippingAddress,
        payment_method=PaymentMethod.CARD.value,
        tax=0.0,
        shipping=0.0,
        discount=0.0,
    ):
        if not items:
            raise ValidationError({"items": ["No items provided for order"]})
        if any(item.quantity < 1 for item in items):
            raise ValidationError({"items": ["Item quantities must be at least 1"]})

        subtotal = round(sum(item.total_price for item in items), 2)
        total = round(subtotal + tax + shipping - discount, 2)
        if total < 0:
            raise ValidationError({"discount": ["Discount cannot exceed the order value"]})

        return cls(
            user_id=user_id,
            items=items,
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            discount=discount,
            total=total,
            payment_method=payment_method,
            shipping_address=shipping_address,
        )

    @property
    def paid_at(self) -> datetime | None:
        return self.payment_details.paid_at

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID.value

    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidStateError({"status": [f"Cannot change order status from {current.value} to {target_status.value}"]})

    def transition_to(self, target_status: OrderStatus, tracking_number=None, estimated_delivery=None):
        """Move to ``target_status``, deriving shipment fields when shipping."""
        self._assert_can_transition(target_status)
        now = datetime.now(UTC)

        if tracking_number:
            self.tracking_number = tracking_number
        if estimated_delivery:
            self.estimated_delivery = estimated_delivery

        if target_status == OrderStatus.SHIPPED:
            if not self.tracking_number:
                self.tracking_number = generate_tracking_number(now)
            if not self.estimated_delivery:
                self.estimated_delivery = now + timedelta(days=ESTIMATED_DELIVERY_DAYS)

        self.status = target_status.value
        self.updated_at = now

    def cancel(self, reason: str):
        self._assert_can_transition(OrderStatus.CANCELLED)
        self.status = OrderStatus.CANCELLED.value
        self.cancel_reason = reason
        self.updated_at = datetime.now(UTC)

    def record_payment_failure(self, reference: str, reason: str | None):
        if self.payment_status not in CLAIMABLE_PAYMENT_STATES:
            raise InvalidStateError({"payment_status": [f"Cannot record a failed payment on a {self.payment_status} order"]})
        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.FAILED.value
        self.payment_reference = reference
        self.payment_details.failed_at = now
        self.payment_details.failure_reason = reason
        self.updated_at = now


class OrderRepository(Repository[Order]):
    model = Order
    collection_name = "orders"

    def for_user(self, user_id: str, order_id: str) -> Order:
        """Load an order owned by ``user_id``; other users' orders look missing."""
        order = self.find_one({"_id": order_id, "user_id": user_id})
        if order is None:
            raise ObjectNotFoundError({"order": ["Order not found"]})
        return order

    def claim_payment(self, order_id: str, reference: str, details: PaymentDetails) -> Order | None:
        """Atomically mark an unpaid order paid and confirmed.

        Only pending or failed payments can be claimed. Returns the updated
        order, or None when the payment was already settled (paid or
        refunded), so a repeated confirmation never triggers side effects.
        """
        now = utcnow()
        update = {
            "payment_status": PaymentStatus.PAID.value,
            "payment_reference": reference,
            "payment_details": details.model_dump(),
            "updated_at": now,
        }
        document = self.collection.find_one_and_update(
            {"_id": order_id, "payment_status": {"$in": list(CLAIMABLE_PAYMENT_STATES)}},
            {"$set": as_naive(update)},
            return_document=ReturnDocument.AFTER,
        )
        if document is None:
            return None

        # Only pending orders advance; a cancelled order keeps its status
        self.collection.update_one(
            {"_id": order_id, "status": OrderStatus.PENDING.value},
            {"$set": {"status": OrderStatus.CONFIRMED.value}},
        )
        return self.get(order_id)

    def mark_refunded(self, order_id: str, cancel: bool = False, reason: str | None = None) -> Order | None:
        """Conditionally move a paid order to refunded; None if it is no longer paid."""
        now = utcnow()
        update = {"payment_status": PaymentStatus.REFUNDED.value, "refunded_at": now, "updated_at": now}
        if cancel:
            update["status"] = OrderStatus.CANCELLED.value
            update["cancel_reason"] = reason
        document = self.collection.find_one_and_update(
            {"_id": order_id, "payment_status": PaymentStatus.PAID.value},
            {"$set": as_naive(update)},
            return_document=ReturnDocument.AFTER,
        )
        return self._load(document)
