"""Tests for initialising and confirming checkout payments."""

import pytest
from catalogue.product.product import ProductRepository
from notifications.notification.notification import NotificationTaskRepository
from ordering.cart.cart import CartRepository
from ordering.checkout.confirmation import (
    CheckoutPaymentHandler,
    ConfirmPayment,
    InitializePayment,
    ProcessPaymentWebhook,
)
from ordering.order.order import OrderRepository
from payments.refund.approval import ApproveRefund, RefundApprovalHandler
from payments.refund.refund_request import RefundRequest, RefundRequestRepository
from shared.exceptions import (
    ExternalServiceError,
    InvalidStateError,
    ObjectNotFoundError,
    PaymentMismatchError,
    ValidationError,
)

REFERENCE = "PSK-TEST-0001"


@pytest.fixture
def checkout(make_user, make_product, make_cart, make_order):
    """A user with a 50.00 pending order and the cart it was placed from."""
    user = make_user()
    product = make_product(price=25.0, inventory=10)
    make_cart([(product, 2)], user_id=user.id)
    order = make_order(user.id, [(product, 2)], payment_reference=REFERENCE)
    return user, product, order


def _confirm(user, order, **overrides):
    fields = {"reference": REFERENCE, "order_id": order.id, "user_id": user.id}
    return CheckoutPaymentHandler().confirm_payment(ConfirmPayment(**{**fields, **overrides}))


class TestInitializePayment:
    def test_returns_reference_and_minor_units(self, checkout):
        user, _, order = checkout
        result = CheckoutPaymentHandler().initialize_payment(InitializePayment(order_id=order.id, user_id=user.id))

        assert result.amount == 5000
        assert result.reference.startswith(f"PSK-{order.order_number}-")
        assert OrderRepository().get(order.id).payment_reference == result.reference

    def test_other_users_order_is_not_found(self, checkout):
        _, _, order = checkout
        with pytest.raises(ObjectNotFoundError):
            CheckoutPaymentHandler().initialize_payment(InitializePayment(order_id=order.id, user_id="someone-else"))

    def test_paid_order_cannot_be_reinitialised(self, make_user, make_product, make_order):
        user = make_user()
        order = make_order(user.id, [(make_product(), 1)], paid=True)
        with pytest.raises(InvalidStateError):
            CheckoutPaymentHandler().initialize_payment(InitializePayment(order_id=order.id, user_id=user.id))


class TestConfirmPayment:
    def test_matching_amount_confirms_order(self, checkout, gateway):
        user, product, order = checkout
        gateway.register_transaction(REFERENCE, 5000)

        result = _confirm(user, order)

        assert result.success
        assert not result.already_paid
        stored = OrderRepository().get(order.id)
        assert stored.payment_status == "paid"
        assert stored.status == "confirmed"
        assert stored.payment_details.authorization_code.startswith("AUTH_")
        assert ProductRepository().get(product.id).inventory == 8
        assert ProductRepository().get(product.id).purchase_count == 2
        assert CartRepository().for_owner(user_id=user.id) is None

    def test_submits_order_confirmation_task(self, checkout, gateway):
        user, _, order = checkout
        gateway.register_transaction(REFERENCE, 5000)

        result = _confirm(user, order)

        task = NotificationTaskRepository().get(result.notification.id)
        assert task.kind == "order_confirmation"
        assert task.payload == {"order_id": order.id}
        assert task.status == "submitted"

    def test_amount_mismatch_rejected(self, checkout, gateway):
        user, product, order = checkout
        gateway.register_transaction(REFERENCE, 4999)

        with pytest.raises(PaymentMismatchError) as exc:
            _confirm(user, order)

        assert (exc.value.expected, exc.value.received) == (5000, 4999)
        stored = OrderRepository().get(order.id)
        assert stored.payment_status == "pending"
        assert ProductRepository().get(product.id).inventory == 10
        assert CartRepository().for_owner(user_id=user.id) is not None

    def test_second_confirmation_reserves_once(self, checkout, gateway):
        user, product, order = checkout
        gateway.register_transaction(REFERENCE, 5000)

        _confirm(user, order)
        second = _confirm(user, order)

        assert second.success
        assert second.already_paid
        assert second.notification is None
        assert ProductRepository().get(product.id).inventory == 8
        assert NotificationTaskRepository().count({"kind": "order_confirmation"}) == 1

    def test_locates_order_by_reference(self, checkout, gateway):
        user, _, order = checkout
        gateway.register_transaction(REFERENCE, 5000)

        result = _confirm(user, order, order_id=None)
        assert result.order.id == order.id

    def test_guest_session_cart_is_cleared(self, checkout, gateway, make_cart, make_product):
        user, _, order = checkout
        make_cart([(make_product(name="Guest item"), 1)], session_id="sess-1")
        gateway.register_transaction(REFERENCE, 5000)

        _confirm(user, order, session_id="sess-1")

        assert CartRepository().for_owner(session_id="sess-1") is None

    def test_failed_verification_marks_payment_failed(self, checkout, gateway):
        user, product, order = checkout
        gateway.register_transaction(REFERENCE, 5000, success=False)

        result = _confirm(user, order)

        assert not result.success
        stored = OrderRepository().get(order.id)
        assert stored.payment_status == "failed"
        assert stored.status == "pending"
        assert ProductRepository().get(product.id).inventory == 10
        assert NotificationTaskRepository().get(result.notification.id).kind == "payment_failed"

    def test_failed_payment_can_be_retried(self, checkout, gateway):
        user, _, order = checkout
        gateway.register_transaction(REFERENCE, 5000, success=False)
        _confirm(user, order)

        gateway.register_transaction(REFERENCE, 5000)
        result = _confirm(user, order)

        assert result.success
        assert OrderRepository().get(order.id).payment_status == "paid"

    def test_other_users_payment_is_not_found(self, checkout, gateway):
        _, _, order = checkout
        gateway.register_transaction(REFERENCE, 5000)
        with pytest.raises(ObjectNotFoundError, match="Order not found for this payment"):
            CheckoutPaymentHandler().confirm_payment(
                ConfirmPayment(reference=REFERENCE, order_id=order.id, user_id="intruder")
            )

    def test_reference_required(self, checkout):
        user, _, order = checkout
        with pytest.raises(ValidationError):
            _confirm(user, order, reference="  ")

    def test_gateway_outage(self, checkout, gateway, monkeypatch):
        user, _, order = checkout

        def unavailable(reference):
            raise ConnectionError("gateway down")

        monkeypatch.setattr(gateway, "verify_payment", unavailable)
        with pytest.raises(ExternalServiceError):
            _confirm(user, order)
        assert OrderRepository().get(order.id).payment_status == "pending"

    def test_stock_shortfall_does_not_undo_payment(self, checkout, gateway):
        user, product, order = checkout
        ProductRepository().collection.update_one({"_id": product.id}, {"$set": {"inventory": 1}})
        gateway.register_transaction(REFERENCE, 5000)

        result = _confirm(user, order)

        assert result.success
        assert len(result.shortfalls) == 1
        assert OrderRepository().get(order.id).payment_status == "paid"
        assert ProductRepository().get(product.id).inventory == 1

    def test_reservation_error_does_not_stop_confirmation(self, checkout, gateway, monkeypatch):
        user, product, order = checkout
        gateway.register_transaction(REFERENCE, 5000)

        def connection_reset(self, *args, **kwargs):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(ProductRepository, "adjust_inventory", connection_reset)
        result = _confirm(user, order)

        assert result.success
        assert [s.reason for s in result.shortfalls] == ["connection reset"]
        assert OrderRepository().get(order.id).payment_status == "paid"
        assert ProductRepository().get(product.id).purchase_count == 2
        assert CartRepository().for_owner(user_id=user.id) is None
        assert result.notification is not None


class TestConfirmAfterRefund:
    @pytest.fixture
    def refunded(self, checkout, gateway):
        user, product, order = checkout
        gateway.register_transaction(REFERENCE, 5000)
        _confirm(user, order)
        refund = RefundRequest(order_id=order.id, user_id=user.id, reason="Too big", amount=order.total)
        RefundRequestRepository().add(refund)
        RefundApprovalHandler().approve_refund(ApproveRefund(refund_id=refund.id, admin_id="admin-1"))
        return user, product, order

    def test_replayed_verification_is_a_conflict(self, refunded):
        user, product, order = refunded
        assert ProductRepository().get(product.id).inventory == 10

        with pytest.raises(InvalidStateError):
            _confirm(user, order)

        stored = OrderRepository().get(order.id)
        assert stored.payment_status == "refunded"
        assert ProductRepository().get(product.id).inventory == 10
        assert ProductRepository().get(product.id).purchase_count == 2
        assert NotificationTaskRepository().count({"kind": "order_confirmation"}) == 1

    def test_failed_verification_keeps_refund_recorded(self, refunded, gateway):
        user, _, order = refunded
        gateway.register_transaction(REFERENCE, 5000, success=False)

        with pytest.raises(InvalidStateError):
            _confirm(user, order)

        stored = OrderRepository().get(order.id)
        assert stored.payment_status == "refunded"
        assert stored.refunded_at is not None
        assert NotificationTaskRepository().count({"kind": "payment_failed"}) == 0

    def test_claim_skips_refunded_orders(self, refunded):
        _, _, order = refunded
        stored = OrderRepository().get(order.id)
        assert OrderRepository().claim_payment(order.id, REFERENCE, stored.payment_details) is None


class TestPaymentWebhook:
    def _webhook(self, event, order=None):
        command = ProcessPaymentWebhook(event=event, reference=REFERENCE, order_id=order.id if order else None)
        return CheckoutPaymentHandler().process_webhook(command)

    def test_charge_success_confirms_order(self, checkout, gateway):
        user, product, order = checkout
        gateway.register_transaction(REFERENCE, 5000)

        result = self._webhook("charge.success")

        assert result.success
        assert result.order.id == order.id
        assert OrderRepository().get(order.id).payment_status == "paid"
        assert ProductRepository().get(product.id).inventory == 8
        assert CartRepository().for_owner(user_id=user.id) is None

    def test_redelivered_success_reserves_once(self, checkout, gateway):
        _, product, order = checkout
        gateway.register_transaction(REFERENCE, 5000)

        self._webhook("charge.success", order)
        again = self._webhook("charge.success", order)

        assert again.already_paid
        assert again.notification is None
        assert ProductRepository().get(product.id).inventory == 8

    def test_webhook_after_customer_verify_is_a_no_op(self, checkout, gateway):
        user, product, order = checkout
        gateway.register_transaction(REFERENCE, 5000)

        _confirm(user, order)
        result = self._webhook("charge.success", order)

        assert result.already_paid
        assert ProductRepository().get(product.id).inventory == 8

    def test_charge_failed_records_failure_once(self, checkout, gateway):
        _, product, order = checkout
        gateway.register_transaction(REFERENCE, 5000, success=False)

        first = self._webhook("charge.failed", order)
        second = self._webhook("charge.failed", order)

        assert not first.success
        assert not second.success
        assert second.notification is None
        assert OrderRepository().get(order.id).payment_status == "failed"
        assert ProductRepository().get(product.id).inventory == 10
        assert NotificationTaskRepository().count({"kind": "payment_failed"}) == 1

    def test_failure_event_for_verified_payment_keeps_it_paid(self, checkout, gateway):
        _, _, order = checkout
        gateway.register_transaction(REFERENCE, 5000)

        result = self._webhook("charge.failed", order)

        # outcome comes from the gateway, not from the event name
        assert result.success
        assert OrderRepository().get(order.id).payment_status == "paid"

    def test_unrelated_events_ignored(self, checkout, gateway):
        _, _, order = checkout
        gateway.register_transaction(REFERENCE, 5000)

        assert self._webhook("transfer.success", order) is None
        assert OrderRepository().get(order.id).payment_status == "pending"
        assert gateway.calls == []
