"""Tests for the persisted document base."""

from datetime import UTC, datetime

from ordering.order.order import Order, OrderStatus


def _order(shipping_address):
    from ordering.order.order import OrderItem

    return Order.create(
        user_id="user-1",
        items=[OrderItem(product_id="p1", product_name="Shirt", quantity=1, unit_price=10.0, total_price=10.0)],
        shipping_address=shipping_address,
    )


class TestDocumentStorage:
    def test_id_is_stored_as_underscore_id(self, shipping_address):
        document = _order(shipping_address).to_document()
        assert "_id" in document
        assert "id" not in document

    def test_enum_defaults_are_stored_as_values(self, shipping_address):
        document = _order(shipping_address).to_document()
        assert document["status"] == OrderStatus.PENDING.value

    def test_datetimes_are_stored_naive_and_loaded_aware(self, shipping_address):
        order = _order(shipping_address)
        document = order.to_document()
        assert document["created_at"].tzinfo is None

        loaded = Order.from_document(document)
        assert loaded.created_at.tzinfo is not None
        assert abs(loaded.created_at - datetime.now(UTC)).total_seconds() < 60
