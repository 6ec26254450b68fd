"""Tests for the Cart document."""

import pytest
from ordering.cart.cart import Cart, CartItem
from shared.exceptions import ValidationError


def _item(**overrides):
    defaults = {"product_id": "prod-1", "name": "Kente Shirt", "quantity": 1, "price": 100.0}
    return CartItem(**{**defaults, **overrides})


class TestCartOwnership:
    def test_user_cart(self):
        cart = Cart.create(user_id="user-1")
        assert cart.user_id == "user-1"
        assert cart.session_id is None

    def test_guest_cart(self):
        cart = Cart.create(session_id="sess-1")
        assert cart.session_id == "sess-1"

    def test_requires_exactly_one_owner(self):
        with pytest.raises(ValidationError):
            Cart.create()


class TestCartItems:
    def test_totals_are_derived(self):
        cart = Cart.create(user_id="user-1")
        cart.add_item(_item(quantity=2, price=100.0))
        cart.add_item(_item(product_id="prod-2", quantity=1, price=50.5))

        assert cart.subtotal == 250.5
        assert cart.item_count == 3

    def test_adding_same_line_increases_quantity(self):
        cart = Cart.create(user_id="user-1")
        cart.add_item(_item(quantity=1))
        cart.add_item(_item(quantity=2))

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3

    def test_variants_are_separate_lines(self):
        cart = Cart.create(user_id="user-1")
        cart.add_item(_item(variant_id="m"))
        cart.add_item(_item(variant_id="l"))
        assert len(cart.items) == 2

    def test_zero_quantity_update_removes_line(self):
        cart = Cart.create(user_id="user-1")
        item = cart.add_item(_item(quantity=2))
        cart.update_item_quantity(item.id, 0)

        assert cart.is_empty
        assert cart.subtotal == 0
        assert cart.item_count == 0

    def test_negative_quantity_rejected(self):
        cart = Cart.create(user_id="user-1")
        item = cart.add_item(_item())
        with pytest.raises(ValidationError):
            cart.update_item_quantity(item.id, -1)

    def test_unknown_item(self):
        cart = Cart.create(user_id="user-1")
        with pytest.raises(ValidationError):
            cart.remove_item("missing")

    def test_clear_keeps_cart(self):
        cart = Cart.create(user_id="user-1")
        cart.add_item(_item())
        cart.clear()
        assert cart.is_empty
        assert cart.item_count == 0
