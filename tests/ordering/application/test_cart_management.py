"""Tests for cart management commands."""

import pytest
from catalogue.product.product import ProductRepository
from ordering.cart.cart import CartRepository
from ordering.cart.management import (
    AddToCart,
    ClearCart,
    ManageCartHandler,
    MergeGuestCart,
    UpdateCartItem,
)
from shared.exceptions import ObjectNotFoundError, ValidationError


class TestAddToCart:
    def test_guest_add_creates_cart(self, make_product):
        product = make_product(price=100.0, inventory=5)
        cart = ManageCartHandler().add_to_cart(AddToCart(session_id="sess-1", product_id=product.id, quantity=2))

        stored = CartRepository().for_owner(session_id="sess-1")
        assert stored.id == cart.id
        assert stored.subtotal == 200.0
        assert stored.item_count == 2

    def test_records_add_to_cart_event(self, make_product):
        product = make_product()
        ManageCartHandler().add_to_cart(AddToCart(user_id="user-1", product_id=product.id, quantity=3))
        assert ProductRepository().get(product.id).add_to_cart_count == 3

    def test_cannot_exceed_stock(self, make_product):
        product = make_product(inventory=2)
        handler = ManageCartHandler()
        handler.add_to_cart(AddToCart(user_id="user-1", product_id=product.id, quantity=2))

        with pytest.raises(ValidationError, match="Only 2 left in stock"):
            handler.add_to_cart(AddToCart(user_id="user-1", product_id=product.id, quantity=1))

    def test_variant_required_for_variant_products(self, make_product):
        product = make_product(variants=[{"size": "M", "inventory": 3}])
        with pytest.raises(ValidationError):
            ManageCartHandler().add_to_cart(AddToCart(user_id="user-1", product_id=product.id))

    def test_variant_line_snapshots_size(self, make_product):
        product = make_product(variants=[{"size": "M", "color": "Gold", "inventory": 3, "price": 120.0}])
        variant = product.variants[0]
        cart = ManageCartHandler().add_to_cart(AddToCart(user_id="user-1", product_id=product.id, variant_id=variant.id))

        line = cart.items[0]
        assert (line.size, line.color, line.price) == ("M", "Gold", 120.0)

    def test_owner_required(self, make_product):
        product = make_product()
        with pytest.raises(ValidationError):
            ManageCartHandler().add_to_cart(AddToCart(product_id=product.id))


class TestUpdateAndClear:
    def test_update_quantity(self, make_product, make_cart):
        product = make_product(inventory=5)
        cart = make_cart([(product, 1)], user_id="user-1")

        updated = ManageCartHandler().update_cart_item(
            UpdateCartItem(user_id="user-1", item_id=cart.items[0].id, quantity=4)
        )
        assert updated.item_count == 4

    def test_update_beyond_stock_rejected(self, make_product, make_cart):
        product = make_product(inventory=2)
        cart = make_cart([(product, 1)], user_id="user-1")
        with pytest.raises(ValidationError):
            ManageCartHandler().update_cart_item(UpdateCartItem(user_id="user-1", item_id=cart.items[0].id, quantity=3))

    def test_update_missing_cart(self):
        with pytest.raises(ObjectNotFoundError):
            ManageCartHandler().update_cart_item(UpdateCartItem(user_id="nobody", item_id="x", quantity=1))

    def test_clear_empties_cart(self, make_product, make_cart):
        product = make_product()
        make_cart([(product, 2)], user_id="user-1")

        ManageCartHandler().clear_cart(ClearCart(user_id="user-1"))

        stored = CartRepository().for_owner(user_id="user-1")
        assert stored.is_empty
        assert stored.subtotal == 0


class TestMergeGuestCart:
    def test_merge_moves_lines_and_deletes_guest_cart(self, make_product, make_cart):
        product = make_product(inventory=5)
        make_cart([(product, 2)], session_id="sess-1")

        cart = ManageCartHandler().merge_guest_cart(MergeGuestCart(user_id="user-1", session_id="sess-1"))

        assert cart.user_id == "user-1"
        assert cart.item_count == 2
        assert CartRepository().for_owner(session_id="sess-1") is None

    def test_merge_caps_at_stock(self, make_product, make_cart):
        product = make_product(inventory=3)
        make_cart([(product, 2)], user_id="user-1")
        make_cart([(product, 2)], session_id="sess-1")

        cart = ManageCartHandler().merge_guest_cart(MergeGuestCart(user_id="user-1", session_id="sess-1"))
        assert cart.item_count == 3
