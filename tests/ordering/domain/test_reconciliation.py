"""Tests for reconciling carts against live product state."""

from catalogue.product.product import Product, ProductVariant
from ordering.cart.cart import Cart, CartItem
from ordering.cart.reconciliation import reconcile_cart


def _cart(*items):
    cart = Cart.create(user_id="user-1")
    for item in items:
        cart.add_item(item)
    return cart


def _line(product, quantity, price=None, variant_id=None):
    return CartItem(
        product_id=product.id,
        variant_id=variant_id,
        name=product.name,
        quantity=quantity,
        price=product.price if price is None else price,
    )


class TestReconcileCart:
    def test_clean_cart_is_valid(self):
        product = Product(name="Scarf", price=100.0, inventory=5)
        cart = _cart(_line(product, 2))

        result = reconcile_cart(cart, {product.id: product})

        assert result.is_valid
        assert result.errors == []
        assert cart.subtotal == 200.0

    def test_quantity_clamped_to_available_stock(self):
        product = Product(name="X", price=1000.0, inventory=3)
        cart = _cart(_line(product, 5))

        result = reconcile_cart(cart, {product.id: product})

        assert not result.is_valid
        assert cart.items[0].quantity == 3
        assert cart.subtotal == 3000.0
        assert cart.item_count == 3
        assert result.errors == ['Quantity for "X" reduced to 3 (maximum available)']
        assert len(result.updated_items) == 1

    def test_missing_product_removed(self):
        product = Product(name="Gone", price=10.0, inventory=1)
        cart = _cart(_line(product, 1))

        result = reconcile_cart(cart, {})

        assert cart.is_empty
        assert result.errors == ['Product "Gone" is no longer available']
        assert len(result.removed_items) == 1

    def test_out_of_stock_removed(self):
        product = Product(name="Sold", price=10.0, inventory=0)
        cart = _cart(_line(product, 1))

        result = reconcile_cart(cart, {product.id: product})

        assert cart.is_empty
        assert result.errors == ['"Sold" is out of stock']

    def test_missing_variant_removed(self):
        product = Product(name="Dress", price=10.0, variants=[ProductVariant(size="M", inventory=3)])
        cart = _cart(_line(product, 1, variant_id="retired"))

        result = reconcile_cart(cart, {product.id: product})

        assert cart.is_empty
        assert result.errors == ['Variant for "Dress" is no longer available']

    def test_price_change_updates_snapshot(self):
        product = Product(name="Cap", price=120.0, inventory=5)
        cart = _cart(_line(product, 2, price=100.0))

        result = reconcile_cart(cart, {product.id: product})

        assert cart.items[0].price == 120.0
        assert cart.subtotal == 240.0
        assert result.errors == ['Price for "Cap" has been updated']

    def test_price_within_tolerance_is_kept(self):
        product = Product(name="Cap", price=100.005, inventory=5)
        cart = _cart(_line(product, 1, price=100.0))

        result = reconcile_cart(cart, {product.id: product})

        assert result.is_valid
        assert cart.items[0].price == 100.0
