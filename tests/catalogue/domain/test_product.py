"""Tests for Product stock and pricing rules."""

import pytest
from catalogue.product.product import InsufficientInventoryError, Product, ProductVariant
from shared.exceptions import ValidationError


def _product_with_variants():
    product = Product(
        name="Ankara Dress",
        price=300.0,
        variants=[
            ProductVariant(size="S", color="Blue", inventory=2),
            ProductVariant(size="M", color="Blue", inventory=5, price=320.0),
        ],
    )
    product.sync_inventory()
    return product


class TestInventoryAggregate:
    def test_aggregate_is_sum_of_variants(self):
        assert _product_with_variants().inventory == 7

    def test_variant_change_keeps_aggregate_in_sync(self):
        product = _product_with_variants()
        product.change_inventory(product.variants[1].id, -3)
        assert product.variants[1].inventory == 2
        assert product.inventory == 4

    def test_product_without_variants_uses_own_stock(self):
        product = Product(name="Cap", price=50.0, inventory=3)
        assert product.change_inventory(None, -1) == 2


class TestInventoryFloor:
    def test_decrement_below_zero_is_refused(self):
        product = _product_with_variants()
        with pytest.raises(InsufficientInventoryError):
            product.change_inventory(product.variants[0].id, -3)
        assert product.variants[0].inventory == 2

    def test_clamps_at_zero_without_floor(self):
        product = _product_with_variants()
        assert product.change_inventory(product.variants[0].id, -3, floor=False) == 0


class TestPricing:
    def test_variant_override(self):
        product = _product_with_variants()
        assert product.current_price(product.variants[1].id) == 320.0

    def test_falls_back_to_product_price(self):
        product = _product_with_variants()
        assert product.current_price(product.variants[0].id) == 300.0
        assert product.current_price(None) == 300.0


class TestInvariants:
    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            Product(name="Belt", price=-1.0).check_invariants()

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            Product(name="  ", price=10.0).check_invariants()
