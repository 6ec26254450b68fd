"""Cart reconciliation against live product state.

Runs on every cart read. Each line is checked against the current product
(and variant) in this order:

1. product or variant no longer exists  -> line removed
2. no stock left                        -> line removed
3. quantity above available stock       -> quantity clamped
4. live price differs by more than 0.01 -> price snapshot updated

Products are fetched once per distinct id. Nothing protects against stock
changing between reconciliation and checkout.
"""

from dataclasses import dataclass, field

from catalogue.product.product import Product, ProductRepository
from ordering.cart.cart import Cart, CartItem, CartRepository
from ordering.utils.logging import logger
from shared.money import prices_differ


@dataclass
class CartValidation:
    is_valid: bool = True
    removed_items: list[CartItem] = field(default_factory=list)
    updated_items: list[CartItem] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    # Product snapshot the lines were checked against, keyed by id
    products: dict[str, Product] = field(default_factory=dict, repr=False)

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "removed_items": [i.model_dump() for i in self.removed_items],
            "updated_items": [i.model_dump() for i in self.updated_items],
            "errors": list(self.errors),
        }


def reconcile_cart(cart: Cart, products: dict[str, Product]) -> CartValidation:
    """Correct ``cart`` in place against ``products`` and report every change."""
    result = CartValidation(products=products)
    surviving: list[CartItem] = []

    for item in cart.items:
        product = products.get(item.product_id)
        if product is None:
            result.removed_items.append(item)
            result.errors.append(f'Product "{item.name}" is no longer available')
            continue

        if item.variant_id is not None and product.find_variant(item.variant_id) is None:
            result.removed_items.append(item)
            result.errors.append(f'Variant for "{item.name}" is no longer available')
            continue

        available = product.available_inventory(item.variant_id)
        if available <= 0:
            result.removed_items.append(item)
            result.errors.append(f'"{item.name}" is out of stock')
            continue

        corrected = item.model_copy()
        changed = False

        if corrected.quantity > available:
            corrected.quantity = available
            result.errors.append(f'Quantity for "{item.name}" reduced to {available} (maximum available)')
            changed = True

        live_price = product.current_price(item.variant_id)
        if prices_differ(live_price, corrected.price):
            corrected.price = live_price
            result.errors.append(f'Price for "{item.name}" has been updated')
            changed = True

        if changed:
            result.updated_items.append(corrected)
        surviving.append(corrected)

    result.is_valid = not result.removed_items and not result.updated_items
    cart.replace_items(surviving)
    return result


class CartReconciler:
    def reconcile(self, cart: Cart) -> CartValidation:
        """Reconcile against one snapshot of the referenced products and persist corrections."""
        products = ProductRepository().find_by_ids(item.product_id for item in cart.items)
        result = reconcile_cart(cart, products)

        if not result.is_valid:
            CartRepository().add(cart)
            logger.info(
                "cart_reconciled",
                cart_id=cart.id,
                removed=len(result.removed_items),
                updated=len(result.updated_items),
            )
        return result
