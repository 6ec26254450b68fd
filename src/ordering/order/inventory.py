"""Inventory reservation and restoration for orders.

Reservation runs once, after payment is confirmed. Each line item is
decremented independently with a floor: a line that would drive stock
negative is not decremented and is reported as a shortfall for operators
to resolve, and so is a line whose update failed outright. Restoration
(refunds) increments stock back and never fails the refund; problems are
logged.
"""

from dataclasses import dataclass

from catalogue.product.product import ProductRepository
from ordering.order.order import Order
from ordering.utils.logging import logger
from shared.exceptions import StorefrontError


@dataclass(frozen=True)
class InventoryShortfall:
    product_id: str
    variant_id: str | None
    quantity: int
    reason: str


def reserve_inventory(order: Order) -> list[InventoryShortfall]:
    repo = ProductRepository()
    shortfalls = []
    for item in order.items:
        try:
            repo.adjust_inventory(item.product_id, item.variant_id, -item.quantity, floor=True)
        except StorefrontError as e:
            shortfalls.append(InventoryShortfall(item.product_id, item.variant_id, item.quantity, e.message))
        except Exception as e:
            # The payment is already claimed, so confirmation carries on
            shortfalls.append(InventoryShortfall(item.product_id, item.variant_id, item.quantity, str(e)))

    if shortfalls:
        logger.error(
            "inventory_reservation_shortfall",
            order_id=order.id,
            order_number=order.order_number,
            shortfalls=[s.__dict__ for s in shortfalls],
        )
    return shortfalls


def restore_inventory(order: Order) -> list[InventoryShortfall]:
    repo = ProductRepository()
    failures = []
    for item in order.items:
        try:
            repo.adjust_inventory(item.product_id, item.variant_id, item.quantity, floor=False)
        except Exception as e:
            failures.append(InventoryShortfall(item.product_id, item.variant_id, item.quantity, str(e)))

    if failures:
        logger.error(
            "inventory_restoration_failed",
            order_id=order.id,
            order_number=order.order_number,
            failures=[f.__dict__ for f in failures],
        )
    return failures
