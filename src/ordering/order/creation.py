"""Order placement — command and handler.

Builds an order from the user's reconciled cart, snapshotting product
names, images and live prices. Stock is checked but not reserved; the
reservation happens once payment is confirmed.
"""

from pydantic import BaseModel

from ordering.cart.cart import CartRepository
from ordering.cart.reconciliation import CartReconciler
from ordering.order.order import Order, OrderItem, OrderRepository, PaymentMethod, ShippingAddress
from ordering.utils.logging import logger
from shared.exceptions import InvalidStateError, ValidationError


class PlaceOrder(BaseModel):
    user_id: str
    shipping_address: ShippingAddress
    payment_method: PaymentMethod = PaymentMethod.CARD
    tax: float = 0.0
    shipping: float = 0.0
    discount: float = 0.0


class PlaceOrderHandler:
    def place_order(self, command: PlaceOrder) -> Order:
        cart = CartRepository().for_owner(user_id=command.user_id)
        if cart is None or cart.is_empty:
            raise ValidationError({"cart": ["Cart not found or empty"]})

        validation = CartReconciler().reconcile(cart)
        if not validation.is_valid:
            # The customer must see corrected prices and quantities before paying
            raise InvalidStateError({"cart": validation.errors})
        if cart.is_empty:
            raise ValidationError({"cart": ["Cart not found or empty"]})

        # Lines are priced from the product snapshot reconciliation checked
        items = []
        for line in cart.items:
            product = validation.products[line.product_id]
            variant = product.find_variant(line.variant_id)
            unit_price = product.current_price(line.variant_id)
            items.append(
                OrderItem(
                    product_id=product.id,
                    variant_id=line.variant_id,
                    product_name=product.name,
                    product_image=product.primary_image,
                    size=variant.size if variant else line.size,
                    color=variant.color if variant else line.color,
                    quantity=line.quantity,
                    unit_price=unit_price,
                    total_price=round(unit_price * line.quantity, 2),
                )
            )

        order = Order.create(
            user_id=command.user_id,
            items=items,
            shipping_address=command.shipping_address,
            payment_method=PaymentMethod(command.payment_method).value,
            tax=command.tax,
            shipping=command.shipping,
            discount=command.discount,
        )
        OrderRepository().add(order)

        logger.info("order_placed", order_id=order.id, order_number=order.order_number, total=order.total)
        return order
