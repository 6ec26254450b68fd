"""Cart management — commands and handler.

Covers adding, updating and removing lines, clearing the cart, and merging a
guest cart into the user's cart on sign-in.
"""

from pydantic import BaseModel

from catalogue.product.analytics import ProductEventType, record_product_event
from catalogue.product.product import ProductRepository
from ordering.cart.cart import Cart, CartItem, CartRepository
from ordering.utils.logging import logger
from shared.exceptions import ObjectNotFoundError, ValidationError


class CartOwner(BaseModel):
    user_id: str | None = None
    session_id: str | None = None


class AddToCart(CartOwner):
    product_id: str
    variant_id: str | None = None
    quantity: int = 1


class UpdateCartItem(CartOwner):
    item_id: str
    quantity: int


class RemoveCartItem(CartOwner):
    item_id: str


class ClearCart(CartOwner):
    pass


class MergeGuestCart(BaseModel):
    user_id: str
    session_id: str


def _require_owner(command: CartOwner) -> None:
    if not command.user_id and not command.session_id:
        raise ValidationError({"session": ["A user or guest session is required"]})


class ManageCartHandler:
    def _load(self, command: CartOwner) -> Cart:
        _require_owner(command)
        cart = CartRepository().for_owner(user_id=command.user_id, session_id=command.session_id)
        if cart is None:
            raise ObjectNotFoundError({"cart": ["Cart not found"]})
        return cart

    def add_to_cart(self, command: AddToCart) -> Cart:
        _require_owner(command)
        if command.quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        product = ProductRepository().get(command.product_id)
        if not product.is_active:
            raise ValidationError({"product_id": ["Product is not available"]})

        variant = None
        if product.variants:
            if not command.variant_id:
                raise ValidationError({"variant_id": ["Please select a size or colour"]})
            variant = product.find_variant(command.variant_id)
            if variant is None:
                raise ObjectNotFoundError({"variant_id": ["Variant not found"]})

        repo = CartRepository()
        cart = repo.get_or_create(user_id=command.user_id, session_id=command.session_id)

        available = product.available_inventory(command.variant_id)
        existing = cart.find_line(product.id, command.variant_id)
        requested = command.quantity + (existing.quantity if existing else 0)
        if requested > available:
            raise ValidationError({"quantity": [f"Only {available} left in stock"]})

        cart.add_item(
            CartItem(
                product_id=product.id,
                variant_id=command.variant_id,
                name=product.name,
                image=product.primary_image,
                size=variant.size if variant else None,
                color=variant.color if variant else None,
                quantity=command.quantity,
                price=product.current_price(command.variant_id),
            )
        )
        repo.add(cart)

        try:
            record_product_event(
                product.id,
                ProductEventType.ADD_TO_CART.value,
                quantity=command.quantity,
                user_id=command.user_id,
            )
        except Exception as e:
            logger.warning("add_to_cart_event_failed", product_id=product.id, error=str(e))

        return cart

    def update_cart_item(self, command: UpdateCartItem) -> Cart:
        cart = self._load(command)
        item = cart.find_item(command.item_id)

        if command.quantity > 0:
            product = ProductRepository().get(item.product_id)
            available = product.available_inventory(item.variant_id)
            if command.quantity > available:
                raise ValidationError({"quantity": [f"Only {available} left in stock"]})

        cart.update_item_quantity(command.item_id, command.quantity)
        CartRepository().add(cart)
        return cart

    def remove_cart_item(self, command: RemoveCartItem) -> Cart:
        cart = self._load(command)
        cart.remove_item(command.item_id)
        CartRepository().add(cart)
        return cart

    def clear_cart(self, command: ClearCart) -> Cart | None:
        _require_owner(command)
        repo = CartRepository()
        cart = repo.for_owner(user_id=command.user_id, session_id=command.session_id)
        if cart is not None:
            cart.clear()
            repo.add(cart)
        return cart

    def merge_guest_cart(self, command: MergeGuestCart) -> Cart:
        """Fold the guest session's cart into the user's cart and delete it.

        Merged quantities are capped at available stock; lines whose product
        is gone or sold out are dropped.
        """
        repo = CartRepository()
        user_cart = repo.get_or_create(user_id=command.user_id)
        guest_cart = repo.for_owner(session_id=command.session_id)
        if guest_cart is None or guest_cart.is_empty:
            if guest_cart is not None:
                repo.delete(guest_cart.id)
            return user_cart

        products = ProductRepository().find_by_ids(i.product_id for i in guest_cart.items)
        merged = 0
        for guest_item in guest_cart.items:
            product = products.get(guest_item.product_id)
            if product is None:
                continue
            available = product.available_inventory(guest_item.variant_id)
            existing = user_cart.find_line(guest_item.product_id, guest_item.variant_id)
            current = existing.quantity if existing else 0
            quantity = min(guest_item.quantity, available - current)
            if quantity <= 0:
                continue

            user_cart.add_item(
                guest_item.model_copy(update={"quantity": quantity, "price": product.current_price(guest_item.variant_id)})
            )
            merged += 1

        repo.add(user_cart)
        repo.delete(guest_cart.id)
        logger.info("guest_cart_merged", cart_id=user_cart.id, items_merged=merged)
        return user_cart
