"""Shopping Cart document — owned by a signed-in user or a guest session.

Exactly one of ``user_id`` / ``session_id`` identifies the owner. Each line
item snapshots the unit price and display name at the time it was added;
reconciliation against live products corrects those snapshots on read.

``subtotal`` and ``item_count`` are derived from the items and recomputed
on every change. A cart with no items is simply empty; it is deleted only
after a successful payment.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, model_validator

from shared.document import Document, new_id, utcnow
from shared.exceptions import ValidationError
from shared.repository import Repository


class CartItem(BaseModel):
    id: str = Field(default_factory=new_id)
    product_id: str
    variant_id: str | None = None
    name: str
    image: str | None = None
    size: str | None = None
    color: str | None = None
    quantity: int
    price: float

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class Cart(Document):
    user_id: str | None = None
    session_id: str | None = None
    items: list[CartItem] = Field(default_factory=list)
    subtotal: float = 0.0
    item_count: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _single_owner(self):
        if bool(self.user_id) == bool(self.session_id):
            raise ValueError("A cart belongs to either a user or a guest session")
        return self

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id=None, session_id=None):
        if bool(user_id) == bool(session_id):
            raise ValidationError({"cart": ["A cart belongs to either a user or a guest session"]})
        return cls(user_id=user_id, session_id=None if user_id else session_id)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def recalculate_totals(self) -> None:
        self.subtotal = round(sum(item.line_total for item in self.items), 2)
        self.item_count = sum(item.quantity for item in self.items)
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def find_line(self, product_id, variant_id=None) -> CartItem | None:
        return next(
            (i for i in self.items if i.product_id == product_id and i.variant_id == variant_id),
            None,
        )

    def find_item(self, item_id) -> CartItem:
        item = next((i for i in self.items if i.id == item_id), None)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})
        return item

    def add_item(self, item: CartItem) -> CartItem:
        """Add a line, or increase the quantity of the matching product/variant line."""
        if item.quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.find_line(item.product_id, item.variant_id)
        if existing:
            existing.quantity += item.quantity
            existing.price = item.price
            item = existing
        else:
            self.items.append(item)

        self.recalculate_totals()
        return item

    def update_item_quantity(self, item_id, new_quantity: int) -> None:
        """Set a line's quantity. Zero removes the line."""
        if new_quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})

        item = self.find_item(item_id)
        if new_quantity == 0:
            self.items.remove(item)
        else:
            item.quantity = new_quantity
        self.recalculate_totals()

    def remove_item(self, item_id) -> None:
        item = self.find_item(item_id)
        self.items.remove(item)
        self.recalculate_totals()

    def clear(self) -> None:
        self.items = []
        self.recalculate_totals()

    def replace_items(self, items: list[CartItem]) -> None:
        self.items = items
        self.recalculate_totals()


class CartRepository(Repository[Cart]):
    model = Cart
    collection_name = "carts"

    def for_owner(self, user_id: str | None = None, session_id: str | None = None) -> Cart | None:
        if user_id:
            return self.find_one({"user_id": user_id})
        if session_id:
            return self.find_one({"session_id": session_id})
        return None

    def get_or_create(self, user_id: str | None = None, session_id: str | None = None) -> Cart:
        cart = self.for_owner(user_id=user_id, session_id=session_id)
        if cart is None:
            cart = Cart.create(user_id=user_id, session_id=session_id)
        return cart

    def delete_for_owner(self, user_id: str | None = None, session_id: str | None = None) -> int:
        deleted = 0
        if user_id:
            deleted += self.delete_many({"user_id": user_id})
        if session_id:
            deleted += self.delete_many({"session_id": session_id})
        return deleted
