"""Product document — catalogue entry with size/colour variants.

Inventory is tracked per variant. When a product has variants, the
aggregate ``inventory`` always equals the sum of its variant inventories;
products without variants carry their stock on ``inventory`` alone.

Popularity counters (views, add-to-cart, purchases) and the derived
``popularity_score`` are maintained with ``$inc`` by the analytics module.
Rating and review count are denormalised from approved reviews.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from shared.document import Document, new_id, utcnow
from shared.exceptions import InvalidStateError, ObjectNotFoundError, ValidationError
from shared.repository import Repository

_MAX_CAS_ATTEMPTS = 5


class InsufficientInventoryError(InvalidStateError):
    pass


class ProductVariant(BaseModel):
    id: str = Field(default_factory=new_id)
    size: str | None = None
    color: str | None = None
    sku: str | None = None
    price: float | None = None
    inventory: int = 0


class Product(Document):
    name: str
    description: str = ""
    category: str | None = None
    brand: str | None = None
    images: list[str] = Field(default_factory=list)
    price: float
    variants: list[ProductVariant] = Field(default_factory=list)
    inventory: int = 0
    is_active: bool = True

    views: int = 0
    add_to_cart_count: int = 0
    purchase_count: int = 0
    popularity_score: float = 0.0

    rating: float = 0.0
    review_count: int = 0

    inventory_version: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def primary_image(self) -> str | None:
        return self.images[0] if self.images else None

    def find_variant(self, variant_id: str | None) -> ProductVariant | None:
        if variant_id is None:
            return None
        return next((v for v in self.variants if v.id == variant_id), None)

    def available_inventory(self, variant_id: str | None = None) -> int:
        variant = self.find_variant(variant_id)
        if variant is not None:
            return variant.inventory
        return self.inventory

    def current_price(self, variant_id: str | None = None) -> float:
        """Variant price override when set, otherwise the product price."""
        variant = self.find_variant(variant_id)
        if variant is not None and variant.price is not None:
            return variant.price
        return self.price

    def sync_inventory(self) -> None:
        if self.variants:
            self.inventory = sum(v.inventory for v in self.variants)

    def change_inventory(self, variant_id: str | None, delta: int, floor: bool = True) -> int:
        """Apply ``delta`` to the variant (or product) stock and return the new level.

        With ``floor`` a change that would go negative is refused; without it
        the level is clamped at zero.
        """
        if self.variants:
            variant = self.find_variant(variant_id)
            if variant is None:
                raise ObjectNotFoundError({"variant_id": [f"Variant {variant_id} not found for product {self.name}"]})
            current = variant.inventory
        else:
            variant = None
            current = self.inventory

        new_level = current + delta
        if new_level < 0:
            if floor:
                raise InsufficientInventoryError(
                    {"inventory": [f"Insufficient inventory for {self.name}: {current} available, {-delta} requested"]}
                )
            new_level = 0

        if variant is not None:
            variant.inventory = new_level
            self.sync_inventory()
        else:
            self.inventory = new_level
        return new_level

    def check_invariants(self) -> None:
        errors: dict[str, list[str]] = {}
        if not self.name or not self.name.strip():
            errors["name"] = ["Product name is required"]
        if self.price < 0:
            errors["price"] = ["Price cannot be negative"]
        if any(v.inventory < 0 for v in self.variants) or self.inventory < 0:
            errors["inventory"] = ["Inventory cannot be negative"]
        if any(v.price is not None and v.price < 0 for v in self.variants):
            errors.setdefault("price", []).append("Variant price cannot be negative")
        if errors:
            raise ValidationError(errors)


class ProductRepository(Repository[Product]):
    model = Product
    collection_name = "products"

    def find_by_ids(self, product_ids) -> dict[str, Product]:
        """Fetch each distinct product once, keyed by id."""
        ids = list(dict.fromkeys(product_ids))
        if not ids:
            return {}
        return {p.id: p for p in self.find({"_id": {"$in": ids}})}

    def adjust_inventory(self, product_id: str, variant_id: str | None, delta: int, floor: bool = True) -> int:
        """Atomically change stock on one product document.

        Reads the product, applies the change in memory and writes it back
        only if ``inventory_version`` is unchanged, retrying on conflict.
        """
        for _ in range(_MAX_CAS_ATTEMPTS):
            document = self.collection.find_one({"_id": product_id})
            if document is None:
                raise ObjectNotFoundError({"product_id": [f"Product {product_id} not found"]})

            product = Product.from_document(document)
            new_level = product.change_inventory(variant_id, delta, floor=floor)

            result = self.collection.update_one(
                {"_id": product_id, "inventory_version": document.get("inventory_version")},
                {
                    "$set": {
                        "variants": [v.model_dump() for v in product.variants],
                        "inventory": product.inventory,
                        "updated_at": utcnow().replace(tzinfo=None),
                    },
                    "$inc": {"inventory_version": 1},
                },
            )
            if result.modified_count == 1:
                return new_level

        raise InvalidStateError({"inventory": [f"Concurrent inventory updates on product {product_id}, try again"]})

    def increment_counters(self, product_id: str, counters: dict[str, float]) -> None:
        self.collection.update_one({"_id": product_id}, {"$inc": counters})

    def set_rating(self, product_id: str, rating: float, review_count: int) -> None:
        self.collection.update_one(
            {"_id": product_id},
            {"$set": {"rating": rating, "review_count": review_count}},
        )
