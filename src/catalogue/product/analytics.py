"""Product analytics — append-only event log plus denormalised counters.

Every view, add-to-cart and purchase is written to ``product_events`` and
mirrored onto the product's counters with ``$inc``. The popularity score
weights the three signals:

    purchase    5 per unit
    add_to_cart 2 per unit
    view        0.2 per view

The event log is authoritative; ``recalculate_popularity`` rebuilds the
counters from it.
"""

from datetime import datetime
from enum import Enum

from pydantic import Field

from catalogue.product.product import ProductRepository
from catalogue.utils.logging import logger
from shared.document import Document, utcnow
from shared.exceptions import ValidationError
from shared.repository import Repository


class ProductEventType(Enum):
    VIEW = "view"
    ADD_TO_CART = "add_to_cart"
    PURCHASE = "purchase"


POPULARITY_WEIGHTS = {
    ProductEventType.VIEW.value: 0.2,
    ProductEventType.ADD_TO_CART.value: 2.0,
    ProductEventType.PURCHASE.value: 5.0,
}

_COUNTER_FIELDS = {
    ProductEventType.VIEW.value: "views",
    ProductEventType.ADD_TO_CART.value: "add_to_cart_count",
    ProductEventType.PURCHASE.value: "purchase_count",
}

# Event types clients may record directly; purchases come from payment confirmation.
PUBLIC_EVENT_TYPES = {ProductEventType.VIEW.value, ProductEventType.ADD_TO_CART.value}


class ProductEvent(Document):
    product_id: str
    event_type: ProductEventType
    quantity: int = 1
    user_id: str | None = None
    order_id: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


class ProductEventRepository(Repository[ProductEvent]):
    model = ProductEvent
    collection_name = "product_events"

    def append(self, event: ProductEvent) -> ProductEvent:
        self.collection.insert_one(event.to_document())
        return event


def popularity_score(views: int, add_to_cart_count: int, purchase_count: int) -> float:
    return round(
        views * POPULARITY_WEIGHTS["view"]
        + add_to_cart_count * POPULARITY_WEIGHTS["add_to_cart"]
        + purchase_count * POPULARITY_WEIGHTS["purchase"],
        4,
    )


def record_product_event(
    product_id: str,
    event_type: str,
    quantity: int = 1,
    user_id: str | None = None,
    order_id: str | None = None,
) -> ProductEvent:
    if event_type not in POPULARITY_WEIGHTS:
        raise ValidationError({"event_type": [f"Unknown event type: {event_type}"]})
    if quantity < 1:
        raise ValidationError({"quantity": ["Quantity must be at least 1"]})

    # Views always count once regardless of quantity
    if event_type == ProductEventType.VIEW.value:
        quantity = 1

    event = ProductEvent(
        product_id=product_id,
        event_type=event_type,
        quantity=quantity,
        user_id=user_id,
        order_id=order_id,
    )
    ProductEventRepository().append(event)
    ProductRepository().increment_counters(
        product_id,
        {
            _COUNTER_FIELDS[event_type]: quantity,
            "popularity_score": POPULARITY_WEIGHTS[event_type] * quantity,
        },
    )
    return event


def recalculate_popularity() -> int:
    """Rebuild every product's counters and score from the event log.

    The log is summed per product and event type inside MongoDB. Returns the
    number of products updated.
    """
    pipeline = [
        {"$group": {"_id": {"product_id": "$product_id", "event_type": "$event_type"}, "total": {"$sum": "$quantity"}}}
    ]
    totals: dict[str, dict[str, int]] = {}
    for row in ProductEventRepository().collection.aggregate(pipeline):
        event_type = row["_id"]["event_type"]
        if event_type not in _COUNTER_FIELDS:
            continue
        counters = totals.setdefault(row["_id"]["product_id"], dict.fromkeys(_COUNTER_FIELDS.values(), 0))
        counters[_COUNTER_FIELDS[event_type]] = row["total"]

    products = ProductRepository()
    updated = 0
    for document in products.collection.find({}, {"_id": 1}):
        counters = totals.get(document["_id"], dict.fromkeys(_COUNTER_FIELDS.values(), 0))
        products.collection.update_one(
            {"_id": document["_id"]},
            {"$set": {**counters, "popularity_score": popularity_score(**counters)}},
        )
        updated += 1

    logger.info("popularity_recalculated", products=updated)
    return updated


def trending_products(limit: int = 12):
    return ProductRepository().find({"is_active": True}, sort=[("popularity_score", -1)], limit=limit)
