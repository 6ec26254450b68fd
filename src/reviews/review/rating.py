"""Product rating — average of approved, visible reviews, cached on the product."""

from catalogue.product.product import ProductRepository
from reviews.review.review import ModerationStatus, ReviewRepository
from reviews.utils.logging import logger
from shared.money import round_half_up


def recalculate_product_rating(product_id: str) -> tuple[float, int]:
    """Recompute and store ``(rating, review_count)`` for ``product_id``.

    The rating is the mean over approved and visible reviews, rounded half
    up to one decimal place. A product without such reviews is 0.0 / 0.
    """
    ratings = [
        doc["rating"]
        for doc in ReviewRepository().collection.find(
            {"product_id": product_id, "status": ModerationStatus.APPROVED.value, "is_visible": True},
            {"rating": 1},
        )
    ]
    count = len(ratings)
    rating = round_half_up(sum(ratings) / count, 1) if count else 0.0

    ProductRepository().set_rating(product_id, rating, count)
    logger.info("product_rating_recalculated", product_id=product_id, rating=rating, review_count=count)
    return rating, count
