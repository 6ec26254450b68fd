"""Review submission and eligibility.

Only customers with a paid order containing the product may review it.
Submitting again for the same product revises the existing review in
place; its moderation status is left as it was.
"""

from dataclasses import dataclass

from pydantic import BaseModel

from catalogue.product.product import ProductRepository
from ordering.order.order import Order, OrderRepository, PaymentStatus
from reviews.review.rating import recalculate_product_rating
from reviews.review.review import Review, ReviewRepository
from reviews.utils.logging import logger
from shared.exceptions import AuthorizationError


class SubmitReview(BaseModel):
    user_id: str
    product_id: str
    rating: int
    title: str | None = None
    comment: str | None = None


@dataclass
class ReviewEligibility:
    can_review: bool
    reason: str | None = None
    order: Order | None = None
    existing_review: Review | None = None


def paid_order_for_product(user_id: str, product_id: str) -> Order | None:
    return OrderRepository().find_one(
        {"user_id": user_id, "payment_status": PaymentStatus.PAID.value, "items.product_id": product_id}
    )


def review_eligibility(user_id: str | None, product_id: str) -> ReviewEligibility:
    if not user_id:
        return ReviewEligibility(can_review=False, reason="not_authenticated")

    order = paid_order_for_product(user_id, product_id)
    if order is None:
        return ReviewEligibility(can_review=False, reason="no_paid_order")

    return ReviewEligibility(
        can_review=True,
        order=order,
        existing_review=ReviewRepository().for_user_and_product(user_id, product_id),
    )


class SubmitReviewHandler:
    def submit_review(self, command: SubmitReview) -> tuple[Review, bool]:
        """Create or revise the user's review. Returns ``(review, created)``."""
        rating, title, comment = Review.check_content(command.rating, command.title, command.comment)
        ProductRepository().get(command.product_id)

        order = paid_order_for_product(command.user_id, command.product_id)
        if order is None:
            raise AuthorizationError({"review": ["Only customers who purchased this product can review it"]})

        repo = ReviewRepository()
        review = repo.for_user_and_product(command.user_id, command.product_id)
        created = review is None
        if created:
            review = Review(
                user_id=command.user_id,
                product_id=command.product_id,
                order_id=order.id,
                rating=rating,
                title=title,
                comment=comment,
                is_verified_purchase=True,
            )
        else:
            review.revise(rating, title, comment, order.id)
        repo.add(review)

        logger.info(
            "review_submitted" if created else "review_updated",
            review_id=review.id,
            product_id=review.product_id,
            user_id=review.user_id,
            rating=review.rating,
            status=review.status,
        )
        recalculate_product_rating(review.product_id)
        return review, created
