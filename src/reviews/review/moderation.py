"""Review moderation — admins approve, reject or flag reviews.

Visibility follows the decision: approved reviews are shown, rejected and
flagged ones are hidden. The product rating is recomputed afterwards.
"""

from pydantic import BaseModel

from reviews.review.rating import recalculate_product_rating
from reviews.review.review import ModerationStatus, Review, ReviewRepository
from reviews.utils.logging import logger


class ModerateReview(BaseModel):
    review_id: str
    moderator_id: str
    status: ModerationStatus
    reason: str | None = None


class ModerateReviewHandler:
    def moderate_review(self, command: ModerateReview) -> Review:
        repo = ReviewRepository()
        review = repo.get(command.review_id)
        previous = review.status

        review.moderate(command.status, command.moderator_id, command.reason)
        repo.add(review)

        logger.info(
            "review_moderated",
            review_id=review.id,
            moderator_id=command.moderator_id,
            from_status=previous,
            to_status=review.status,
        )
        recalculate_product_rating(review.product_id)
        return review
