"""Reporting reviews for inappropriate content.

Each user may report a review once. Once enough reports accumulate
(``REVIEW_REPORT_THRESHOLD``, default 5) the review is flagged and
hidden until a moderator looks at it.
"""

from pydantic import BaseModel

from reviews.review.rating import recalculate_product_rating
from reviews.review.review import MAX_REASON_LENGTH, Review, ReviewRepository
from reviews.utils.logging import logger
from shared.exceptions import ValidationError


class ReportReview(BaseModel):
    review_id: str
    user_id: str
    reason: str


class ReportReviewHandler:
    def report_review(self, command: ReportReview) -> Review:
        reason = (command.reason or "").strip()
        if not reason:
            raise ValidationError({"reason": ["Report reason is required"]})
        if len(reason) > MAX_REASON_LENGTH:
            raise ValidationError({"reason": [f"Report reason cannot exceed {MAX_REASON_LENGTH} characters"]})

        repo = ReviewRepository()
        review = repo.get(command.review_id)
        flagged = review.report(command.user_id)
        repo.add(review)

        logger.info(
            "review_reported",
            review_id=review.id,
            reporter_id=command.user_id,
            reason=reason,
            report_count=review.report_count,
        )
        if flagged:
            logger.warning("review_auto_flagged", review_id=review.id, report_count=review.report_count)
            recalculate_product_rating(review.product_id)
        return review
