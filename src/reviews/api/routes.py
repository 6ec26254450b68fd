"""FastAPI routes for the Reviews domain."""

from fastapi import APIRouter, Depends

from identity.auth import CurrentUser, get_current_user, get_optional_user, require_admin
from reviews.api.schemas import ModerateReviewRequest, ReportReviewRequest, SubmitReviewRequest
from reviews.review.moderation import ModerateReview, ModerateReviewHandler
from reviews.review.reporting import ReportReview, ReportReviewHandler
from reviews.review.review import ReviewRepository
from reviews.review.submission import SubmitReview, SubmitReviewHandler, review_eligibility
from reviews.review.voting import VoteHelpful, VoteHelpfulHandler

# ---------------------------------------------------------------------------
# Product Reviews Router
# ---------------------------------------------------------------------------
product_review_router = APIRouter(prefix="/products", tags=["reviews"])


@product_review_router.get("/{product_id}/reviews")
async def list_product_reviews(product_id: str, limit: int = 10, skip: int = 0) -> dict:
    reviews = ReviewRepository().visible_for_product(product_id, limit=max(1, min(limit, 50)), skip=skip)
    return {"reviews": [r.to_dict() for r in reviews]}


@product_review_router.post("/{product_id}/reviews")
async def submit_review(product_id: str, body: SubmitReviewRequest, user: CurrentUser = Depends(get_current_user)) -> dict:
    command = SubmitReview(user_id=user.user_id, product_id=product_id, **body.model_dump())
    review, created = SubmitReviewHandler().submit_review(command)
    return {
        "success": True,
        "message": "Review submitted" if created else "Review updated",
        "review": review.to_dict(),
    }


@product_review_router.get("/{product_id}/reviews/eligibility")
async def get_review_eligibility(product_id: str, user: CurrentUser | None = Depends(get_optional_user)) -> dict:
    eligibility = review_eligibility(user.user_id if user else None, product_id)
    return {
        "can_review": eligibility.can_review,
        "reason": eligibility.reason,
        "my_review": eligibility.existing_review.to_dict() if eligibility.existing_review else None,
    }


# ---------------------------------------------------------------------------
# Review Router
# ---------------------------------------------------------------------------
review_router = APIRouter(prefix="/reviews", tags=["reviews"])


@review_router.post("/{review_id}/report")
async def report_review(review_id: str, body: ReportReviewRequest, user: CurrentUser = Depends(get_current_user)) -> dict:
    review = ReportReviewHandler().report_review(ReportReview(review_id=review_id, user_id=user.user_id, reason=body.reason))
    return {"message": "Review reported successfully", "report_count": review.report_count}


@review_router.post("/{review_id}/helpful")
async def vote_helpful(review_id: str, user: CurrentUser = Depends(get_current_user)) -> dict:
    review = VoteHelpfulHandler().vote_helpful(VoteHelpful(review_id=review_id, user_id=user.user_id))
    return {"message": "Thanks for your feedback", "helpful_votes": review.helpful_votes}


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_review_router = APIRouter(prefix="/admin/reviews", tags=["admin"], dependencies=[Depends(require_admin)])


@admin_review_router.get("")
async def moderation_queue(status: str | None = "pending", limit: int = 20, skip: int = 0) -> dict:
    status = None if status == "all" else status
    reviews = ReviewRepository().moderation_queue(status=status, limit=max(1, min(limit, 100)), skip=skip)
    return {"reviews": [r.to_dict() for r in reviews]}


@admin_review_router.post("/{review_id}/moderate")
async def moderate_review(
    review_id: str, body: ModerateReviewRequest, admin: CurrentUser = Depends(require_admin)
) -> dict:
    command = ModerateReview(review_id=review_id, moderator_id=admin.user_id, status=body.status, reason=body.reason)
    review = ModerateReviewHandler().moderate_review(command)
    return {"success": True, "review": review.to_dict()}
