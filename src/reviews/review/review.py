"""Review document — a verified customer's rating of a product.

One review per (user, product). Only reviews that are approved and
visible are shown to shoppers or count towards the product rating.

State Machine (4 states):
    PENDING → APPROVED | REJECTED | FLAGGED
    APPROVED → REJECTED | FLAGGED (moderation, or enough reports)
    REJECTED, FLAGGED → APPROVED (moderation)
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import Field, field_validator

from shared.config import get_settings
from shared.document import Document, utcnow
from shared.exceptions import InvalidStateError, ObjectNotFoundError, ValidationError
from shared.repository import Repository

MAX_TITLE_LENGTH = 100
MAX_COMMENT_LENGTH = 2000
MAX_REASON_LENGTH = 500


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ModerationStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FLAGGED = "flagged"


# Statuses that require a moderation reason
REASON_REQUIRED = {ModerationStatus.REJECTED.value, ModerationStatus.FLAGGED.value}


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
class Review(Document):
    user_id: str
    product_id: str
    order_id: str | None = None
    rating: int
    title: str | None = None
    comment: str | None = None
    status: ModerationStatus = ModerationStatus.PENDING
    is_visible: bool = False
    is_verified_purchase: bool = False
    helpful_votes: int = 0
    report_count: int = 0
    reported_by: list[str] = Field(default_factory=list)
    voted_by: list[str] = Field(default_factory=list)
    moderation_reason: str | None = None
    moderated_by: str | None = None
    moderated_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("rating")
    @classmethod
    def _rating_in_range(cls, value: int) -> int:
        if not 1 <= value <= 5:
            raise ValueError("Rating must be between 1 and 5")
        return value

    @property
    def is_public(self) -> bool:
        return self.status == ModerationStatus.APPROVED.value and self.is_visible

    # -------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------
    @staticmethod
    def check_content(rating, title: str | None, comment: str | None) -> tuple[int, str | None, str | None]:
        """Normalise submitted content, raising ValidationError on bad input."""
        errors: dict[str, list[str]] = {}
        if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= 5:
            errors["rating"] = ["Rating must be a whole number between 1 and 5"]

        title = title.strip() if title else None
        comment = comment.strip() if comment else None
        if not title and not comment:
            errors["review"] = ["Review must have either a title or comment"]
        if title and len(title) > MAX_TITLE_LENGTH:
            errors["title"] = [f"Review title cannot exceed {MAX_TITLE_LENGTH} characters"]
        if comment and len(comment) > MAX_COMMENT_LENGTH:
            errors["comment"] = [f"Review comment cannot exceed {MAX_COMMENT_LENGTH} characters"]

        if errors:
            raise ValidationError(errors)
        return rating, title, comment

    def revise(self, rating: int, title: str | None, comment: str | None, order_id: str | None):
        """Overwrite the content of a resubmitted review. Moderation state is kept."""
        self.rating, self.title, self.comment = self.check_content(rating, title, comment)
        self.order_id = order_id or self.order_id
        self.is_verified_purchase = True
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Community signals
    # -------------------------------------------------------------------
    def report(self, user_id: str) -> bool:
        """Record a report. Returns True when this report flagged the review."""
        if user_id == self.user_id:
            raise ValidationError({"report": ["Cannot report your own review"]})
        if not self.is_public:
            raise ObjectNotFoundError({"review": ["Review not available"]})
        if user_id in self.reported_by:
            raise InvalidStateError({"report": ["You have already reported this review"]})

        self.reported_by.append(user_id)
        self.report_count += 1
        self.updated_at = datetime.now(UTC)

        if self.report_count >= get_settings().review_report_threshold:
            self.status = ModerationStatus.FLAGGED.value
            self.is_visible = False
            self.moderation_reason = "Automatically flagged after multiple reports"
            self.moderated_at = self.updated_at
            return True
        return False

    def vote_helpful(self, user_id: str):
        if user_id == self.user_id:
            raise ValidationError({"vote": ["Cannot vote on your own review"]})
        if not self.is_public:
            raise ObjectNotFoundError({"review": ["Review not available"]})
        if user_id in self.voted_by:
            raise InvalidStateError({"vote": ["You have already voted on this review"]})

        self.voted_by.append(user_id)
        self.helpful_votes += 1
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def moderate(self, status: ModerationStatus, moderator_id: str, reason: str | None = None):
        status = ModerationStatus(status)
        if status == ModerationStatus.PENDING:
            raise ValidationError({"status": ["Moderation status must be approved, rejected or flagged"]})

        reason = reason.strip() if reason else None
        if status.value in REASON_REQUIRED and not reason:
            raise ValidationError({"reason": [f"A reason is required when a review is {status.value}"]})
        if reason and len(reason) > MAX_REASON_LENGTH:
            raise ValidationError({"reason": [f"Moderation reason cannot exceed {MAX_REASON_LENGTH} characters"]})

        now = datetime.now(UTC)
        self.status = status.value
        self.is_visible = status == ModerationStatus.APPROVED
        self.moderation_reason = reason
        self.moderated_by = moderator_id
        self.moderated_at = now
        self.updated_at = now


class ReviewRepository(Repository[Review]):
    model = Review
    collection_name = "reviews"

    def for_user_and_product(self, user_id: str, product_id: str) -> Review | None:
        return self.find_one({"user_id": user_id, "product_id": product_id})

    def visible_for_product(self, product_id: str, limit: int = 10, skip: int = 0) -> list[Review]:
        return self.find(
            {"product_id": product_id, "status": ModerationStatus.APPROVED.value, "is_visible": True},
            sort=[("created_at", -1)],
            limit=limit,
            skip=skip,
        )

    def moderation_queue(self, status: str | None = None, limit: int = 20, skip: int = 0) -> list[Review]:
        query = {}
        if status:
            if status not in {s.value for s in ModerationStatus}:
                raise ValidationError({"status": [f"Unknown moderation status: {status}"]})
            query["status"] = status
        return self.find(query, sort=[("created_at", -1)], limit=limit, skip=skip)
