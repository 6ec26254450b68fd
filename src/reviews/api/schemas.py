"""Pydantic request schemas for the Reviews API."""

from pydantic import BaseModel

from reviews.review.review import ModerationStatus


class SubmitReviewRequest(BaseModel):
    rating: int
    title: str | None = None
    comment: str | None = None

    model_config = {
        "json_schema_extra": {"examples": [{"rating": 5, "title": "Fits perfectly", "comment": "Great fabric."}]}
    }


class ReportReviewRequest(BaseModel):
    reason: str


class ModerateReviewRequest(BaseModel):
    status: ModerationStatus
    reason: str | None = None

    model_config = {"json_schema_extra": {"examples": [{"status": "rejected", "reason": "Off-topic"}]}}
