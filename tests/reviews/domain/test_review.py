"""Tests for the Review document."""

import pydantic
import pytest
from reviews.review.review import ModerationStatus, Review
from shared.exceptions import InvalidStateError, ObjectNotFoundError, ValidationError


def _review(**overrides):
    fields = {"user_id": "author", "product_id": "p1", "rating": 4, "title": "Nice", "status": "approved", "is_visible": True}
    return Review(**{**fields, **overrides})


class TestCheckContent:
    def test_strips_text(self):
        assert Review.check_content(5, "  Great  ", None) == (5, "Great", None)

    def test_title_or_comment_required(self):
        with pytest.raises(ValidationError, match="Review must have either a title or comment"):
            Review.check_content(5, "  ", "")

    @pytest.mark.parametrize("rating", [0, 6, 4.5, True])
    def test_rating_must_be_whole_one_to_five(self, rating):
        with pytest.raises(ValidationError):
            Review.check_content(rating, "Title", None)

    def test_length_limits(self):
        with pytest.raises(ValidationError):
            Review.check_content(5, "t" * 101, None)
        with pytest.raises(ValidationError):
            Review.check_content(5, None, "c" * 2001)

    def test_document_rejects_out_of_range_rating(self):
        with pytest.raises(pydantic.ValidationError):
            _review(rating=7)


class TestReporting:
    def test_report_counts_once_per_user(self):
        review = _review()
        assert review.report("reader-1") is False
        assert review.report_count == 1
        with pytest.raises(InvalidStateError):
            review.report("reader-1")

    def test_cannot_report_own_review(self):
        with pytest.raises(ValidationError, match="Cannot report your own review"):
            _review().report("author")

    def test_hidden_reviews_cannot_be_reported(self):
        with pytest.raises(ObjectNotFoundError):
            _review(status="pending", is_visible=False).report("reader-1")

    def test_threshold_flags_and_hides(self):
        review = _review()
        results = [review.report(f"reader-{i}") for i in range(5)]

        assert results == [False, False, False, False, True]
        assert review.status == "flagged"
        assert not review.is_visible


class TestVoting:
    def test_vote_once(self):
        review = _review()
        review.vote_helpful("reader-1")
        assert review.helpful_votes == 1
        with pytest.raises(InvalidStateError):
            review.vote_helpful("reader-1")

    def test_cannot_vote_own_review(self):
        with pytest.raises(ValidationError):
            _review().vote_helpful("author")


class TestModeration:
    def test_approval_makes_visible(self):
        review = _review(status="pending", is_visible=False)
        review.moderate(ModerationStatus.APPROVED, "admin-1")

        assert review.is_public
        assert review.moderated_by == "admin-1"

    def test_rejection_requires_reason(self):
        with pytest.raises(ValidationError):
            _review().moderate(ModerationStatus.REJECTED, "admin-1", "  ")

    def test_rejection_hides(self):
        review = _review()
        review.moderate(ModerationStatus.REJECTED, "admin-1", "Off-topic")
        assert not review.is_visible
        assert review.moderation_reason == "Off-topic"

    def test_cannot_moderate_back_to_pending(self):
        with pytest.raises(ValidationError):
            _review().moderate(ModerationStatus.PENDING, "admin-1")
