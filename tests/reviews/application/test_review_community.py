"""Tests for reporting, helpful votes and moderation."""

import pytest
from catalogue.product.product import ProductRepository
from reviews.review.moderation import ModerateReview, ModerateReviewHandler
from reviews.review.reporting import ReportReview, ReportReviewHandler
from reviews.review.review import ReviewRepository
from reviews.review.voting import VoteHelpful, VoteHelpfulHandler
from shared.exceptions import ValidationError


class TestReportReview:
    def test_fifth_report_flags_and_updates_rating(self, make_product, make_review):
        product = make_product()
        review = make_review(product.id, rating=5)
        ModerateReviewHandler().moderate_review(ModerateReview(review_id=review.id, moderator_id="admin-1", status="approved"))
        assert ProductRepository().get(product.id).review_count == 1

        handler = ReportReviewHandler()
        for i in range(5):
            handler.report_review(ReportReview(review_id=review.id, user_id=f"reader-{i}", reason="Spam"))

        stored = ReviewRepository().get(review.id)
        assert stored.status == "flagged"
        assert not stored.is_visible
        assert ProductRepository().get(product.id).review_count == 0

    def test_reason_required(self, make_product, make_review):
        review = make_review(make_product().id)
        with pytest.raises(ValidationError):
            ReportReviewHandler().report_review(ReportReview(review_id=review.id, user_id="reader-1", reason="  "))


class TestVoteHelpful:
    def test_vote_is_persisted(self, make_product, make_review):
        review = make_review(make_product().id)
        VoteHelpfulHandler().vote_helpful(VoteHelpful(review_id=review.id, user_id="reader-1"))
        assert ReviewRepository().get(review.id).helpful_votes == 1


class TestModerateReview:
    def test_approve_pending_review(self, make_product, make_review):
        product = make_product()
        review = make_review(product.id, rating=4, status="pending")

        moderated = ModerateReviewHandler().moderate_review(
            ModerateReview(review_id=review.id, moderator_id="admin-1", status="approved")
        )

        assert moderated.is_public
        assert ProductRepository().get(product.id).rating == 4.0

    def test_reject_needs_reason(self, make_product, make_review):
        review = make_review(make_product().id, status="pending")
        with pytest.raises(ValidationError):
            ModerateReviewHandler().moderate_review(ModerateReview(review_id=review.id, moderator_id="admin-1", status="rejected"))
