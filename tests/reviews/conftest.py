import pytest


@pytest.fixture
def make_review():
    from reviews.review.review import Review, ReviewRepository

    def _make(product_id, user_id="reviewer-1", rating=5, status="approved", **fields):
        review = Review(
            user_id=user_id,
            product_id=product_id,
            rating=rating,
            title=fields.pop("title", "Lovely fit"),
            status=status,
            is_visible=status == "approved",
            is_verified_purchase=True,
            **fields,
        )
        ReviewRepository().add(review)
        return review

    return _make
