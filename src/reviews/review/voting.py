"""Helpful votes on reviews."""

from pydantic import BaseModel

from reviews.review.review import Review, ReviewRepository
from reviews.utils.logging import logger


class VoteHelpful(BaseModel):
    review_id: str
    user_id: str


class VoteHelpfulHandler:
    def vote_helpful(self, command: VoteHelpful) -> Review:
        repo = ReviewRepository()
        review = repo.get(command.review_id)
        review.vote_helpful(command.user_id)
        repo.add(review)
        logger.info("review_voted_helpful", review_id=review.id, voter_id=command.user_id)
        return review
