"""
Review Moderation
Approve, reject or reopen customer reviews.

Status changes go through the session so the preference sync hooks see
them; recommender failures never fail a moderation call.
"""

import logging

from sqlalchemy.orm import Session

from ..db.models import Review, ReviewStatus
from ..errors import CatalogError

logger = logging.getLogger(__name__)


class ReviewNotFoundError(CatalogError):
    """Exception raised when a review does not exist."""

    def __init__(self, review_id: int):
        super().__init__(message=f"Review not found: {review_id}", details={"id": review_id})


class ReviewModerationService:
    """Moderation status changes for reviews."""

    def __init__(self, session: Session):
        self.session = session

    def set_status(self, review_id: int, status: ReviewStatus) -> Review:
        """
        Set a review's moderation status and commit.

        Args:
            review_id: Review ID
            status: New moderation status

        Returns:
            The updated review

        Raises:
            ReviewNotFoundError: If the review does not exist
            ReviewIntegrityError: If the review's product has no product line
        """
        review = self.session.get(Review, review_id)
        if review is None:
            raise ReviewNotFoundError(review_id)

        logger.info(f"Moderating review {review_id}: {review.status.name} -> {status.name}")
        review.status = status

        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        return review

    def approve(self, review_id: int) -> Review:
        return self.set_status(review_id, ReviewStatus.APPROVED)

    def reject(self, review_id: int) -> Review:
        return self.set_status(review_id, ReviewStatus.REJECTED)

    def reopen(self, review_id: int) -> Review:
        """Put a review back in the moderation queue."""
        return self.set_status(review_id, ReviewStatus.PENDING)
