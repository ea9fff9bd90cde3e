"""
Review Status Transitions
Pure functions deciding which recommender preference action a moderation
status change requires.

Two-phase protocol:
1. ``snapshot(review)`` after every load/refresh captures the durable status.
2. ``compute_transition(snapshot, review)`` before commit classifies the
   (previous, new) edge into a single action.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..db.models import ProductLine, Review, ReviewStatus
from ..errors import ReviewIntegrityError


class ActionType(Enum):
    """Preference action required by a status transition."""

    NONE = "none"
    ADD = "add_preference"
    REMOVE = "remove_preference"


@dataclass(frozen=True)
class ReviewSnapshot:
    """Review status as last observed in the database."""

    review_id: Optional[int]
    status: Optional[ReviewStatus]


@dataclass(frozen=True)
class PreferenceAction:
    """
    Single gateway call planned for a review update.

    Holds plain keys rather than ORM instances so it can be dispatched
    after the session has committed and expired its objects.
    """

    action_type: ActionType
    review_id: Optional[int] = None
    user_id: Optional[int] = None
    product_line_id: Optional[int] = None
    rating: Optional[float] = None

    @property
    def is_noop(self) -> bool:
        return self.action_type is ActionType.NONE

    def to_dict(self) -> dict:
        """Convert to dictionary for logging."""
        return {
            "action": self.action_type.value,
            "review_id": self.review_id,
            "user_id": self.user_id,
            "product_line_id": self.product_line_id,
            "rating": self.rating,
        }


NO_ACTION = PreferenceAction(ActionType.NONE)


def snapshot(review: Review) -> ReviewSnapshot:
    """Capture the review's current status."""
    return ReviewSnapshot(review_id=review.id, status=review.status)


def last_snapshot(review: Review) -> ReviewSnapshot:
    """Rebuild the snapshot recorded at the last load or commit."""
    return ReviewSnapshot(review_id=review.id, status=review.previous_status)


def first_product_line(review: Review) -> ProductLine:
    """
    Resolve the product line used as the recommender item key.

    Only the first line of the product is synchronized.

    Raises:
        ReviewIntegrityError: If the review has no product or the product
            has no product lines
    """
    product = review.product
    if product is None:
        raise ReviewIntegrityError(review.id, None, reason="review has no product")
    if not product.product_lines:
        raise ReviewIntegrityError(review.id, product.id)
    return product.product_lines[0]


def compute_transition(previous: ReviewSnapshot, review: Review) -> PreferenceAction:
    """
    Classify a status change into zero or one preference action.

    APPROVED -> anything else removes the preference, PENDING/REJECTED ->
    APPROVED adds it, every other pair is a no-op. A review never observed
    in the database (no snapshot) is a no-op.

    Args:
        previous: Snapshot taken at the last load
        review: Review carrying the new status

    Returns:
        Planned preference action

    Raises:
        ReviewIntegrityError: If the status changed and no product line exists
    """
    old, new = previous.status, review.status
    if old is None or old == new:
        return NO_ACTION

    line = first_product_line(review)
    user = review.user
    if user is None:
        raise ReviewIntegrityError(review.id, review.product.id, reason="review has no user")

    if old is ReviewStatus.APPROVED:
        return PreferenceAction(
            ActionType.REMOVE,
            review_id=review.id,
            user_id=user.id,
            product_line_id=line.id,
        )

    if new is ReviewStatus.APPROVED:
        return PreferenceAction(
            ActionType.ADD,
            review_id=review.id,
            user_id=user.id,
            product_line_id=line.id,
            rating=review.rating,
        )

    # PENDING <-> REJECTED
    return PreferenceAction(ActionType.NONE, review_id=review.id)
