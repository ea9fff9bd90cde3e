"""
Reviews Module
Review moderation and recommender preference synchronization.
"""

from .moderation import ReviewModerationService, ReviewNotFoundError
from .sync import ReviewPreferenceSync
from .transitions import (
    NO_ACTION,
    ActionType,
    PreferenceAction,
    ReviewSnapshot,
    compute_transition,
    first_product_line,
    last_snapshot,
    snapshot,
)

__all__ = [
    "NO_ACTION",
    "ActionType",
    "PreferenceAction",
    "ReviewModerationService",
    "ReviewNotFoundError",
    "ReviewPreferenceSync",
    "ReviewSnapshot",
    "compute_transition",
    "first_product_line",
    "last_snapshot",
    "snapshot",
]
