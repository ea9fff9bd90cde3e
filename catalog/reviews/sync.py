"""
Review Preference Sync
Keeps the recommender preference graph consistent with approved reviews.

Hooks into SQLAlchemy:
- mapper ``load``/``refresh`` events snapshot the durable status into
  ``Review.previous_status``
- session ``before_flush`` plans one action per modified review
- session ``after_commit`` dispatches planned actions to the gateway
- the root transaction ending without a commit discards the plans
- rolling back a savepoint restores the plans held when it began
"""

import logging
from typing import Dict, Tuple

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session, sessionmaker

from ..db.models import Review, ReviewStatus
from ..errors import RecommenderGatewayError
from ..recommender import PreferenceGateway
from .transitions import (
    ActionType,
    PreferenceAction,
    compute_transition,
    last_snapshot,
    snapshot,
)

logger = logging.getLogger(__name__)

PENDING_KEY = "review_sync.pending"
SAVEPOINTS_KEY = "review_sync.savepoints"


def _capture_snapshot(review: Review, context) -> None:
    # A status written in the current transaction is not durable yet
    pending = context.session.info.get(PENDING_KEY) if context.session is not None else None
    if pending and review in pending:
        return
    if inspect(review).attrs.status.history.has_changes():
        return
    review.previous_status = snapshot(review).status


@event.listens_for(Review, "load")
def _snapshot_on_load(review: Review, context) -> None:
    _capture_snapshot(review, context)


@event.listens_for(Review, "refresh")
def _snapshot_on_refresh(review: Review, context, attrs) -> None:
    if attrs is None or "status" in attrs:
        _capture_snapshot(review, context)


class ReviewPreferenceSync:
    """
    Review lifecycle observer.

    Plans a preference action from each review's last durable status and
    sends it to the gateway once the update has committed. Gateway failures
    are logged and never affect the review itself; there are no retries.
    """

    def __init__(self, gateway: PreferenceGateway):
        """
        Initialize review sync.

        Args:
            gateway: Recommender preference gateway
        """
        self.gateway = gateway

    def plan(self, review: Review) -> PreferenceAction:
        """
        Compute the action for a review's pending status change.

        Raises:
            ReviewIntegrityError: If the product has no product line
        """
        previous = last_snapshot(review)
        if previous.status != review.status:
            logger.info(
                f"Review {review.id} status change: "
                f"{_name(previous.status)} -> {_name(review.status)}"
            )
        return compute_transition(previous, review)

    def dispatch(self, action: PreferenceAction) -> bool:
        """
        Issue the gateway call for an action.

        Returns:
            True if the call succeeded or there was nothing to send
        """
        if action.is_noop:
            return True

        extra = {
            "review_id": action.review_id,
            "user_id": action.user_id,
            "product_line_id": action.product_line_id,
        }
        try:
            if action.action_type is ActionType.ADD:
                logger.info(
                    f"Add preference: user={action.user_id}, line={action.product_line_id}, "
                    f"rating={action.rating}",
                    extra=extra,
                )
                self.gateway.add_preference(action.user_id, action.product_line_id, action.rating)
            else:
                logger.info(
                    f"Remove preference: user={action.user_id}, line={action.product_line_id}",
                    extra=extra,
                )
                self.gateway.remove_preference(action.user_id, action.product_line_id)
        except RecommenderGatewayError as e:
            logger.error(f"Recommender {action.action_type.value} failed: {e.message}", extra=extra)
            return False
        except Exception:
            logger.exception(f"Recommender {action.action_type.value} failed unexpectedly", extra=extra)
            return False

        return True

    def process(self, review: Review) -> PreferenceAction:
        """Plan and dispatch immediately, outside of any session."""
        action = self.plan(review)
        self.dispatch(action)
        return action

    def install(self, session_factory: sessionmaker) -> None:
        """Register session hooks on a session factory (or Session class)."""
        for name, fn in self._hooks():
            event.listen(session_factory, name, fn)
        logger.info("Review preference sync installed")

    def uninstall(self, session_factory: sessionmaker) -> None:
        for name, fn in self._hooks():
            event.remove(session_factory, name, fn)

    def _hooks(self):
        return [
            ("before_flush", self._before_flush),
            ("after_commit", self._after_commit),
            ("after_transaction_create", self._after_transaction_create),
            ("after_soft_rollback", self._after_soft_rollback),
            ("after_transaction_end", self._after_transaction_end),
        ]

    def _before_flush(self, session: Session, flush_context, instances) -> None:
        # Latest plan per review wins: re-planning from the unchanged
        # snapshot collapses several flushes into one edge.
        pending: Dict[Review, Tuple[PreferenceAction, ReviewStatus]] = session.info.setdefault(
            PENDING_KEY, {}
        )
        for obj in session.dirty:
            if isinstance(obj, Review):
                pending[obj] = (self.plan(obj), obj.status)

    def _after_commit(self, session: Session) -> None:
        # Releasing a savepoint is not durable, wait for the outermost commit
        if session.in_nested_transaction():
            return

        pending = session.info.pop(PENDING_KEY, None)
        if not pending:
            return

        for review, (action, committed_status) in pending.items():
            self.dispatch(action)
            review.previous_status = committed_status

    def _after_transaction_create(self, session: Session, transaction) -> None:
        if transaction.nested:
            savepoints = session.info.setdefault(SAVEPOINTS_KEY, {})
            savepoints[transaction] = dict(session.info.get(PENDING_KEY, {}))

    def _after_soft_rollback(self, session: Session, previous_transaction) -> None:
        if not previous_transaction.nested:
            return
        restored = session.info.get(SAVEPOINTS_KEY, {}).pop(previous_transaction, None)
        if restored is not None:
            session.info[PENDING_KEY] = restored
            logger.debug(f"Savepoint rolled back, {len(restored)} review sync plan(s) restored")

    def _after_transaction_end(self, session: Session, transaction) -> None:
        if transaction.parent is not None:
            return
        session.info.pop(SAVEPOINTS_KEY, None)
        discarded = session.info.pop(PENDING_KEY, None)
        if discarded:
            logger.debug(f"Discarded {len(discarded)} review sync plan(s) from uncommitted transaction")


def _name(status) -> str:
    return status.name if status is not None else "None"
