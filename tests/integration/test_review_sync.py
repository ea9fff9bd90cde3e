"""
End-to-end review moderation through a SQLAlchemy session.
"""

import pytest

from catalog.db.models import Review, ReviewStatus
from catalog.db.session import session_scope
from catalog.errors import ReviewIntegrityError
from catalog.reviews import ReviewModerationService, ReviewNotFoundError
from tests.factories import FIRST_LINE_ID, PRODUCT_ID, USER_ID

SECOND_REVIEW_ID = 2


def _set_status(session_factory, review_id, status):
    with session_factory() as db:
        review = db.get(Review, review_id)
        review.status = status
        db.commit()


def _stored_status(session_factory, review_id):
    with session_factory() as db:
        return db.get(Review, review_id).status


class TestSnapshot:
    """previous_status tracks the durable status."""

    @pytest.mark.parametrize("status", list(ReviewStatus))
    def test_load_then_read_matches(self, session_factory, seed_review, status):
        review_id = seed_review(status)

        with session_factory() as db:
            review = db.get(Review, review_id)
            assert review.previous_status is status
            assert review.previous_status == review.status

            db.refresh(review)
            assert review.previous_status == review.status

    def test_in_memory_change_keeps_snapshot(self, session_factory, seed_review):
        review_id = seed_review(ReviewStatus.PENDING)

        with session_factory() as db:
            review = db.get(Review, review_id)
            review.status = ReviewStatus.APPROVED

            assert review.previous_status is ReviewStatus.PENDING

    def test_commit_advances_snapshot(self, session_factory, seed_review):
        review_id = seed_review(ReviewStatus.PENDING)

        with session_factory() as db:
            review = db.get(Review, review_id)
            review.status = ReviewStatus.APPROVED
            db.commit()

            assert review.previous_status is ReviewStatus.APPROVED


class TestPreferenceSync:
    """Gateway calls produced by committed status changes."""

    def test_approval_adds_preference(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.PENDING, rating=4.5)

        _set_status(session_factory, review_id, ReviewStatus.APPROVED)

        assert gateway.calls_to("add_preference") == [
            {
                "method": "add_preference",
                "user_id": USER_ID,
                "product_line_id": FIRST_LINE_ID,
                "rating": 4.5,
            }
        ]
        assert gateway.calls_to("remove_preference") == []
        assert gateway.preferences == {(USER_ID, FIRST_LINE_ID): 4.5}

    def test_rejection_removes_preference(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.APPROVED)

        _set_status(session_factory, review_id, ReviewStatus.REJECTED)

        assert gateway.calls == [
            {"method": "remove_preference", "user_id": USER_ID, "product_line_id": FIRST_LINE_ID}
        ]

    def test_pending_to_rejected_is_silent(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.PENDING)

        _set_status(session_factory, review_id, ReviewStatus.REJECTED)

        assert gateway.calls == []

    def test_insert_is_not_synchronized(self, seed_review, gateway):
        seed_review(ReviewStatus.APPROVED)

        assert gateway.calls == []

    def test_non_status_update_is_silent(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.APPROVED)

        with session_factory() as db:
            db.get(Review, review_id).title = "Still great crema"
            db.commit()

        assert gateway.calls == []

    def test_successive_commits_in_one_session(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.PENDING)

        with session_factory() as db:
            review = db.get(Review, review_id)
            review.status = ReviewStatus.APPROVED
            db.commit()
            review.status = ReviewStatus.REJECTED
            db.commit()

        assert [call["method"] for call in gateway.calls] == [
            "add_preference",
            "remove_preference",
        ]
        assert gateway.preferences == {}

    def test_flushes_collapse_into_one_edge(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.APPROVED)

        with session_factory() as db:
            review = db.get(Review, review_id)
            review.status = ReviewStatus.PENDING
            db.flush()
            review.status = ReviewStatus.REJECTED
            db.flush()
            review.status = ReviewStatus.APPROVED
            db.commit()

        assert gateway.calls == []

    def test_rollback_discards_plan(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.PENDING)

        with session_factory() as db:
            review = db.get(Review, review_id)
            review.status = ReviewStatus.APPROVED
            db.flush()
            db.rollback()

            db.commit()

        assert gateway.calls == []
        assert _stored_status(session_factory, review_id) is ReviewStatus.PENDING

    def test_savepoint_rollback_drops_its_plan(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.PENDING)

        with session_factory() as db:
            review = db.get(Review, review_id)
            savepoint = db.begin_nested()
            review.status = ReviewStatus.APPROVED
            db.flush()
            savepoint.rollback()

            db.commit()

        assert gateway.calls == []
        assert _stored_status(session_factory, review_id) is ReviewStatus.PENDING

    def test_savepoint_rollback_keeps_outer_plan(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.PENDING, rating=3.5)

        with session_factory() as db:
            review = db.get(Review, review_id)
            review.status = ReviewStatus.APPROVED
            db.flush()
            savepoint = db.begin_nested()
            review.status = ReviewStatus.REJECTED
            db.flush()
            savepoint.rollback()

            db.commit()

        assert gateway.calls == [
            {
                "method": "add_preference",
                "user_id": USER_ID,
                "product_line_id": FIRST_LINE_ID,
                "rating": 3.5,
            }
        ]
        assert _stored_status(session_factory, review_id) is ReviewStatus.APPROVED

    def test_released_savepoint_waits_for_commit(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.PENDING)

        with session_factory() as db:
            review = db.get(Review, review_id)
            with db.begin_nested():
                review.status = ReviewStatus.APPROVED

            assert gateway.calls == []
            db.commit()

        assert len(gateway.calls_to("add_preference")) == 1

    def test_released_savepoint_discarded_by_rollback(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.PENDING)

        with session_factory() as db:
            review = db.get(Review, review_id)
            with db.begin_nested():
                review.status = ReviewStatus.APPROVED
            db.rollback()

        assert gateway.calls == []
        assert _stored_status(session_factory, review_id) is ReviewStatus.PENDING

    def test_repeated_approval_is_idempotent(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.PENDING, rating=4.5)

        _set_status(session_factory, review_id, ReviewStatus.APPROVED)
        state_once = dict(gateway.preferences)
        _set_status(session_factory, review_id, ReviewStatus.APPROVED)

        assert gateway.preferences == state_once
        assert len(gateway.calls_to("add_preference")) == 1


class TestFailures:
    """Integrity and gateway failures."""

    def test_missing_product_line_aborts_update(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.PENDING, with_lines=False)

        with session_factory() as db:
            review = db.get(Review, review_id)
            review.status = ReviewStatus.APPROVED
            with pytest.raises(ReviewIntegrityError):
                db.commit()
            db.rollback()

        assert gateway.calls == []
        assert _stored_status(session_factory, review_id) is ReviewStatus.PENDING

    def test_gateway_failure_does_not_block_rejection(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.APPROVED)
        gateway.configure(should_succeed=False, failure_reason="recommender down")

        _set_status(session_factory, review_id, ReviewStatus.REJECTED)

        assert _stored_status(session_factory, review_id) is ReviewStatus.REJECTED
        assert len(gateway.calls_to("remove_preference")) == 1

    def test_unexpected_gateway_exception_does_not_block_commit(
        self, session_factory, seed_review, gateway, monkeypatch
    ):
        def refuse(user_id, product_line_id):
            raise ConnectionError("connection reset by peer")

        review_id = seed_review(ReviewStatus.APPROVED)
        monkeypatch.setattr(gateway, "remove_preference", refuse)

        with session_factory() as db:
            review = ReviewModerationService(db).reject(review_id)
            assert review.status is ReviewStatus.REJECTED
            assert review.previous_status is ReviewStatus.REJECTED

        assert _stored_status(session_factory, review_id) is ReviewStatus.REJECTED

    def test_failed_call_does_not_stop_other_reviews(
        self, session_factory, seed_review, gateway, monkeypatch
    ):
        def refuse(user_id, product_line_id):
            raise ConnectionError("connection reset by peer")

        first_id = seed_review(ReviewStatus.APPROVED)
        with session_factory() as db:
            db.add(
                Review(
                    id=SECOND_REVIEW_ID,
                    user_id=USER_ID,
                    product_id=PRODUCT_ID,
                    status=ReviewStatus.PENDING,
                    rating=3.0,
                )
            )
            db.commit()
        monkeypatch.setattr(gateway, "remove_preference", refuse)

        with session_factory() as db:
            first = db.get(Review, first_id)
            second = db.get(Review, SECOND_REVIEW_ID)
            first.status = ReviewStatus.REJECTED
            second.status = ReviewStatus.APPROVED
            db.commit()

            assert first.previous_status is ReviewStatus.REJECTED
            assert second.previous_status is ReviewStatus.APPROVED

        assert gateway.preferences == {(USER_ID, FIRST_LINE_ID): 3.0}


class TestModerationService:
    """Moderation entry points."""

    def test_approve_and_reject(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.PENDING, rating=5.0)

        with session_factory() as db:
            service = ReviewModerationService(db)
            assert service.approve(review_id).status is ReviewStatus.APPROVED
            assert service.reject(review_id).status is ReviewStatus.REJECTED
            assert service.reopen(review_id).status is ReviewStatus.PENDING

        assert [call["method"] for call in gateway.calls] == [
            "add_preference",
            "remove_preference",
        ]

    def test_unknown_review(self, session_factory):
        with session_factory() as db:
            with pytest.raises(ReviewNotFoundError):
                ReviewModerationService(db).approve(404)

    def test_integrity_error_rolls_back(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.APPROVED, with_lines=False)

        with session_factory() as db:
            with pytest.raises(ReviewIntegrityError):
                ReviewModerationService(db).reject(review_id)

        assert _stored_status(session_factory, review_id) is ReviewStatus.APPROVED
        assert gateway.calls == []

    def test_session_scope_commits(self, session_factory, seed_review, gateway):
        review_id = seed_review(ReviewStatus.REJECTED, rating=2.0)

        with session_scope(session_factory) as db:
            db.get(Review, review_id).status = ReviewStatus.APPROVED

        assert gateway.preferences == {(USER_ID, FIRST_LINE_ID): 2.0}
