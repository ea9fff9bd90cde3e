"""
Pytest configuration and shared fixtures
"""

import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from catalog.config import reset_settings
from catalog.db.models import Base, ReviewStatus
from catalog.db.session import create_session_factory
from catalog.recommender import InMemoryPreferenceGateway

from .factories import REVIEW_ID, build_review


@pytest.fixture(autouse=True)
def clean_settings():
    """Drop cached settings between tests."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def gateway():
    """In-memory recommender gateway."""
    return InMemoryPreferenceGateway()


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with the catalog schema."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine, gateway):
    """Session factory with review preference sync installed."""
    return create_session_factory(engine, gateway)


@pytest.fixture
def seed_review(session_factory):
    """
    Persist a review and return its id.

    Usage:
        review_id = seed_review(ReviewStatus.APPROVED, rating=4.5)
    """

    def _seed(status=ReviewStatus.PENDING, rating=4.5, with_lines=True):
        with session_factory() as db:
            db.add(build_review(status, rating=rating, with_lines=with_lines))
            db.commit()
        return REVIEW_ID

    return _seed
