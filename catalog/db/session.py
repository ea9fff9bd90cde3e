"""
Database Session
Engine and session factory with review preference sync installed.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from ..config import CatalogSettings, get_settings
from ..recommender import PreferenceGateway, build_preference_gateway
from ..reviews.sync import ReviewPreferenceSync

logger = logging.getLogger(__name__)

# Engine and session factory
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def create_db_engine(settings: Optional[CatalogSettings] = None) -> Engine:
    """Create a database engine from settings."""
    settings = settings or get_settings()

    kwargs = {
        "echo": settings.db_echo,
        "pool_pre_ping": True,  # Verify connections before using
    }
    if not settings.is_sqlite:
        kwargs.update(pool_size=settings.db_pool_size, max_overflow=settings.db_max_overflow)

    engine = create_engine(settings.database_url, **kwargs)
    logger.info(f"Database engine created: {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(
    engine: Engine, gateway: PreferenceGateway
) -> sessionmaker:
    """
    Build a session factory whose sessions keep the recommender in sync.

    Args:
        engine: Database engine
        gateway: Recommender preference gateway

    Returns:
        Session factory
    """
    factory = sessionmaker(autoflush=False, bind=engine)
    ReviewPreferenceSync(gateway).install(factory)
    return factory


def get_db_engine() -> Engine:
    """Get database engine (singleton)."""
    global _engine
    if _engine is None:
        _engine = create_db_engine(get_settings())
    return _engine


def get_session_factory() -> sessionmaker:
    """Get database session factory (singleton)."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = create_session_factory(
            get_db_engine(), build_preference_gateway(get_settings())
        )
        logger.info("Database session factory created")
    return _SessionLocal


@contextmanager
def session_scope(factory: Optional[sessionmaker] = None) -> Iterator[Session]:
    """
    Transactional scope around a series of operations.

    Commits on success, which dispatches planned preference changes, and
    rolls back on error, which discards them.

    Usage:
        with session_scope() as db:
            ...
    """
    SessionLocal = factory or get_session_factory()
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
