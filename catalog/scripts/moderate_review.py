#!/usr/bin/env python3
"""
Review Moderation Script
Creates the catalog schema and changes review moderation status from the shell.

Usage:
    python -m catalog.scripts.moderate_review init-db
    python -m catalog.scripts.moderate_review set-status 42 APPROVED
"""

import argparse
import logging
import sys

from catalog.config import get_settings
from catalog.db.models import Base, ReviewStatus
from catalog.db.session import get_db_engine, get_session_factory
from catalog.errors import CatalogError
from catalog.logging_config import configure_logging
from catalog.reviews import ReviewModerationService

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    """Main function to run moderation commands."""
    parser = argparse.ArgumentParser(description="Catalog review moderation")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create catalog tables")

    status_parser = subparsers.add_parser("set-status", help="Change a review's moderation status")
    status_parser.add_argument("review_id", type=int, help="Review ID")
    status_parser.add_argument(
        "status",
        type=str.upper,
        choices=[status.name for status in ReviewStatus],
        help="New moderation status",
    )

    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings)

    SessionLocal = get_session_factory()

    if args.command == "init-db":
        Base.metadata.create_all(bind=get_db_engine())
        logger.info("Catalog tables created")
        return 0

    db = SessionLocal()
    try:
        review = ReviewModerationService(db).set_status(args.review_id, ReviewStatus[args.status])
        logger.info(f"Review {review.id} is now {review.status.name}")
    except CatalogError as e:
        logger.error(f"Moderation failed: {e.message}")
        return 1
    finally:
        db.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
