"""
Logging Configuration
Process-wide logging setup for the catalog backend.
"""

import logging
from typing import Optional

from .config import CatalogSettings, get_settings


def configure_logging(settings: Optional[CatalogSettings] = None) -> None:
    """
    Configure root logging from settings.

    Args:
        settings: Catalog settings (defaults to global settings)
    """
    settings = settings or get_settings()

    logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)

    # SQL echo is controlled by DB_ECHO, keep the engine logger quiet otherwise
    if not settings.db_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
