"""
Recommender Module
Gateway contract and adapters for the recommendation engine's preference graph.
"""

import logging
from typing import Optional

from ..config import CatalogSettings, get_settings
from .gateway import PreferenceGateway
from .http_gateway import HttpPreferenceGateway
from .memory_gateway import InMemoryPreferenceGateway
from .redis_gateway import RedisPreferenceGateway

logger = logging.getLogger(__name__)


def build_preference_gateway(settings: Optional[CatalogSettings] = None) -> PreferenceGateway:
    """
    Build the gateway selected by ``recommender_backend``.

    Args:
        settings: Catalog settings (defaults to global settings)

    Returns:
        Preference gateway instance
    """
    settings = settings or get_settings()
    backend = settings.recommender_backend

    if backend == "http":
        return HttpPreferenceGateway(
            base_url=settings.recommender_url,
            timeout=settings.recommender_timeout,
            api_key=settings.recommender_api_key,
        )
    if backend == "redis":
        return RedisPreferenceGateway(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            key_prefix=settings.redis_key_prefix,
            timeout=settings.recommender_timeout,
        )
    if backend == "memory":
        logger.warning("Using in-memory recommender gateway, preferences are not shared")
        return InMemoryPreferenceGateway()

    raise ValueError(f"Unknown recommender backend: {backend}")


__all__ = [
    "PreferenceGateway",
    "HttpPreferenceGateway",
    "InMemoryPreferenceGateway",
    "RedisPreferenceGateway",
    "build_preference_gateway",
]
