"""
HTTP Recommender Gateway
Talks to the recommendation engine's REST write API.

Endpoints:
    PUT    {base_url}/users/{user_id}/preferences/{product_line_id}   {"rating": float}
    DELETE {base_url}/users/{user_id}/preferences/{product_line_id}

PUT replaces the stored value, so repeating it is harmless. A 404 on DELETE
means the preference is already gone and is treated as success.
"""

import logging
from typing import Optional

import requests

from ..errors import RecommenderGatewayError, RecommenderTimeoutError
from .gateway import PreferenceGateway

logger = logging.getLogger(__name__)


class HttpPreferenceGateway(PreferenceGateway):
    """
    Preference gateway over HTTP.

    Every request is bounded by ``timeout`` (connect and read); expiry is
    reported as ``RecommenderTimeoutError``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 2.0,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize HTTP gateway.

        Args:
            base_url: Recommender API base URL
            timeout: Per-request timeout in seconds
            api_key: Optional bearer token
            session: Optional requests session (shared connection pool)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

        logger.info(f"HTTP recommender gateway initialized: {self.base_url} (timeout={timeout}s)")

    def add_preference(self, user_id: int, product_line_id: int, rating: float) -> None:
        self._request(
            "PUT",
            self._preference_url(user_id, product_line_id),
            operation="add_preference",
            json={"rating": rating},
        )

    def remove_preference(self, user_id: int, product_line_id: int) -> None:
        self._request(
            "DELETE",
            self._preference_url(user_id, product_line_id),
            operation="remove_preference",
            allow_missing=True,
        )

    def close(self) -> None:
        self.session.close()

    def _preference_url(self, user_id: int, product_line_id: int) -> str:
        return f"{self.base_url}/users/{user_id}/preferences/{product_line_id}"

    def _request(
        self, method: str, url: str, operation: str, allow_missing: bool = False, **kwargs
    ) -> None:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            raise RecommenderTimeoutError(operation, self.timeout) from e
        except requests.RequestException as e:
            raise RecommenderGatewayError(
                f"Recommender {operation} failed: {e}", details={"url": url}
            ) from e

        if allow_missing and response.status_code == 404:
            logger.debug(f"Recommender {operation}: nothing to delete at {url}")
            return

        if not response.ok:
            raise RecommenderGatewayError(
                f"Recommender {operation} returned HTTP {response.status_code}",
                details={"url": url, "status_code": response.status_code, "body": response.text[:200]},
            )
