"""In-memory recommender gateway for development and testing.

Keeps the preference graph in a dict and records every call. It can be
configured at runtime to fail, which lets tests exercise the recommender
being down without a network.
"""

import logging
import threading
from typing import Dict, List, Optional, Tuple

from ..errors import RecommenderGatewayError
from .gateway import PreferenceGateway

logger = logging.getLogger(__name__)


class InMemoryPreferenceGateway(PreferenceGateway):
    """Configurable in-memory preference gateway."""

    def __init__(self) -> None:
        self.preferences: Dict[Tuple[int, int], float] = {}
        self.calls: List[dict] = []
        self.should_succeed: bool = True
        self.failure_reason: str = "Recommender unavailable"
        self._lock = threading.Lock()

    def configure(self, should_succeed: bool, failure_reason: Optional[str] = None) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        if failure_reason is not None:
            self.failure_reason = failure_reason

    def add_preference(self, user_id: int, product_line_id: int, rating: float) -> None:
        with self._lock:
            self.calls.append(
                {
                    "method": "add_preference",
                    "user_id": user_id,
                    "product_line_id": product_line_id,
                    "rating": rating,
                }
            )
            self._check()
            self.preferences[(user_id, product_line_id)] = rating

    def remove_preference(self, user_id: int, product_line_id: int) -> None:
        with self._lock:
            self.calls.append(
                {
                    "method": "remove_preference",
                    "user_id": user_id,
                    "product_line_id": product_line_id,
                }
            )
            self._check()
            self.preferences.pop((user_id, product_line_id), None)

    def calls_to(self, method: str) -> List[dict]:
        """Return recorded calls for one gateway method."""
        return [call for call in self.calls if call["method"] == method]

    def reset(self) -> None:
        with self._lock:
            self.preferences.clear()
            self.calls.clear()
            self.should_succeed = True

    def _check(self) -> None:
        if not self.should_succeed:
            raise RecommenderGatewayError(self.failure_reason)
