"""
Recommender preference gateway (abstract interface).

Defines the write contract the catalog owes to the recommendation engine.
Adapters (HTTP, Redis, in-memory) are swappable without touching the
review moderation code.
"""

from abc import ABC, abstractmethod


class PreferenceGateway(ABC):
    """
    Abstract recommender preference gateway.

    Contract:
    - ``add_preference`` records or replaces the (user, product line)
      association. Repeating it with the same rating is a no-op.
    - ``remove_preference`` deletes the association entirely. Removing an
      absent pair is a no-op, not an error.
    - Every failure, whether the recommender refused the call or could not
      be reached in time, raises ``RecommenderGatewayError``.
    """

    @abstractmethod
    def add_preference(self, user_id: int, product_line_id: int, rating: float) -> None:
        """Record a positive user -> product line preference weighted by rating."""
        ...

    @abstractmethod
    def remove_preference(self, user_id: int, product_line_id: int) -> None:
        """Delete the user -> product line preference."""
        ...

    def close(self) -> None:
        """Release transport resources."""
        return None
