"""
Catalog Errors
Exception hierarchy for review moderation and recommender synchronization.
"""

from typing import Optional


class CatalogError(Exception):
    """Base exception for catalog errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ReviewIntegrityError(CatalogError):
    """
    Raised when a review lacks a relationship the preference sync requires.

    Fatal to the flush that triggered it: no preference key is ever
    fabricated for a review whose product has no product line.
    """

    def __init__(self, review_id, product_id, reason: str = "product has no product lines"):
        super().__init__(
            message=f"Review {review_id} cannot be synchronized: {reason}",
            details={"review_id": review_id, "product_id": product_id},
        )


class RecommenderGatewayError(CatalogError):
    """Exception raised for any recommender failure (refused or unreachable)."""

    pass


class RecommenderTimeoutError(RecommenderGatewayError):
    """Exception raised when a recommender call exceeds its timeout."""

    def __init__(self, operation: str, timeout: float):
        super().__init__(
            message=f"Recommender {operation} timed out after {timeout}s",
            details={"operation": operation, "timeout": timeout},
        )
