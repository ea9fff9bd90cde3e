"""
Database ORM Models
SQLAlchemy ORM models and session factory.
"""

from .models import (
    Base,
    ConsumerType,
    Product,
    ProductCategory,
    ProductLine,
    ProductStatus,
    Review,
    ReviewStatus,
    User,
)

__all__ = [
    "Base",
    "ConsumerType",
    "Product",
    "ProductCategory",
    "ProductLine",
    "ProductStatus",
    "Review",
    "ReviewStatus",
    "User",
]
