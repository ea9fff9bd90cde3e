"""
SQLAlchemy ORM Models
Catalog table definitions: products, product lines, users and reviews.
"""

from __future__ import annotations

import enum

from sqlalchemy import (
    Column, String, Integer, Float, Text, Date, TIMESTAMP,
    ForeignKey, Numeric, Enum, Index
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class ReviewStatus(enum.Enum):
    """Moderation status of a customer review."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ProductStatus(enum.Enum):
    """Publication status of a product."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    DISCONTINUED = "DISCONTINUED"


class ConsumerType(enum.Enum):
    """Target consumer segment of a product."""

    INDIVIDUAL = "INDIVIDUAL"
    BUSINESS = "BUSINESS"


class User(Base):
    """
    User model.

    The user id is the subject key of the recommender preference graph.
    """
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(80), unique=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, server_default=func.now())

    reviews = relationship("Review", back_populates="user")

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"


class ProductCategory(Base):
    """Product category model."""
    __tablename__ = 'product_categories'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(80), unique=True, nullable=False)

    products = relationship("Product", back_populates="category")

    def __repr__(self):
        return f"<ProductCategory(id={self.id}, name={self.name})>"


class Product(Base):
    """
    Product model.

    Owns an ordered list of product lines and the reviews written about it.
    """
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Core product info
    name = Column(String(80), unique=True, nullable=False)
    price = Column(Numeric(5, 2), nullable=False)
    description = Column(String(300), nullable=False)
    short_description = Column(String(200), nullable=False)
    complete_desc = Column(Text, nullable=True)

    # Availability
    available_from = Column(Date, nullable=False)
    available_to = Column(Date, nullable=True)

    consumer_type = Column(Enum(ConsumerType, name='consumer_type'), nullable=True)
    status = Column(Enum(ProductStatus, name='product_status'), nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, server_default=func.now())

    category_id = Column(Integer, ForeignKey('product_categories.id', ondelete='SET NULL'),
                         nullable=True, index=True)

    # Relationships
    category = relationship("ProductCategory", back_populates="products")
    product_lines = relationship("ProductLine", back_populates="product",
                                 order_by="ProductLine.id", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="product", cascade="all, delete-orphan")

    def add_product_line(self, line: "ProductLine") -> None:
        if line not in self.product_lines:
            self.product_lines.append(line)
            line.product = self

    def add_review(self, review: "Review") -> None:
        if review not in self.reviews:
            self.reviews.append(review)
            review.product = self

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.name})>"


class ProductLine(Base):
    """
    Product line model.

    The product line id is the item key of the recommender preference graph.
    """
    __tablename__ = 'product_lines'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(80), nullable=False)
    product_id = Column(Integer, ForeignKey('products.id', ondelete='CASCADE'),
                        nullable=False, index=True)

    product = relationship("Product", back_populates="product_lines")

    def __repr__(self):
        return f"<ProductLine(id={self.id}, product_id={self.product_id})>"


class Review(Base):
    """
    Customer review model.

    ``status`` is the persisted, authoritative moderation status.
    ``previous_status`` is not a column: it holds the status as last read
    from (or committed to) the database and is maintained by the
    review sync listeners.
    """
    __tablename__ = 'reviews'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'),
                     nullable=False, index=True)
    product_id = Column(Integer, ForeignKey('products.id', ondelete='CASCADE'),
                        nullable=False, index=True)

    status = Column(Enum(ReviewStatus, name='review_status'), nullable=False,
                    default=ReviewStatus.PENDING)
    rating = Column(Float, nullable=False, comment='Rating value (0-5)')
    title = Column(String(120), nullable=True)
    comment = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="reviews")
    product = relationship("Product", back_populates="reviews")

    __table_args__ = (
        Index('idx_reviews_product_status', 'product_id', 'status'),
    )

    # Snapshot of the last durable status, never persisted
    previous_status = None

    def __repr__(self):
        return f"<Review(id={self.id}, status={self.status}, previous={self.previous_status})>"
