"""
Database models for Booksy.
"""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class UserRole(str, Enum):
    """Account role."""
    USER = "USER"
    ADMIN = "ADMIN"


class BookCondition(str, Enum):
    """Physical condition of a listed book."""
    NEW = "NEW"
    LIKE_NEW = "LIKE_NEW"
    VERY_GOOD = "VERY_GOOD"
    GOOD = "GOOD"
    ACCEPTABLE = "ACCEPTABLE"


class BookStatus(str, Enum):
    """Listing status. Only ACTIVE is ever assigned."""
    ACTIVE = "ACTIVE"
    SOLD = "SOLD"
    REMOVED = "REMOVED"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserModel(Base):
    """User model for authentication."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)  # UUID
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(50), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(10), nullable=False, default=UserRole.USER.value)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    books = relationship("BookModel", back_populates="owner")


class BookModel(Base):
    """A book listed for sale by its owner."""
    __tablename__ = "books"

    id = Column(String(36), primary_key=True)  # UUID

    title = Column(String(500), nullable=False)
    author = Column(String(500), nullable=False)

    # Integer minor units (cents)
    price_cents = Column(Integer, nullable=False)
    condition = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=BookStatus.ACTIVE.value)

    cover_image_url = Column(String(500))

    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    owner = relationship("UserModel", back_populates="books")

    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="ck_books_price_non_negative"),
        CheckConstraint(
            "condition IN ('NEW', 'LIKE_NEW', 'VERY_GOOD', 'GOOD', 'ACCEPTABLE')",
            name="ck_books_condition",
        ),
        Index("idx_books_status_created", "status", "created_at"),
        Index("idx_books_status_price", "status", "price_cents"),
    )
