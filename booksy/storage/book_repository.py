"""
Book Repository for Booksy

Structured storage for book listings using SQLAlchemy:
- PostgreSQL for production
- SQLite for development/testing

Listing search statements are built by ``booksy.catalog.listing_query``;
this module only executes them.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select

from .database import Database
from .models import BookModel, BookStatus, UserModel


@dataclass
class StoredBook:
    """Data class for book data transfer."""

    id: str
    title: str
    author: str
    price_cents: int
    condition: str
    status: str
    owner_id: str

    cover_image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    # Joined from the owning user
    username: Optional[str] = None

    @classmethod
    def from_model(cls, model: BookModel, username: Optional[str] = None) -> "StoredBook":
        """Create from SQLAlchemy model."""
        return cls(
            id=model.id,
            title=model.title,
            author=model.author,
            price_cents=model.price_cents,
            condition=model.condition,
            status=model.status,
            owner_id=model.owner_id,
            cover_image_url=model.cover_image_url,
            created_at=model.created_at,
            username=username,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "price_cents": self.price_cents,
            "condition": self.condition,
            "status": self.status,
            "owner_id": self.owner_id,
            "cover_image_url": self.cover_image_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "username": self.username,
        }


class BookRepository:
    """
    Repository for book listings.

    Usage:
        repo = BookRepository(Database("sqlite:///./booksy.db"))

        book = repo.create(
            owner_id=user.id,
            title="Dune",
            author="Frank Herbert",
            price_cents=1250,
            condition="GOOD",
        )
    """

    def __init__(self, database: Database):
        self.database = database

    def create(
        self,
        owner_id: str,
        title: str,
        author: str,
        price_cents: int,
        condition: str,
        cover_image_url: Optional[str] = None,
        status: BookStatus = BookStatus.ACTIVE,
    ) -> StoredBook:
        """
        Insert a new listing.

        Returns:
            Created StoredBook, including the owner's username.
        """
        with self.database.session() as session:
            book = BookModel(
                id=str(uuid.uuid4()),
                title=title,
                author=author,
                price_cents=price_cents,
                condition=condition,
                status=status.value,
                cover_image_url=cover_image_url,
                owner_id=owner_id,
            )
            session.add(book)
            try:
                session.commit()
            except Exception:
                session.rollback()
                raise
            session.refresh(book)

            return StoredBook.from_model(book, username=book.owner.username)

    def get(self, book_id: str) -> Optional[StoredBook]:
        """
        Get book by ID joined with the owner's username.

        Any status is returned; only the public listing filters on ACTIVE.
        """
        with self.database.session() as session:
            row = session.execute(
                select(BookModel, UserModel.username)
                .join(UserModel, BookModel.owner_id == UserModel.id)
                .where(BookModel.id == book_id)
            ).first()

            if row is None:
                return None
            book, username = row
            return StoredBook.from_model(book, username=username)

    def list_by_owner(self, owner_id: str) -> list[StoredBook]:
        """All books of one owner, any status, newest first."""
        with self.database.session() as session:
            rows = session.execute(
                select(BookModel, UserModel.username)
                .join(UserModel, BookModel.owner_id == UserModel.id)
                .where(BookModel.owner_id == owner_id)
                .order_by(BookModel.created_at.desc(), BookModel.id.desc())
            ).all()

            return [StoredBook.from_model(book, username=username) for book, username in rows]

    def list_page(self, listing) -> tuple[list[StoredBook], int]:
        """
        Execute a listing query pair.

        Args:
            listing: Object with ``count_statement`` and ``page_statement``
                (see ``booksy.catalog.listing_query.ListingQuery``).

        Returns:
            (page of StoredBooks, total matching rows before pagination)
        """
        with self.database.session() as session:
            total = session.execute(listing.count_statement).scalar_one()
            rows = session.execute(listing.page_statement).all()

            return [StoredBook.from_model(book, username=username) for book, username in rows], total
