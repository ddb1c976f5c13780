"""
Book Catalog Service

Orchestrates listing creation (with optional cover upload), single-book
lookup, the owner's own listings, and the public paginated search.
"""

from dataclasses import dataclass
from typing import Optional, Union

from loguru import logger

from booksy.exceptions import NotFoundError, ValidationError
from booksy.media.uploader import ImageUploader
from booksy.storage.book_repository import BookRepository, StoredBook
from booksy.storage.models import BookCondition

from .listing_query import ListingFilters, ListingParams, ListingQueryBuilder
from .pricing import to_cents


@dataclass
class CoverImage:
    """An uploaded cover file held in memory."""

    data: bytes
    content_type: Optional[str]
    filename: Optional[str] = None


@dataclass
class ListingPage:
    """One page of public listings."""

    items: list[StoredBook]
    total: int
    limit: int
    offset: int

    @property
    def meta(self) -> dict:
        return {"total": self.total, "limit": self.limit, "offset": self.offset}

    def to_dict(self) -> dict:
        return {
            "items": [book.to_dict() for book in self.items],
            "meta": self.meta,
        }


class CatalogService:
    """Book listing use cases."""

    def __init__(self, books: BookRepository, uploader: ImageUploader):
        self.books = books
        self.uploader = uploader

    def create_book(
        self,
        owner_id: str,
        title: Optional[str],
        author: Optional[str],
        price: Optional[Union[str, int, float]],
        condition: Optional[str],
        cover: Optional[CoverImage] = None,
    ) -> StoredBook:
        """
        Create an ACTIVE listing owned by ``owner_id``.

        The cover, when given, is uploaded first; an upload failure aborts
        creation. If the insert fails after a successful upload the stored
        image is left behind.

        Raises:
            ValidationError: missing or invalid fields, or a rejected cover.
            ImageUploadError: the image store failed.
        """
        title = (title or "").strip()
        author = (author or "").strip()
        condition = (condition or "").strip()

        if not title or not author or price is None or not condition:
            raise ValidationError("title, author, price, condition are required.")

        try:
            book_condition = BookCondition(condition)
        except ValueError:
            raise ValidationError("Invalid condition.") from None

        price_cents = to_cents(price)
        if price_cents is None:
            raise ValidationError("Invalid price.")

        cover_image_url = None
        if cover is not None:
            cover_image_url = self.uploader.upload(cover.data, cover.content_type)

        try:
            book = self.books.create(
                owner_id=owner_id,
                title=title,
                author=author,
                price_cents=price_cents,
                condition=book_condition.value,
                cover_image_url=cover_image_url,
            )
        except Exception:
            if cover_image_url:
                logger.warning(f"Book insert failed after upload; orphaned image: {cover_image_url}")
            raise

        logger.info(f"Created book {book.id}: {title} by {author} ({price_cents} cents)")
        return book

    def get_book(self, book_id: str) -> StoredBook:
        """
        Raises:
            NotFoundError: no book with this id.
        """
        book = self.books.get(book_id)
        if book is None:
            raise NotFoundError("Book", book_id)
        return book

    def list_my_books(self, owner_id: str) -> list[StoredBook]:
        return self.books.list_by_owner(owner_id)

    def list_books(self, filters: Optional[ListingFilters] = None) -> ListingPage:
        """
        Search ACTIVE listings.

        Raises:
            ValidationError: unknown condition filter.
        """
        params = ListingParams.from_filters(filters or ListingFilters())
        listing = ListingQueryBuilder(params).build()

        items, total = self.books.list_page(listing)

        return ListingPage(items=items, total=total, limit=listing.limit, offset=listing.offset)
