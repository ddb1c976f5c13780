"""
Unit tests for the book catalog service.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import update

from booksy.catalog.listing_query import ListingFilters
from booksy.catalog.service import CoverImage
from booksy.exceptions import ImageUploadError, NotFoundError, ValidationError
from booksy.storage.models import BookModel, BookStatus


class TestCreateBook:
    """Tests for listing creation."""

    @pytest.mark.parametrize("price, expected", [("12.50", 1250), ("12", 1200), ("0.99", 99)])
    def test_price_round_trip(self, catalog_service, make_user, price, expected):
        owner = make_user()
        book = catalog_service.create_book(owner.id, "Dune", "Frank Herbert", price, "GOOD")

        assert book.price_cents == expected
        assert catalog_service.get_book(book.id).price_cents == expected

    def test_new_book_is_active_and_owned(self, catalog_service, make_user):
        owner = make_user("alice")
        book = catalog_service.create_book(owner.id, "  Emma ", "Jane Austen", "5", "LIKE_NEW")

        assert book.status == BookStatus.ACTIVE.value
        assert book.owner_id == owner.id
        assert book.username == "alice"
        assert book.title == "Emma"
        assert book.cover_image_url is None

    @pytest.mark.parametrize(
        "title, author, price, condition",
        [
            ("", "Author", "5", "GOOD"),
            ("Title", "  ", "5", "GOOD"),
            ("Title", "Author", None, "GOOD"),
            ("Title", "Author", "5", ""),
        ],
    )
    def test_missing_fields(self, catalog_service, make_user, title, author, price, condition):
        owner = make_user()
        with pytest.raises(ValidationError) as exc_info:
            catalog_service.create_book(owner.id, title, author, price, condition)
        assert exc_info.value.message == "title, author, price, condition are required."

    def test_invalid_condition(self, catalog_service, make_user):
        owner = make_user()
        with pytest.raises(ValidationError, match="Invalid condition."):
            catalog_service.create_book(owner.id, "Title", "Author", "5", "good")

    @pytest.mark.parametrize("price", ["", "free", "-1", "NaN", "21474836.48", "100000000000000000000000000000"])
    def test_invalid_price(self, catalog_service, make_user, price):
        owner = make_user()
        with pytest.raises(ValidationError, match="Invalid price."):
            catalog_service.create_book(owner.id, "Title", "Author", price, "GOOD")

    def test_cover_is_uploaded(self, catalog_service, make_user, image_store, sample_png):
        owner = make_user()
        book = catalog_service.create_book(
            owner.id, "Title", "Author", "5", "NEW",
            cover=CoverImage(data=sample_png, content_type="image/png", filename="c.png"),
        )

        assert book.cover_image_url.startswith("https://res.cloudinary.com/")
        assert image_store.uploads[0][2] == "booksy/books"

    def test_upload_failure_aborts_creation(self, catalog_service, make_user, image_store, sample_png):
        owner = make_user()
        image_store.error = RuntimeError("cloud down")

        with pytest.raises(ImageUploadError):
            catalog_service.create_book(
                owner.id, "Title", "Author", "5", "NEW",
                cover=CoverImage(data=sample_png, content_type="image/png"),
            )

        assert catalog_service.list_my_books(owner.id) == []

    def test_non_image_cover_is_rejected(self, catalog_service, make_user, image_store):
        owner = make_user()

        with pytest.raises(ValidationError):
            catalog_service.create_book(
                owner.id, "Title", "Author", "5", "NEW",
                cover=CoverImage(data=b"hello", content_type="text/plain"),
            )

        assert image_store.uploads == []


class TestLookup:
    """Tests for single-book and owner lookups."""

    def test_get_missing_book(self, catalog_service):
        with pytest.raises(NotFoundError) as exc_info:
            catalog_service.get_book("does-not-exist")
        assert exc_info.value.status_code == 404

    def test_get_returns_any_status(self, catalog_service, make_user, make_book):
        owner = make_user()
        sold = make_book(owner, status=BookStatus.SOLD)

        assert catalog_service.get_book(sold.id).status == "SOLD"

    def test_my_books_only_mine(self, catalog_service, make_user, make_book):
        alice = make_user("alice")
        bob = make_user("bob")
        make_book(alice, title="A1")
        make_book(alice, title="A2", status=BookStatus.REMOVED)
        make_book(bob, title="B1")

        mine = catalog_service.list_my_books(alice.id)

        assert {book.title for book in mine} == {"A1", "A2"}
        assert all(book.owner_id == alice.id for book in mine)


class TestListBooks:
    """Tests for the public listing."""

    @pytest.fixture
    def seeded(self, make_user, make_book):
        owner = make_user("shop")
        for price in (300, 600, 1000, 1500, 2500):
            make_book(owner, title=f"Book {price}", price_cents=price, condition="GOOD")
        make_book(owner, title="Sold one", price_cents=800, status=BookStatus.SOLD)
        make_book(owner, title="Removed one", price_cents=900, status=BookStatus.REMOVED)
        make_book(owner, title="Mint", price_cents=700, condition="NEW")
        return owner

    def test_scenario_condition_price_range_sort(self, catalog_service, seeded):
        page = catalog_service.list_books(
            ListingFilters(condition="GOOD", min_price="5", max_price="20",
                           sort="price_low", limit=2, offset=0)
        )

        assert [book.price_cents for book in page.items] == [600, 1000]
        assert page.total == 3
        assert page.meta == {"total": 3, "limit": 2, "offset": 0}

    def test_only_active_and_within_limit(self, catalog_service, seeded):
        page = catalog_service.list_books(ListingFilters(limit=3))

        assert len(page.items) <= 3
        assert all(book.status == "ACTIVE" for book in page.items)
        assert page.total == 6

    def test_pages_are_disjoint_and_complete(self, catalog_service, seeded):
        full = catalog_service.list_books(ListingFilters(sort="price_high", limit=100))

        seen = []
        offset = 0
        while offset < full.total:
            page = catalog_service.list_books(ListingFilters(sort="price_high", limit=2, offset=offset))
            assert page.total == full.total
            seen.extend(book.id for book in page.items)
            offset += 2

        assert len(seen) == len(set(seen))
        assert seen == [book.id for book in full.items]

    def test_offset_past_end(self, catalog_service, seeded):
        page = catalog_service.list_books(ListingFilters(offset=50))

        assert page.items == []
        assert page.total == 6

    def test_text_search_matches_seller(self, catalog_service, seeded, make_user, make_book):
        other = make_user("someone")
        make_book(other, title="Unrelated")

        page = catalog_service.list_books(ListingFilters(query="SHOP"))

        assert page.total == 6
        assert all(book.username == "shop" for book in page.items)

    def test_text_search_treats_wildcards_literally(self, catalog_service, seeded):
        page = catalog_service.list_books(ListingFilters(query="%"))

        assert page.total == 0

    def test_price_sort_ascending(self, catalog_service, seeded):
        page = catalog_service.list_books(ListingFilters(sort="price_low"))
        prices = [book.price_cents for book in page.items]

        assert prices == sorted(prices)

    def test_invalid_condition(self, catalog_service, seeded):
        with pytest.raises(ValidationError):
            catalog_service.list_books(ListingFilters(condition="PRISTINE"))

    @pytest.mark.parametrize("amount", ["1e30", "100000000000000000000000000000", "21474836.48"])
    def test_out_of_range_price_filters_are_ignored(self, catalog_service, seeded, amount):
        page = catalog_service.list_books(ListingFilters(min_price=amount, max_price=amount))

        assert page.total == 6

    def test_to_dict(self, catalog_service, seeded):
        data = catalog_service.list_books(ListingFilters(limit=1)).to_dict()

        assert set(data) == {"items", "meta"}
        assert data["items"][0]["username"] == "shop"


class TestSamePriceOrdering:
    """Tests for ordering within a group of equally priced books."""

    BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def set_created_at(self, services, book_id, created_at):
        with services.database.session() as session:
            session.execute(
                update(BookModel).where(BookModel.id == book_id).values(created_at=created_at)
            )
            session.commit()

    def page_through(self, catalog_service, sort, limit=2):
        pages = []
        offset = 0
        while True:
            page = catalog_service.list_books(ListingFilters(sort=sort, limit=limit, offset=offset))
            if not page.items:
                return pages
            pages.append([book.id for book in page.items])
            offset += limit

    @pytest.fixture
    def same_price(self, services, make_user, make_book):
        """Five books at 5.00 and one at 3.00, each listed a minute apart."""
        owner = make_user("shop")
        books = []
        for minute, price in enumerate((500, 500, 300, 500, 500, 500)):
            book = make_book(owner, title=f"Copy {minute}", price_cents=price)
            self.set_created_at(services, book.id, self.BASE_TIME + timedelta(minutes=minute))
            books.append(book)
        return books

    def test_newest_first_within_price(self, catalog_service, same_price):
        pages = self.page_through(catalog_service, "price_low")
        ids = [book_id for page in pages for book_id in page]

        cheapest = same_price[2]
        five_dollar = [book for book in same_price if book.price_cents == 500]
        newest_first = [book.id for book in reversed(five_dollar)]

        assert ids == [cheapest.id, *newest_first]

    def test_pages_are_disjoint_and_stable(self, catalog_service, same_price):
        first_run = self.page_through(catalog_service, "price_low")
        second_run = self.page_through(catalog_service, "price_low")

        ids = [book_id for page in first_run for book_id in page]
        assert len(ids) == len(set(ids)) == len(same_price)
        assert all(len(page) <= 2 for page in first_run)
        assert first_run == second_run

    def test_identical_timestamps_fall_back_to_id(self, services, catalog_service, same_price):
        for book in same_price:
            self.set_created_at(services, book.id, self.BASE_TIME)

        pages = self.page_through(catalog_service, "price_high")
        ids = [book_id for page in pages for book_id in page]

        five_dollar = sorted((book.id for book in same_price if book.price_cents == 500), reverse=True)
        assert ids == [*five_dollar, same_price[2].id]
        assert pages == self.page_through(catalog_service, "price_high")
