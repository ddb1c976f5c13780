"""
Listing Query Builder

Translates optional search parameters into a (count, page) statement pair
over ACTIVE books joined to their owners.

Each predicate is a SQLAlchemy expression that carries its own bound
parameter, so a filter value can never drift away from its placeholder and
no user input is ever written into SQL text. Predicates are added in a fixed
order (text, condition, min price, max price) so the generated SQL is stable
for a given parameter set.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from loguru import logger
from sqlalchemy import Select, func, or_, select
from sqlalchemy.sql.elements import ColumnElement

from booksy.exceptions import ValidationError
from booksy.storage.models import BookCondition, BookModel, BookStatus, UserModel

from .pricing import to_cents

DEFAULT_LIMIT = 50
MIN_LIMIT = 1
MAX_LIMIT = 100
MAX_OFFSET = 10_000

CONDITION_ALL = "ALL"


class SortOrder(str, Enum):
    """Listing sort order."""
    LATEST = "latest"
    PRICE_LOW = "price_low"
    PRICE_HIGH = "price_high"


@dataclass
class ListingFilters:
    """Raw listing parameters, as received from a query string."""

    query: Optional[str] = None
    condition: Optional[str] = None
    min_price: Optional[Union[str, int, float]] = None
    max_price: Optional[Union[str, int, float]] = None
    sort: Optional[str] = None
    limit: Optional[Union[str, int]] = None
    offset: Optional[Union[str, int]] = None


@dataclass(frozen=True)
class ListingParams:
    """Sanitized listing parameters."""

    query: Optional[str] = None
    condition: Optional[BookCondition] = None
    min_cents: Optional[int] = None
    max_cents: Optional[int] = None
    sort: SortOrder = SortOrder.LATEST
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    @classmethod
    def from_filters(cls, filters: ListingFilters) -> "ListingParams":
        """
        Sanitize raw filters.

        Raises:
            ValidationError: condition is neither ALL nor a known condition.
        """
        return cls(
            query=_clean_text(filters.query),
            condition=_parse_condition(filters.condition),
            min_cents=to_cents(filters.min_price),
            max_cents=to_cents(filters.max_price),
            sort=_parse_sort(filters.sort),
            limit=_clamp_int(filters.limit, DEFAULT_LIMIT, MIN_LIMIT, MAX_LIMIT),
            offset=_clamp_int(filters.offset, 0, 0, MAX_OFFSET),
        )


@dataclass
class ListingQuery:
    """A count statement and a page statement sharing one predicate set."""

    count_statement: Select
    page_statement: Select
    limit: int
    offset: int


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_condition(value: Optional[str]) -> Optional[BookCondition]:
    value = _clean_text(value)
    if value is None or value == CONDITION_ALL:
        return None
    try:
        return BookCondition(value)
    except ValueError:
        raise ValidationError("Invalid condition.") from None


def _parse_sort(value: Optional[str]) -> SortOrder:
    try:
        return SortOrder((value or "").strip())
    except ValueError:
        return SortOrder.LATEST


def _clamp_int(value, default: int, lower: int, upper: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(str(value).strip())
    except ValueError:
        return default
    return max(lower, min(upper, number))


class ListingQueryBuilder:
    """
    Accumulates predicates and renders the statement pair.

    Usage:
        listing = ListingQueryBuilder(params).build()
        total = session.execute(listing.count_statement).scalar_one()
        rows = session.execute(listing.page_statement).all()
    """

    def __init__(self, params: ListingParams):
        self.params = params
        self._predicates: list[ColumnElement[bool]] = [
            BookModel.status == BookStatus.ACTIVE.value,
        ]
        self._apply_filters()

    @property
    def predicates(self) -> list[ColumnElement[bool]]:
        return list(self._predicates)

    def where(self, predicate: ColumnElement[bool]) -> "ListingQueryBuilder":
        self._predicates.append(predicate)
        return self

    def _apply_filters(self) -> None:
        params = self.params

        if params.query is not None:
            self.where(
                or_(
                    BookModel.title.icontains(params.query, autoescape=True),
                    BookModel.author.icontains(params.query, autoescape=True),
                    UserModel.username.icontains(params.query, autoescape=True),
                )
            )

        if params.condition is not None:
            self.where(BookModel.condition == params.condition.value)

        if params.min_cents is not None:
            self.where(BookModel.price_cents >= params.min_cents)

        if params.max_cents is not None:
            self.where(BookModel.price_cents <= params.max_cents)

    def _ordering(self) -> list:
        # Recency, then id, breaks ties so pages never overlap.
        recency = [BookModel.created_at.desc(), BookModel.id.desc()]

        if self.params.sort == SortOrder.PRICE_LOW:
            return [BookModel.price_cents.asc(), *recency]
        if self.params.sort == SortOrder.PRICE_HIGH:
            return [BookModel.price_cents.desc(), *recency]
        return recency

    def build(self) -> ListingQuery:
        """Render the count and page statements."""
        joined = BookModel.owner_id == UserModel.id

        count_statement = (
            select(func.count(BookModel.id))
            .select_from(BookModel)
            .join(UserModel, joined)
            .where(*self._predicates)
        )

        page_statement = (
            select(BookModel, UserModel.username)
            .join(UserModel, joined)
            .where(*self._predicates)
            .order_by(*self._ordering())
            .limit(self.params.limit)
            .offset(self.params.offset)
        )

        logger.debug(
            f"Listing query: {len(self._predicates)} predicates, "
            f"sort={self.params.sort.value}, limit={self.params.limit}, offset={self.params.offset}"
        )

        return ListingQuery(
            count_statement=count_statement,
            page_statement=page_statement,
            limit=self.params.limit,
            offset=self.params.offset,
        )


def build_listing_query(filters: ListingFilters) -> ListingQuery:
    """Sanitize filters and build the statement pair in one step."""
    return ListingQueryBuilder(ListingParams.from_filters(filters)).build()
