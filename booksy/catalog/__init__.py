"""
Catalog Module for Booksy

Book listings:
- Price parsing into integer cents
- Listing search query construction
- Catalog service (create, lookup, mine, search)
"""

from booksy.catalog.pricing import to_cents
from booksy.catalog.listing_query import (
    ListingFilters,
    ListingParams,
    ListingQuery,
    ListingQueryBuilder,
    SortOrder,
    build_listing_query,
)
from booksy.catalog.service import (
    CatalogService,
    CoverImage,
    ListingPage,
)

__all__ = [
    "to_cents",
    # Listing query
    "ListingFilters",
    "ListingParams",
    "ListingQuery",
    "ListingQueryBuilder",
    "SortOrder",
    "build_listing_query",
    # Service
    "CatalogService",
    "CoverImage",
    "ListingPage",
]
