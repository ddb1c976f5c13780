"""
Book API Routes

Public listing search and lookup, the caller's own listings, and listing
creation with an optional cover image.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from loguru import logger
from starlette.concurrency import run_in_threadpool

from booksy.api.dependencies import AuthContext, get_catalog_service, require_auth
from booksy.api.schemas import (
    BookEnvelope,
    BookListResponse,
    BookResponse,
    ErrorResponse,
    ListingMeta,
    MyBooksResponse,
)
from booksy.catalog.listing_query import ListingFilters
from booksy.catalog.service import CatalogService, CoverImage

router = APIRouter(prefix="/books", tags=["books"])


@router.get(
    "",
    response_model=BookListResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid condition filter"},
    },
)
def list_books(
    query: Optional[str] = Query(None, description="Matches title, author or seller"),
    condition: Optional[str] = Query(None, description="Condition or ALL"),
    min_price: Optional[str] = Query(None, alias="min", description="Minimum price"),
    max_price: Optional[str] = Query(None, alias="max", description="Maximum price"),
    sort: Optional[str] = Query(None, description="latest, price_low or price_high"),
    limit: Optional[str] = Query(None, description="Page size, 1-100"),
    offset: Optional[str] = Query(None, description="Rows to skip"),
    service: CatalogService = Depends(get_catalog_service),
):
    """Search active listings with filtering, sorting and pagination."""
    page = service.list_books(
        ListingFilters(
            query=query,
            condition=condition,
            min_price=min_price,
            max_price=max_price,
            sort=sort,
            limit=limit,
            offset=offset,
        )
    )

    return BookListResponse(
        books=[BookResponse.model_validate(book) for book in page.items],
        meta=ListingMeta(**page.meta),
    )


@router.get(
    "/mine",
    response_model=MyBooksResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
def list_my_books(
    auth: AuthContext = Depends(require_auth),
    service: CatalogService = Depends(get_catalog_service),
):
    """All of the caller's listings, newest first."""
    books = service.list_my_books(auth.user_id)
    return MyBooksResponse(books=[BookResponse.model_validate(book) for book in books])


@router.get(
    "/{book_id}",
    response_model=BookEnvelope,
    responses={
        404: {"model": ErrorResponse, "description": "Book not found"},
    },
)
def get_book(
    book_id: str,
    service: CatalogService = Depends(get_catalog_service),
):
    """Get a book by ID with its seller's username."""
    return BookEnvelope(book=BookResponse.model_validate(service.get_book(book_id)))


@router.post(
    "",
    response_model=BookEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid book data"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def create_book(
    title: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    price: Optional[str] = Form(None, description="Major units, e.g. 12.50"),
    condition: Optional[str] = Form(None),
    cover: Optional[UploadFile] = File(None, description="Cover image, max 5MB"),
    auth: AuthContext = Depends(require_auth),
    service: CatalogService = Depends(get_catalog_service),
):
    """List a book for sale."""
    cover_image = None
    if cover is not None:
        # One byte past the limit is enough for the uploader to reject it
        data = await cover.read(service.uploader.max_bytes + 1)
        if data or cover.filename:
            cover_image = CoverImage(
                data=data,
                content_type=cover.content_type,
                filename=cover.filename,
            )

    logger.info(f"Creating book for {auth.user_id}: {title!r} by {author!r}")

    book = await run_in_threadpool(
        service.create_book,
        auth.user_id,
        title,
        author,
        price,
        condition,
        cover_image,
    )
    return BookEnvelope(book=BookResponse.model_validate(book))
