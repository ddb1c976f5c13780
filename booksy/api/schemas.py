"""
API Schemas for Booksy

Pydantic models for request validation and response serialization:
- Auth models
- Book models

Request fields are optional at the schema level so that a missing field is
reported by the services as a 400 with a readable message.
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field

from booksy.media.uploader import cover_thumbnail_url


# =============================================================================
# Auth Schemas
# =============================================================================

class RegisterRequest(BaseModel):
    """Registration request. ``name`` is accepted as an alias of ``username``."""

    username: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("username", "name"),
    )
    email: Optional[str] = None
    password: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "pageturner",
                "email": "reader@example.com",
                "password": "correct horse battery staple",
            }
        }
    )


class LoginRequest(BaseModel):
    """Login request."""

    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    """Public user record. The password hash is never exposed."""

    id: str
    email: str
    username: str
    role: str
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RegisterResponse(BaseModel):
    user: UserResponse
    token: str


class LoginResponse(BaseModel):
    token: str
    user: UserResponse


# =============================================================================
# Book Schemas
# =============================================================================

class BookResponse(BaseModel):
    """Book response model."""

    id: str
    title: str
    author: str
    price_cents: int
    condition: str
    status: str
    owner_id: str
    cover_image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    # Owner's public username
    username: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def cover_thumb_url(self) -> Optional[str]:
        return cover_thumbnail_url(self.cover_image_url)


class BookEnvelope(BaseModel):
    book: BookResponse


class ListingMeta(BaseModel):
    total: int
    limit: int
    offset: int


class BookListResponse(BaseModel):
    """Paginated public listing."""

    books: list[BookResponse]
    meta: ListingMeta


class MyBooksResponse(BaseModel):
    books: list[BookResponse]


# =============================================================================
# System Schemas
# =============================================================================

class HealthResponse(BaseModel):
    status: str
    version: str
    components: dict[str, str] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    message: str
    code: str
