"""
Dependency injection for FastAPI routes.

Provides injectable dependencies for:
- Configuration
- Service instances (database, repositories, credential and catalog services)
- Authentication (bearer token guard)
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, Request

from booksy.exceptions import AuthError


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class Settings:
    """Application settings loaded from environment."""

    # Database
    database_url: str = "sqlite:///./booksy.db"
    database_echo: bool = False

    # Auth
    jwt_secret: Optional[str] = None
    jwt_expire_days: int = 7
    bcrypt_rounds: int = 12

    # Image storage
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None
    cloudinary_folder: str = "booksy/books"
    max_upload_size_mb: int = 5

    # Environment
    environment: str = "development"
    debug: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            database_echo=os.getenv("DATABASE_ECHO", "false").lower() == "true",
            jwt_secret=os.getenv("JWT_SECRET"),
            jwt_expire_days=int(os.getenv("JWT_EXPIRE_DAYS", cls.jwt_expire_days)),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", cls.bcrypt_rounds)),
            cloudinary_cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME"),
            cloudinary_api_key=os.getenv("CLOUDINARY_API_KEY"),
            cloudinary_api_secret=os.getenv("CLOUDINARY_API_SECRET"),
            cloudinary_folder=os.getenv("CLOUDINARY_FOLDER", cls.cloudinary_folder),
            max_upload_size_mb=int(os.getenv("MAX_UPLOAD_SIZE_MB", cls.max_upload_size_mb)),
            environment=os.getenv("BOOKSY_ENV", cls.environment),
            debug=os.getenv("DEBUG", "true").lower() == "true",
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings.from_env()


# =============================================================================
# Service Dependencies (Lazy Loading)
# =============================================================================

class ServiceContainer:
    """
    Container for lazy-loaded service instances.

    Services are initialized on first access. The token service is only
    built when a token is signed or verified, so a missing JWT secret fails
    those requests instead of the whole application.
    """

    def __init__(self, settings: Settings, image_store=None):
        self.settings = settings
        self._database = None
        self._user_repository = None
        self._book_repository = None
        self._password_hasher = None
        self._token_service = None
        self._image_store = image_store
        self._image_uploader = None
        self._credential_service = None
        self._catalog_service = None

    @property
    def database(self):
        """Get shared database instance."""
        if self._database is None:
            from ..storage.database import Database
            self._database = Database(
                self.settings.database_url,
                echo=self.settings.database_echo,
            )
        return self._database

    @property
    def user_repository(self):
        if self._user_repository is None:
            from ..storage.user_repository import UserRepository
            self._user_repository = UserRepository(self.database)
        return self._user_repository

    @property
    def book_repository(self):
        if self._book_repository is None:
            from ..storage.book_repository import BookRepository
            self._book_repository = BookRepository(self.database)
        return self._book_repository

    @property
    def password_hasher(self):
        if self._password_hasher is None:
            from ..security import PasswordHasher
            self._password_hasher = PasswordHasher(rounds=self.settings.bcrypt_rounds)
        return self._password_hasher

    @property
    def token_service(self):
        """Get token service. Raises ConfigurationError without a secret."""
        if self._token_service is None:
            from ..security import TokenService
            self._token_service = TokenService(
                self.settings.jwt_secret,
                expire_days=self.settings.jwt_expire_days,
            )
        return self._token_service

    @property
    def image_store(self):
        if self._image_store is None:
            from ..media.uploader import CloudinaryImageStore
            self._image_store = CloudinaryImageStore(
                cloud_name=self.settings.cloudinary_cloud_name,
                api_key=self.settings.cloudinary_api_key,
                api_secret=self.settings.cloudinary_api_secret,
            )
        return self._image_store

    @property
    def image_uploader(self):
        if self._image_uploader is None:
            from ..media.uploader import ImageUploader
            self._image_uploader = ImageUploader(
                self.image_store,
                folder=self.settings.cloudinary_folder,
                max_bytes=self.settings.max_upload_size_mb * 1024 * 1024,
            )
        return self._image_uploader

    @property
    def credential_service(self):
        if self._credential_service is None:
            from ..accounts.service import CredentialService
            self._credential_service = CredentialService(
                users=self.user_repository,
                hasher=self.password_hasher,
                tokens=self.token_service,
            )
        return self._credential_service

    @property
    def catalog_service(self):
        if self._catalog_service is None:
            from ..catalog.service import CatalogService
            self._catalog_service = CatalogService(
                books=self.book_repository,
                uploader=self.image_uploader,
            )
        return self._catalog_service

    def close(self) -> None:
        """Release the connection pool, if the database was ever opened."""
        if self._database is not None:
            self._database.dispose()


# Global service container
_service_container: Optional[ServiceContainer] = None


def init_services(settings: Settings, image_store=None) -> ServiceContainer:
    """Initialize service container."""
    global _service_container
    _service_container = ServiceContainer(settings, image_store=image_store)
    return _service_container


def get_service_container() -> ServiceContainer:
    """Get service container instance."""
    if _service_container is None:
        return init_services(get_settings())
    return _service_container


# =============================================================================
# Individual Service Dependencies
# =============================================================================

def get_credential_service(
    container: ServiceContainer = Depends(get_service_container),
):
    """Dependency for credential service."""
    return container.credential_service


def get_catalog_service(
    container: ServiceContainer = Depends(get_service_container),
):
    """Dependency for catalog service."""
    return container.catalog_service


# =============================================================================
# Authentication Dependencies
# =============================================================================

@dataclass
class AuthContext:
    """Identity verified from a bearer token."""

    user_id: str
    role: Optional[str] = None


BEARER_PREFIX = "Bearer "


async def require_auth(
    request: Request,
    authorization: Optional[str] = Header(None),
    container: ServiceContainer = Depends(get_service_container),
) -> AuthContext:
    """
    Require a valid ``Authorization: Bearer <token>`` header.

    The verified identity is returned and also stored on ``request.state``.

    Raises:
        AuthError: header missing or malformed, or token invalid/expired.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthError("Missing token")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthError("Missing token")

    claims = container.token_service.verify(token)

    request.state.user_id = claims.user_id
    request.state.role = claims.role

    return AuthContext(user_id=claims.user_id, role=claims.role)
