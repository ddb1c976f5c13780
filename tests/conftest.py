"""
Pytest configuration and fixtures for Booksy tests.
"""

import sys
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from booksy.api.dependencies import ServiceContainer, Settings, get_service_container
from booksy.api.main import create_app
from booksy.client import StorageArea


TEST_SECRET = "test-secret-do-not-use-in-production"


# =============================================================================
# Test Settings
# =============================================================================

def get_test_settings() -> Settings:
    """Return settings configured for testing."""
    return Settings(
        database_url="sqlite:///:memory:",
        database_echo=False,
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        environment="test",
        debug=True,
    )


class FakeImageStore:
    """Records uploads instead of calling the remote image store."""

    def __init__(self):
        self.uploads = []
        self.error = None

    def store(self, data: bytes, content_type: str, folder: str) -> str:
        if self.error is not None:
            raise self.error
        self.uploads.append((data, content_type, folder))
        return (
            f"https://res.cloudinary.com/demo/image/upload/v1/{folder}/cover{len(self.uploads)}.jpg"
        )


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    return get_test_settings()


@pytest.fixture
def image_store() -> FakeImageStore:
    return FakeImageStore()


@pytest.fixture
def services(settings, image_store) -> ServiceContainer:
    """Service container over a fresh in-memory database."""
    container = ServiceContainer(settings, image_store=image_store)
    container.database.create_tables()
    yield container
    container.close()


@pytest.fixture
def credential_service(services):
    return services.credential_service


@pytest.fixture
def catalog_service(services):
    return services.catalog_service


@pytest.fixture
def make_user(services):
    """Create a user directly through the repository."""
    counter = {"n": 0}

    def _make_user(username: str = None, email: str = None, password: str = "password123"):
        counter["n"] += 1
        username = username or f"reader{counter['n']}"
        email = email or f"{username}@example.com"
        return services.user_repository.create(
            email=email,
            username=username,
            password_hash=services.password_hasher.hash(password),
        )

    return _make_user


@pytest.fixture
def make_book(services):
    """Create a listing directly through the repository."""

    def _make_book(owner, title="Dune", author="Frank Herbert", price_cents=1250,
                   condition="GOOD", **kwargs):
        return services.book_repository.create(
            owner_id=owner.id,
            title=title,
            author=author,
            price_cents=price_cents,
            condition=condition,
            **kwargs,
        )

    return _make_book


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest_asyncio.fixture(scope="function")
async def app(settings, services):
    """Create FastAPI application for testing."""
    application = create_app(settings)

    # Override dependencies
    application.dependency_overrides[get_service_container] = lambda: services

    yield application

    application.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API tests."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_header(services, make_user):
    """Bearer header for a freshly created user."""
    user = make_user("seller")
    token = services.token_service.issue(user.id, user.role)
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture
def storage_area() -> StorageArea:
    return StorageArea()


@pytest.fixture
def sample_png() -> bytes:
    """A few bytes that pass for a PNG upload."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
