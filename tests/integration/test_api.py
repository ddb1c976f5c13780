"""
Integration tests for API endpoints.
"""

import pytest
from starlette.datastructures import UploadFile

pytestmark = pytest.mark.asyncio


async def register(client, username="reader", email="reader@example.com", password="s3cret!"):
    return await client.post(
        "/auth/register",
        json={"username": username, "email": email, "password": password},
    )


class TestSystemEndpoints:
    """Tests for banner and health endpoints."""

    async def test_root(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["name"] == "Booksy API"

    async def test_health_check(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"] == {"database": "healthy", "auth": "configured"}

    async def test_request_id_is_echoed(self, client):
        response = await client.get("/", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"


class TestAuthEndpoints:
    """Tests for registration and login."""

    async def test_register(self, client):
        response = await register(client)

        assert response.status_code == 201
        data = response.json()
        assert data["token"]
        assert data["user"]["username"] == "reader"
        assert data["user"]["role"] == "USER"
        assert "password_hash" not in data["user"]

    async def test_register_accepts_name(self, client):
        response = await client.post(
            "/auth/register",
            json={"name": "aliased", "email": "aliased@example.com", "password": "pw"},
        )

        assert response.status_code == 201
        assert response.json()["user"]["username"] == "aliased"

    async def test_register_missing_fields(self, client):
        response = await client.post("/auth/register", json={"email": "reader@example.com"})

        assert response.status_code == 400
        assert response.json() == {
            "message": "Username, email, and password are required.",
            "code": "VALIDATION_ERROR",
        }

    async def test_register_without_body(self, client):
        response = await client.post("/auth/register")

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_register_duplicate(self, client):
        await register(client)
        response = await register(client, username="other")

        assert response.status_code == 409
        assert response.json()["message"] == "Email already in use."

    async def test_login(self, client):
        await register(client)

        response = await client.post(
            "/auth/login",
            json={"email": "reader@example.com", "password": "s3cret!"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token"]
        assert data["user"]["email"] == "reader@example.com"

    async def test_login_failures_look_the_same(self, client):
        await register(client)

        wrong_password = await client.post(
            "/auth/login",
            json={"email": "reader@example.com", "password": "nope"},
        )
        unknown_email = await client.post(
            "/auth/login",
            json={"email": "ghost@example.com", "password": "s3cret!"},
        )

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json()
        assert wrong_password.headers["WWW-Authenticate"] == "Bearer"

    async def test_login_missing_fields(self, client):
        response = await client.post("/auth/login", json={"email": "reader@example.com"})

        assert response.status_code == 400


class TestAuthGuard:
    """Tests for bearer token enforcement."""

    async def test_missing_header(self, client):
        response = await client.get("/books/mine")

        assert response.status_code == 401
        assert response.json()["message"] == "Missing token"

    async def test_wrong_scheme(self, client):
        response = await client.get("/books/mine", headers={"Authorization": "Basic abc"})

        assert response.status_code == 401

    async def test_invalid_token(self, client):
        response = await client.get("/books/mine", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    async def test_registered_token_is_accepted(self, client):
        token = (await register(client)).json()["token"]

        response = await client.get("/books/mine", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {"books": []}


class TestBooksEndpoints:
    """Tests for book endpoints."""

    async def test_create_book(self, client, auth_header):
        response = await client.post(
            "/books",
            data={"title": "Dune", "author": "Frank Herbert", "price": "12.50", "condition": "GOOD"},
            headers=auth_header,
        )

        assert response.status_code == 201
        book = response.json()["book"]
        assert book["price_cents"] == 1250
        assert book["status"] == "ACTIVE"
        assert book["username"] == "seller"
        assert book["cover_image_url"] is None
        assert book["cover_thumb_url"] is None

    async def test_create_book_with_cover(self, client, auth_header, image_store, sample_png):
        response = await client.post(
            "/books",
            data={"title": "Dune", "author": "Frank Herbert", "price": "12", "condition": "NEW"},
            files={"cover": ("cover.png", sample_png, "image/png")},
            headers=auth_header,
        )

        assert response.status_code == 201
        book = response.json()["book"]
        assert book["price_cents"] == 1200
        assert book["cover_image_url"].startswith("https://res.cloudinary.com/")
        assert "/upload/c_fill,w_320,h_420,f_auto,q_auto/" in book["cover_thumb_url"]
        assert image_store.uploads[0][0] == sample_png

    async def test_create_book_rejects_oversized_cover(
        self, client, auth_header, services, image_store, monkeypatch
    ):
        services.image_uploader.max_bytes = 16

        read_sizes = []
        original_read = UploadFile.read

        async def recording_read(self, size=-1):
            read_sizes.append(size)
            return await original_read(self, size)

        monkeypatch.setattr(UploadFile, "read", recording_read)

        response = await client.post(
            "/books",
            data={"title": "Dune", "author": "Frank Herbert", "price": "12", "condition": "NEW"},
            files={"cover": ("cover.png", b"\x89PNG" + b"\x00" * 1024, "image/png")},
            headers=auth_header,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert read_sizes and all(size == 17 for size in read_sizes)
        assert image_store.uploads == []

    async def test_create_book_rejects_non_image(self, client, auth_header):
        response = await client.post(
            "/books",
            data={"title": "Dune", "author": "Frank Herbert", "price": "12", "condition": "NEW"},
            files={"cover": ("notes.txt", b"hello", "text/plain")},
            headers=auth_header,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Only image files are allowed"

    async def test_create_book_upload_failure(self, client, auth_header, image_store, sample_png):
        image_store.error = RuntimeError("cloud down")

        response = await client.post(
            "/books",
            data={"title": "Dune", "author": "Frank Herbert", "price": "12", "condition": "NEW"},
            files={"cover": ("cover.png", sample_png, "image/png")},
            headers=auth_header,
        )

        assert response.status_code == 500
        assert response.json()["code"] == "IMAGE_UPLOAD_ERROR"

    async def test_create_book_invalid_fields(self, client, auth_header):
        response = await client.post(
            "/books",
            data={"title": "Dune", "author": "Frank Herbert", "price": "abc", "condition": "GOOD"},
            headers=auth_header,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid price."

    async def test_create_book_requires_auth(self, client):
        response = await client.post(
            "/books",
            data={"title": "Dune", "author": "Frank Herbert", "price": "12", "condition": "GOOD"},
        )

        assert response.status_code == 401

    async def test_get_book(self, client, make_user, make_book):
        book = make_book(make_user("owner"), title="Emma")

        response = await client.get(f"/books/{book.id}")

        assert response.status_code == 200
        assert response.json()["book"]["title"] == "Emma"
        assert response.json()["book"]["username"] == "owner"

    async def test_get_nonexistent_book(self, client):
        response = await client.get("/books/nonexistent-id")

        assert response.status_code == 404
        assert response.json() == {"message": "Book not found", "code": "NOT_FOUND"}

    async def test_my_books(self, client, auth_header, make_user, make_book):
        await client.post(
            "/books",
            data={"title": "Mine", "author": "Me", "price": "3", "condition": "ACCEPTABLE"},
            headers=auth_header,
        )
        make_book(make_user("someone"), title="Theirs")

        response = await client.get("/books/mine", headers=auth_header)

        assert response.status_code == 200
        assert [book["title"] for book in response.json()["books"]] == ["Mine"]


class TestListingEndpoint:
    """Tests for the public listing search."""

    @pytest.fixture
    def seeded(self, make_user, make_book):
        owner = make_user("shop")
        for price in (300, 600, 1000, 1500, 2500):
            make_book(owner, title=f"Book {price}", price_cents=price, condition="GOOD")
        return owner

    async def test_scenario(self, client, seeded):
        response = await client.get(
            "/books",
            params={"condition": "GOOD", "min": "5", "max": "20", "sort": "price_low",
                    "limit": "2", "offset": "0"},
        )

        assert response.status_code == 200
        data = response.json()
        assert [book["price_cents"] for book in data["books"]] == [600, 1000]
        assert data["meta"] == {"total": 3, "limit": 2, "offset": 0}

    async def test_defaults(self, client, seeded):
        response = await client.get("/books")

        assert response.json()["meta"] == {"total": 5, "limit": 50, "offset": 0}

    async def test_out_of_range_values_are_clamped(self, client, seeded):
        response = await client.get("/books", params={"limit": "1000", "offset": "-3", "sort": "bogus"})

        assert response.status_code == 200
        assert response.json()["meta"] == {"total": 5, "limit": 100, "offset": 0}

    async def test_out_of_range_price_filter_is_ignored(self, client, seeded):
        response = await client.get("/books", params={"min": "1e30", "max": "1e30"})

        assert response.status_code == 200
        assert response.json()["meta"]["total"] == 5

    async def test_create_book_with_out_of_range_price(self, client, auth_header):
        response = await client.post(
            "/books",
            data={"title": "Dune", "author": "Frank Herbert",
                  "price": "100000000000000000000000000000", "condition": "GOOD"},
            headers=auth_header,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid price."

    async def test_invalid_condition(self, client, seeded):
        response = await client.get("/books", params={"condition": "MINT"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid condition."

    async def test_query(self, client, seeded):
        response = await client.get("/books", params={"query": "book 15"})

        assert [book["title"] for book in response.json()["books"]] == ["Book 1500"]
