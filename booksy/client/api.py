"""
HTTP client for the Booksy API.

Thin httpx wrapper used by client code. Register and login sign the
returned token into the auth store; protected calls read it from there.
"""

from typing import Any, BinaryIO, Optional, Union

import httpx
from loguru import logger

from .auth import AuthStore, AuthUser


class ApiError(Exception):
    """A failed API call, carrying a message fit to show the user."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BooksyClient:
    """
    Usage:
        with BooksyClient("http://localhost:4000", auth=store) as client:
            client.login("reader@example.com", "secret")
            page = client.list_books(condition="GOOD", sort="price_low")
    """

    def __init__(
        self,
        base_url: str,
        auth: Optional[AuthStore] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.auth = auth
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "BooksyClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _auth_headers(self) -> dict[str, str]:
        token = self.auth.token if self.auth is not None else None
        if not token:
            raise ApiError("Not authenticated")
        return {"Authorization": f"Bearer {token}"}

    def _request(
        self,
        method: str,
        path: str,
        authenticated: bool = False,
        **kwargs,
    ) -> dict[str, Any]:
        headers = self._auth_headers() if authenticated else {}

        try:
            response = self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ApiError(f"Network error: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.is_error:
            message = None
            if isinstance(data, dict):
                message = data.get("message") or data.get("error")
            raise ApiError(
                message or f"Request failed ({response.status_code})",
                status_code=response.status_code,
            )

        return data if isinstance(data, dict) else {}

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    def _sign_in(self, token: str, user: Optional[dict[str, Any]]) -> None:
        if self.auth is not None and token:
            self.auth.sign_in(token, AuthUser.from_dict(user) if user else None)

    def register(self, username: str, email: str, password: str) -> dict[str, Any]:
        data = self._request(
            "POST",
            "/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        self._sign_in(data.get("token"), data.get("user"))
        return data

    def login(self, email: str, password: str) -> dict[str, Any]:
        data = self._request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password},
        )
        self._sign_in(data.get("token"), data.get("user"))
        return data

    # -------------------------------------------------------------------------
    # Books
    # -------------------------------------------------------------------------

    def list_books(
        self,
        query: Optional[str] = None,
        condition: Optional[str] = None,
        min_price: Optional[Union[str, float]] = None,
        max_price: Optional[Union[str, float]] = None,
        sort: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> dict[str, Any]:
        """Search listings. Returns ``{"books": [...], "meta": {...}}``."""
        params: dict[str, Any] = {}
        if query and query.strip():
            params["query"] = query.strip()
        if condition and condition != "ALL":
            params["condition"] = condition
        if min_price not in (None, ""):
            params["min"] = str(min_price)
        if max_price not in (None, ""):
            params["max"] = str(max_price)
        if sort and sort != "latest":
            params["sort"] = sort
        if limit is not None:
            params["limit"] = limit
        if offset:
            params["offset"] = offset

        return self._request("GET", "/books", params=params)

    def get_book(self, book_id: str) -> dict[str, Any]:
        return self._request("GET", f"/books/{book_id}")["book"]

    def my_books(self) -> list[dict[str, Any]]:
        return self._request("GET", "/books/mine", authenticated=True)["books"]

    def create_book(
        self,
        title: str,
        author: str,
        price: Union[str, float],
        condition: str,
        cover: Optional[tuple[str, Union[bytes, BinaryIO], str]] = None,
    ) -> dict[str, Any]:
        """
        List a book for sale.

        Args:
            cover: Optional ``(filename, content, content_type)`` for the
                cover image.
        """
        files = {"cover": cover} if cover is not None else None
        data = self._request(
            "POST",
            "/books",
            authenticated=True,
            data={
                "title": title,
                "author": author,
                "price": str(price),
                "condition": condition,
            },
            files=files,
        )
        return data["book"]
