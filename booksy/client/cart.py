"""
Client-local shopping cart.

The cart is a JSON array under ``booksy_cart_v1`` in the tab's storage
area, newest first, with at most one entry per book. It is a snapshot of
what the reader picked and is never reconciled with server inventory.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from loguru import logger

from .broadcaster import ChangeBroadcaster
from .storage import Tab

CART_KEY = "booksy_cart_v1"
CART_EVENT = "booksy:cart"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class CartItem:
    """Denormalized snapshot of a book at the time it was added."""

    book_id: str
    title: str
    author: str
    price_cents: int
    cover_image_url: Optional[str] = None
    seller_username: Optional[str] = None
    added_at: str = field(default_factory=_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "bookId": self.book_id,
            "title": self.title,
            "author": self.author,
            "price_cents": self.price_cents,
            "cover_image_url": self.cover_image_url,
            "sellerUsername": self.seller_username,
            "addedAt": self.added_at,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional["CartItem"]:
        """Parse a stored entry, or None if it is malformed."""
        if not isinstance(data, dict):
            return None
        book_id = data.get("bookId")
        if not isinstance(book_id, str) or not book_id:
            return None
        price_cents = data.get("price_cents")
        if isinstance(price_cents, bool) or not isinstance(price_cents, int):
            return None
        return cls(
            book_id=book_id,
            title=str(data.get("title") or ""),
            author=str(data.get("author") or ""),
            price_cents=price_cents,
            cover_image_url=data.get("cover_image_url"),
            seller_username=data.get("sellerUsername"),
            added_at=str(data.get("addedAt") or _now_iso()),
        )

    @classmethod
    def from_book(cls, book: dict[str, Any]) -> "CartItem":
        """Build an entry from a book as returned by the API."""
        return cls(
            book_id=book["id"],
            title=book["title"],
            author=book["author"],
            price_cents=book["price_cents"],
            cover_image_url=book.get("cover_image_url"),
            seller_username=book.get("username"),
        )


@dataclass
class AddResult:
    added: bool
    cart: list[CartItem]


class CartStore:
    """
    Cart operations bound to one tab.

    Every mutation persists the full list and then broadcasts on
    ``booksy:cart``; other tabs on the same storage area hear about it
    through their storage events.
    """

    def __init__(self, tab: Tab):
        self.tab = tab
        self.changes = ChangeBroadcaster(tab, CART_EVENT, CART_KEY)

    def get(self) -> list[CartItem]:
        """Current cart. Unreadable storage reads as an empty cart."""
        raw = self.tab.get_item(CART_KEY)
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable cart data")
            return []
        if not isinstance(parsed, list):
            return []

        items = []
        for entry in parsed:
            item = CartItem.from_dict(entry)
            if item is not None:
                items.append(item)
        return items

    def set(self, items: list[CartItem]) -> None:
        self.tab.set_item(CART_KEY, json.dumps([item.to_dict() for item in items]))
        self.changes.emit()

    def add(self, item: CartItem) -> AddResult:
        cart = self.get()
        if any(existing.book_id == item.book_id for existing in cart):
            return AddResult(added=False, cart=cart)

        updated = [item, *cart]
        self.set(updated)
        return AddResult(added=True, cart=updated)

    def remove(self, book_id: str) -> list[CartItem]:
        updated = [item for item in self.get() if item.book_id != book_id]
        self.set(updated)
        return updated

    def clear(self) -> None:
        self.set([])

    def contains(self, book_id: str) -> bool:
        return any(item.book_id == book_id for item in self.get())

    def count(self) -> int:
        return len(self.get())

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        return self.changes.subscribe(listener)
