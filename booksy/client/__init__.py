"""
Booksy client-side state and API access.

Cart and auth state live in a storage area shared between tabs; changes
are broadcast to the current tab and, through storage events, to the
others.
"""

from .api import ApiError, BooksyClient
from .auth import (
    AUTH_EVENT,
    SIGN_IN_PATH,
    TOKEN_KEY,
    AuthStore,
    AuthUser,
    Redirect,
    require_auth,
    return_location,
)
from .broadcaster import ChangeBroadcaster
from .cart import CART_EVENT, CART_KEY, AddResult, CartItem, CartStore
from .storage import STORAGE_EVENT, EventBus, StorageArea, StorageEvent, Tab

__all__ = [
    "ApiError",
    "BooksyClient",
    "AUTH_EVENT",
    "SIGN_IN_PATH",
    "TOKEN_KEY",
    "AuthStore",
    "AuthUser",
    "Redirect",
    "require_auth",
    "return_location",
    "ChangeBroadcaster",
    "CART_EVENT",
    "CART_KEY",
    "AddResult",
    "CartItem",
    "CartStore",
    "STORAGE_EVENT",
    "EventBus",
    "StorageArea",
    "StorageEvent",
    "Tab",
]
