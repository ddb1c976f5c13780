"""
API Routes for Booksy

Route modules:
- auth: Registration and login
- books: Listing search, lookup and creation
"""

from booksy.api.routes.auth import router as auth_router
from booksy.api.routes.books import router as books_router

__all__ = [
    "auth_router",
    "books_router",
]
