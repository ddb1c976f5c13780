"""
Storage Module for Booksy

Persistent storage for accounts and book listings:
- SQLAlchemy models (users, books)
- Shared engine/session management
- Repositories returning plain dataclasses
"""

from booksy.storage.database import Database
from booksy.storage.models import (
    Base,
    BookCondition,
    BookModel,
    BookStatus,
    UserModel,
    UserRole,
)
from booksy.storage.book_repository import (
    BookRepository,
    StoredBook,
)
from booksy.storage.user_repository import (
    Credentials,
    StoredUser,
    UserRepository,
)

__all__ = [
    "Database",
    # Models
    "Base",
    "BookCondition",
    "BookModel",
    "BookStatus",
    "UserModel",
    "UserRole",
    # Book Repository
    "BookRepository",
    "StoredBook",
    # User Repository
    "Credentials",
    "StoredUser",
    "UserRepository",
]
