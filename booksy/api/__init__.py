"""
Booksy - FastAPI Backend.

REST API for accounts and book listings.
"""

from .main import app, create_app, main
from .dependencies import (
    AuthContext,
    ServiceContainer,
    Settings,
    get_service_container,
    get_settings,
    require_auth,
)

__all__ = [
    # Application
    "app",
    "create_app",
    "main",
    # Dependencies
    "AuthContext",
    "ServiceContainer",
    "Settings",
    "get_service_container",
    "get_settings",
    "require_auth",
]
