"""
Booksy - used-book marketplace.

Server: FastAPI + SQLAlchemy REST API (``booksy.api``).
Client: persisted cart and auth state plus an HTTP client (``booksy.client``).
"""

__version__ = "1.0.0"
