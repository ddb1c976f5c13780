"""
Booksy Test Suite

Tests are organized into:
- unit/: Unit tests for services, query building and client state
- integration/: API tests against the FastAPI app
"""
