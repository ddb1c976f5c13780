"""
API middleware components.

Provides cross-cutting concerns for the API:
- Error handling
- CORS configuration
- Request/response logging
"""

from .error_handler import (
    create_error_response,
    setup_exception_handlers,
)

from .cors import (
    CORSConfig,
    get_cors_config,
    setup_cors,
)

from .logging import (
    LoggingConfig,
    RequestLoggingMiddleware,
    StructuredLogFormatter,
    get_request_id,
    setup_logging,
)


__all__ = [
    # Error handling
    "create_error_response",
    "setup_exception_handlers",
    # CORS
    "CORSConfig",
    "get_cors_config",
    "setup_cors",
    # Logging
    "LoggingConfig",
    "RequestLoggingMiddleware",
    "StructuredLogFormatter",
    "get_request_id",
    "setup_logging",
]
