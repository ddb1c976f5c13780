"""
Error Handling for Booksy

Centralized error handling:
- Translation of Booksy exceptions to their HTTP status
- Uniform ``{"message", "code"}`` JSON bodies
- Logging of unexpected errors
"""

import traceback

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from booksy.exceptions import BooksyException


def create_error_response(
    message: str,
    code: str,
    status_code: int,
    headers: dict = None,
) -> JSONResponse:
    """Create standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={"message": message, "code": code},
        headers=headers,
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def setup_exception_handlers(app):
    """Register exception handlers with FastAPI app."""

    @app.exception_handler(BooksyException)
    async def booksy_exception_handler(request: Request, exc: BooksyException):
        if exc.status_code >= 500:
            logger.error(f"Booksy error: {exc.code} - {exc.message} ({request.url.path})")
        else:
            logger.warning(f"Booksy error: {exc.code} - {exc.message} ({request.url.path})")

        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return create_error_response(
            message=exc.message,
            code=exc.code,
            status_code=exc.status_code,
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error: {exc.errors()}")
        return create_error_response(
            message=_describe_validation_error(exc),
            code="VALIDATION_ERROR",
            status_code=400,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return create_error_response(
            message=str(exc.detail),
            code="HTTP_ERROR",
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {str(exc)}\n{traceback.format_exc()}"
        )
        return create_error_response(
            message="Server error",
            code="INTERNAL_ERROR",
            status_code=500,
        )
