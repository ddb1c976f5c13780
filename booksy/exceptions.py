"""
Exception hierarchy for Booksy.

Services raise these; the API layer translates them into JSON error
responses with the matching HTTP status (see
``booksy.api.middleware.error_handler``).
"""


class BooksyException(Exception):
    """Base exception for Booksy errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


class ValidationError(BooksyException):
    """Malformed or missing input."""

    def __init__(self, message: str):
        super().__init__(message=message, code="VALIDATION_ERROR", status_code=400)


class AuthError(BooksyException):
    """Missing, invalid or expired credentials."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, code="AUTH_ERROR", status_code=401)


class NotFoundError(BooksyException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str = None):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            message=f"{resource} not found",
            code="NOT_FOUND",
            status_code=404,
        )


class ConflictError(BooksyException):
    """A unique field is already taken."""

    def __init__(self, message: str):
        super().__init__(message=message, code="CONFLICT", status_code=409)


class ServerError(BooksyException):
    """Unexpected failure."""

    def __init__(self, message: str = "Server error", code: str = "INTERNAL_ERROR"):
        super().__init__(message=message, code=code, status_code=500)


class ImageUploadError(ServerError):
    """The remote image store rejected or failed an upload."""

    def __init__(self, message: str = "Image upload failed"):
        super().__init__(message=message, code="IMAGE_UPLOAD_ERROR")


class ConfigurationError(ServerError):
    """Required configuration is missing."""

    def __init__(self, message: str):
        super().__init__(message=message, code="CONFIGURATION_ERROR")
