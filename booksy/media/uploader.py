"""
Cover Image Upload

Validates an in-memory image buffer and forwards it to the remote image
store (Cloudinary), returning the stored object's public HTTPS URL.
Validation happens before any network call. Remote failures surface as
``ImageUploadError``; there is no retry.
"""

import base64
from typing import Optional, Protocol

import cloudinary.uploader
from loguru import logger

from booksy.exceptions import (
    BooksyException,
    ConfigurationError,
    ImageUploadError,
    ValidationError,
)

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB
DEFAULT_FOLDER = "booksy/books"


class ImageStore(Protocol):
    """Remote object store for images."""

    def store(self, data: bytes, content_type: str, folder: str) -> str:
        """Store the image and return its public URL."""
        ...


class CloudinaryImageStore:
    """Image store backed by the Cloudinary upload API."""

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def store(self, data: bytes, content_type: str, folder: str) -> str:
        if not self.configured:
            raise ConfigurationError("Image storage is not configured")

        data_uri = f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"

        result = cloudinary.uploader.upload(
            data_uri,
            folder=folder,
            resource_type="image",
            cloud_name=self.cloud_name,
            api_key=self.api_key,
            api_secret=self.api_secret,
            secure=True,
        )
        return result["secure_url"]


class ImageUploader:
    """
    Validates cover images and uploads them to an ``ImageStore``.

    Usage:
        uploader = ImageUploader(CloudinaryImageStore(name, key, secret))
        url = uploader.upload(buffer, "image/jpeg")
    """

    def __init__(
        self,
        store: ImageStore,
        folder: str = DEFAULT_FOLDER,
        max_bytes: int = MAX_IMAGE_BYTES,
    ):
        self.store = store
        self.folder = folder
        self.max_bytes = max_bytes

    def validate(self, data: bytes, content_type: Optional[str]) -> None:
        """
        Raises:
            ValidationError: not an image, empty, or larger than ``max_bytes``.
        """
        if not content_type or not content_type.startswith("image/"):
            raise ValidationError("Only image files are allowed")
        if not data:
            raise ValidationError("Image file is empty")
        if len(data) > self.max_bytes:
            raise ValidationError(
                f"Image exceeds maximum size of {self.max_bytes // (1024 * 1024)}MB"
            )

    def upload(self, data: bytes, content_type: Optional[str]) -> str:
        """
        Upload a cover image.

        Returns:
            Public URL of the stored image.

        Raises:
            ValidationError: rejected before upload.
            ImageUploadError: the remote store failed.
        """
        self.validate(data, content_type)

        logger.info(f"Uploading image: size={len(data) // 1024}KB, type={content_type}")

        try:
            url = self.store.store(data, content_type, self.folder)
        except BooksyException:
            raise
        except Exception as e:
            logger.error(f"Image upload failed: {type(e).__name__}: {e}")
            raise ImageUploadError() from e

        if not url:
            raise ImageUploadError("Image store returned no URL")
        return url


def cover_thumbnail_url(
    url: Optional[str],
    width: int = 320,
    height: int = 420,
) -> Optional[str]:
    """
    Derive a cropped, auto-format thumbnail URL from a Cloudinary delivery URL.

    Non-Cloudinary URLs are returned unchanged.
    """
    if not url:
        return None
    if "/upload/" not in url:
        return url
    return url.replace(
        "/upload/",
        f"/upload/c_fill,w_{width},h_{height},f_auto,q_auto/",
        1,
    )
