"""
Media Module for Booksy

Cover image validation, upload and thumbnail URLs.
"""

from booksy.media.uploader import (
    DEFAULT_FOLDER,
    MAX_IMAGE_BYTES,
    CloudinaryImageStore,
    ImageStore,
    ImageUploader,
    cover_thumbnail_url,
)

__all__ = [
    "DEFAULT_FOLDER",
    "MAX_IMAGE_BYTES",
    "CloudinaryImageStore",
    "ImageStore",
    "ImageUploader",
    "cover_thumbnail_url",
]
