"""Cloudinary client for avatar images."""

import io
from typing import Protocol

import cloudinary
import cloudinary.uploader
import structlog

from storefront.config import get_settings

settings = get_settings()
logger = structlog.get_logger(__name__)


class ImageHost(Protocol):
    """Remote image storage: upload returns the host's id and URL."""

    def upload(self, data: bytes, folder: str) -> dict:
        """Upload image bytes. Returns a dict with 'public_id' and 'secure_url'."""
        ...

    def destroy(self, public_id: str) -> None:
        """Delete a previously uploaded image."""
        ...


class CloudinaryImageHost:
    """Uploads and deletes images through the Cloudinary API."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        self.config = cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )
        if not cloud_name:
            logger.warning("CLOUDINARY_NAME not configured. Avatar uploads will fail.")

    def upload(self, data: bytes, folder: str) -> dict:
        result = cloudinary.uploader.upload(io.BytesIO(data), folder=folder, resource_type="image")
        logger.info("Image uploaded", public_id=result.get("public_id"), bytes=len(data))
        return result

    def destroy(self, public_id: str) -> None:
        result = cloudinary.uploader.destroy(public_id)
        logger.info("Image destroyed", public_id=public_id, result=result.get("result"))


def build_image_host() -> CloudinaryImageHost:
    return CloudinaryImageHost(
        cloud_name=settings.CLOUDINARY_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
    )
