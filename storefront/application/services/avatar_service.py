"""Avatar pipeline — decode a data URI, shrink it, push it to the image host."""

import base64
import io
import re
from typing import Optional

import structlog
from PIL import Image

from storefront.config import get_settings
from storefront.core.exceptions import ImageUploadException
from storefront.domain.models.user import Avatar
from storefront.infrastructure.image_host import ImageHost

settings = get_settings()
logger = structlog.get_logger(__name__)

DATA_URI_PREFIX = re.compile(r"^data:image/\w+;base64,")


def decode_data_uri(data_uri: str) -> bytes:
    payload = DATA_URI_PREFIX.sub("", data_uri.strip(), count=1)
    return base64.b64decode(payload)


def optimize_image(data: bytes, max_width: int) -> bytes:
    """Shrink to at most max_width pixels wide, keeping the aspect ratio and format."""
    with Image.open(io.BytesIO(data)) as img:
        img_format = img.format or "PNG"
        if img.width > max_width:
            height = max(1, round(img.height * max_width / img.width))
            img = img.resize((max_width, height), Image.Resampling.LANCZOS)
        out = io.BytesIO()
        img.save(out, format=img_format)
    return out.getvalue()


def upload_avatar(image_host: ImageHost, data_uri: str) -> Avatar:
    try:
        optimized = optimize_image(decode_data_uri(data_uri), settings.AVATAR_MAX_WIDTH)
        result = image_host.upload(optimized, folder=settings.AVATAR_FOLDER)
        return Avatar(public_id=result["public_id"], url=result["secure_url"])
    except Exception as e:
        # decode, Pillow and image host SDK errors share no common base class
        logger.error("Avatar upload failed", error=str(e), error_type=type(e).__name__)
        raise ImageUploadException()


def discard_avatar(image_host: ImageHost, avatar: Optional[Avatar]) -> None:
    """Delete a remote avatar. Failures are logged and never raised."""
    if avatar is None or not avatar.public_id:
        return
    try:
        image_host.destroy(avatar.public_id)
    except Exception as e:
        logger.warning("Could not delete previous avatar", public_id=avatar.public_id, error=str(e))


def replace_avatar(image_host: ImageHost, previous: Optional[Avatar], data_uri: str) -> Avatar:
    discard_avatar(image_host, previous)
    return upload_avatar(image_host, data_uri)
