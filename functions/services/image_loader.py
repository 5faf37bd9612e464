"""Image payload preparation for the AI gateway.

Each submitted image URL is classified once into a tagged source:
RemoteImage (http/https URL, fetched over the network) or InlineImage (a
base64 data URI, decoded in place). Remote fetches run concurrently and all
must finish before the gateway is called.
"""

import asyncio
import base64
import binascii
import re
from typing import List, Optional, Sequence

import httpx
import structlog

from config.errors import ErrorCode, GatewayError
from config.settings import settings
from models.assessment_input import ImagePayload, ImageRef, ImageSource, InlineImage, RemoteImage

logger = structlog.get_logger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"
DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>image/[\w.+-]+);base64,", re.IGNORECASE)


def parse_image_source(url: str) -> ImageSource:
    """Classify an image URL as remote or inline.

    Raises:
        GatewayError: If an inline payload is not valid base64.
    """
    if url.startswith(("http://", "https://")):
        return RemoteImage(url=url)

    mime_type = DEFAULT_MIME_TYPE
    encoded = url
    match = DATA_URI_PATTERN.match(url)
    if match:
        mime_type = match.group("mime").lower()
        encoded = url[match.end():]

    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise GatewayError(
            "Image data is not valid base64",
            code=ErrorCode.IMAGE_FETCH_FAILED,
            details={"original_error": str(e)},
        ) from e

    return InlineImage(mime_type=mime_type, data=data)


async def _fetch_remote(client: httpx.AsyncClient, image_id: str, source: RemoteImage) -> ImagePayload:
    try:
        response = await client.get(source.url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("image_fetch_failed", image_id=image_id, url=source.url, error=str(e))
        raise GatewayError(
            f"Failed to fetch image {image_id}: {e}",
            code=ErrorCode.IMAGE_FETCH_FAILED,
            details={"image_id": image_id, "original_error": str(e)},
        ) from e

    content_type = response.headers.get("content-type", "")
    mime_type = content_type.split(";")[0].strip() or DEFAULT_MIME_TYPE
    return ImagePayload(image_id=image_id, mime_type=mime_type, data=response.content)


async def _resolve_one(client: httpx.AsyncClient, image: ImageRef) -> ImagePayload:
    source = parse_image_source(image.url)
    if isinstance(source, RemoteImage):
        return await _fetch_remote(client, image.id, source)
    return ImagePayload(image_id=image.id, mime_type=source.mime_type, data=source.data)


async def resolve_images(
    images: Sequence[ImageRef],
    client: Optional[httpx.AsyncClient] = None,
) -> List[ImagePayload]:
    """Resolve every image to bytes, preserving submission order.

    Args:
        images: Submitted image references.
        client: Optional shared HTTP client (tests pass one with a mock transport).

    Returns:
        One ImagePayload per image, in the same order.

    Raises:
        GatewayError: If any image cannot be fetched or decoded.
    """
    if client is not None:
        return list(await asyncio.gather(*(_resolve_one(client, image) for image in images)))

    async with httpx.AsyncClient(
        timeout=settings.image_fetch_timeout_seconds,
        follow_redirects=True,
    ) as owned_client:
        payloads = await asyncio.gather(*(_resolve_one(owned_client, image) for image in images))

    logger.debug("images_resolved", count=len(payloads))
    return list(payloads)
