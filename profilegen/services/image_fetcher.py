"""Download of the caller-supplied source picture."""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from profilegen.errors import InvalidArgument
from profilegen.models import SourceImage

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"

SUPPORTED_MIME_TYPES = (
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/heic",
    "image/heif",
)

# Non-standard values some servers send
_MIME_ALIASES = {
    "image/jpg": "image/jpeg",
}


def normalize_mime_type(content_type: Optional[str]) -> str:
    """Return the lower-cased media type without parameters, aliases resolved."""

    mime_type = (content_type or "").split(";", 1)[0].strip().lower()
    if not mime_type:
        return DEFAULT_MIME_TYPE
    return _MIME_ALIASES.get(mime_type, mime_type)


class ImageFetcher:  # pylint: disable=too-few-public-methods
    """Single-attempt HTTP GET of a source image."""

    _MAX_SOURCE_BYTES = 20 * 1024 * 1024  # 20 MB, Gemini inline request limit

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        max_bytes: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._max_bytes = max_bytes or self._MAX_SOURCE_BYTES
        self._transport = transport

    async def fetch(self, url: str) -> SourceImage:
        logger.debug("GET source image %s", url)
        async with httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            try:
                async with client.stream("GET", url) as resp:
                    if not resp.is_success:
                        logger.warning("Source image download returned %s for %s", resp.status_code, url)
                        raise InvalidArgument("Unable to download image.")

                    mime_type = normalize_mime_type(resp.headers.get("Content-Type"))
                    if mime_type not in SUPPORTED_MIME_TYPES:
                        raise InvalidArgument(
                            f"Unsupported image mime type: {mime_type}. Allowed: {', '.join(SUPPORTED_MIME_TYPES)}"
                        )

                    data = await self._read_capped(resp, url)
            except httpx.HTTPError as exc:
                logger.warning("Source image download failed for %s: %s", url, exc)
                raise InvalidArgument("Unable to download image.") from exc

        return SourceImage(data=data, mime_type=mime_type)

    async def _read_capped(self, resp: httpx.Response, url: str) -> bytes:
        declared = resp.headers.get("Content-Length", "")
        if declared.isdigit() and int(declared) > self._max_bytes:
            logger.warning("Source image %s declares %s bytes, over the limit", url, declared)
            raise self._too_large()

        buffer = bytearray()
        async for chunk in resp.aiter_bytes():
            buffer.extend(chunk)
            if len(buffer) > self._max_bytes:
                logger.warning("Source image %s exceeded %d bytes while downloading", url, self._max_bytes)
                raise self._too_large()
        return bytes(buffer)

    def _too_large(self) -> InvalidArgument:
        return InvalidArgument(f"Image exceeds the {self._max_bytes} byte size limit.")
