from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from profilegen.errors import Internal
from profilegen.models import SourceImage

from .base import ImageProvider, ImageProviderError

logger = logging.getLogger(__name__)

MODEL_NAME = "gemini-2.5-flash-image"
TEMPERATURE = 0.65

SYSTEM_PROMPT = (
    "You are an expert mobile-portrait editor who creates realistic images that "
    "look like they were captured on a modern smartphone, keeping people natural "
    "and well-integrated into their environments."
)


def extract_image_bytes(response_json: dict[str, Any]) -> bytes:
    """Return the decoded first inline image of the first candidate.

    Only the first candidate is inspected. When it carries several image
    parts the first one wins.
    """

    candidates = response_json.get("candidates") or []
    parts = []
    if candidates:
        parts = (candidates[0].get("content") or {}).get("parts") or []

    image_parts = [p for p in parts if (p.get("inlineData") or {}).get("data")]
    if not image_parts:
        raise Internal("Gemini did not return an image.")
    if len(image_parts) > 1:
        logger.debug("Gemini returned %d image parts; using the first.", len(image_parts))

    return base64.b64decode(image_parts[0]["inlineData"]["data"])


class GeminiProvider(ImageProvider):
    name = "gemini"

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._url = f"{base_url.rstrip('/')}/models/{MODEL_NAME}:generateContent"
        self._timeout = timeout
        self._transport = transport

    @staticmethod
    def build_payload(source: SourceImage, prompt: str) -> dict[str, Any]:
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": SYSTEM_PROMPT},
                        {"text": prompt},
                        {
                            "inlineData": {
                                "mimeType": source.mime_type,
                                "data": base64.b64encode(source.data).decode("ascii"),
                            }
                        },
                    ],
                }
            ],
            "generationConfig": {"temperature": TEMPERATURE},
        }

    async def edit_image(self, source: SourceImage, prompt: str) -> bytes:
        payload = self.build_payload(source, prompt)
        headers = {"x-goog-api-key": self._api_key}

        logger.info("Generating image with %s (%s, %d bytes)", MODEL_NAME, source.mime_type, len(source.data))
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                resp = await client.post(self._url, headers=headers, json=payload)
            except httpx.HTTPError as exc:
                raise ImageProviderError(None, str(exc)) from exc

        if resp.status_code >= 400:
            try:
                err_json = resp.json()
            except ValueError:
                err_json = None
            raise ImageProviderError(resp.status_code, resp.text, err_json)

        return extract_image_bytes(resp.json())
