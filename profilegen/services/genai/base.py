from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from profilegen.models import SourceImage


class ImageProviderError(Exception):
    """Raised when the image model API fails or returns an error status."""

    def __init__(self, status: Optional[int], message: str, response_json: Optional[dict[str, Any]] = None):
        super().__init__(f"Image provider error {status}: {message}")
        self.status = status
        self.response_json = response_json or {}


class ImageProvider(ABC):
    """Abstract interface for an image-editing model provider."""

    name: str = "abstract"

    @abstractmethod
    async def edit_image(self, source: SourceImage, prompt: str) -> bytes:
        """Apply *prompt* to *source* and return the generated image bytes.

        Raises
        ------
        profilegen.errors.Internal
            The model answered but produced no image.
        ImageProviderError
            The call itself failed.
        """
