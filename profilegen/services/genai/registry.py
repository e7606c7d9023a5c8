from __future__ import annotations

from profilegen.config import Settings

from .base import ImageProvider
from .gemini_provider import GeminiProvider

_PROVIDERS: dict[str, type[ImageProvider]] = {
    "gemini": GeminiProvider,
}


def create_provider(settings: Settings, *, api_key: str) -> ImageProvider:
    provider_key = settings.image_provider.lower()
    if provider_key not in _PROVIDERS:
        raise ValueError(f"Unsupported image provider: {provider_key}")
    return _PROVIDERS[provider_key](
        api_key=api_key,
        base_url=settings.gemini_api_base,
        timeout=settings.generation_timeout_seconds,
    )
