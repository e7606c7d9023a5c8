from .base import ImageProvider, ImageProviderError
from .gemini_provider import GeminiProvider, extract_image_bytes
from .registry import create_provider

__all__ = [
    "ImageProvider",
    "ImageProviderError",
    "GeminiProvider",
    "create_provider",
    "extract_image_bytes",
]
