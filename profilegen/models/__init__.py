from .request import GenerateRequest, GenerateResponse, ValidatedRequest
from .result import GenerationResult
from .source_image import SourceImage

__all__ = [
    "GenerateRequest",
    "GenerateResponse",
    "ValidatedRequest",
    "GenerationResult",
    "SourceImage",
]
