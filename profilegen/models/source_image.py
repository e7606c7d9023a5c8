from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SourceImage(BaseModel):
    """Image downloaded from the caller-supplied URL."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str  # normalised, e.g. "image/jpeg"
