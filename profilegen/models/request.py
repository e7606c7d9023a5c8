from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GenerateRequest(BaseModel):
    """Payload of the ``generateProfilePicture`` callable (the ``data`` object)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    image_url: str = Field("", alias="imageUrl")
    prompt: str | None = None

    @field_validator("image_url", mode="before")
    @classmethod
    def _null_url_is_empty(cls, value):
        return "" if value is None else value


class ValidatedRequest(BaseModel):
    """Request after identity, URL and prompt checks have passed."""

    model_config = ConfigDict(frozen=True)

    uid: str
    image_url: str
    prompt: str


class GenerateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(..., alias="imageUrl")
    result_id: str = Field(..., alias="resultId")
