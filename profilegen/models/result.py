from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GenerationResult(BaseModel):
    """Metadata for one generated picture.

    Stored at ``/users/{uid}/results/{result_id}``; the ``createdAt`` server
    timestamp is added by the database layer on write.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    result_id: str = Field(..., alias="resultId")
    image_url: str = Field(..., alias="imageUrl")  # Signed GCS URL
    image_path: str = Field(..., alias="imagePath")
    prompt: str

    def to_document(self) -> dict[str, str]:
        return self.model_dump(by_alias=True, exclude={"result_id"})
