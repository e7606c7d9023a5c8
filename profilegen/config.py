from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # General
    project_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GOOGLE_CLOUD_PROJECT", "GCLOUD_PROJECT", "project_id"),
        description="GCP / Firebase project ID",
    )
    region: str = Field("us-central1", validation_alias=AliasChoices("FUNCTION_REGION", "region"))
    log_level: str = Field("INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))

    # Firebase
    firebase_credentials_json: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GOOGLE_APPLICATION_CREDENTIALS", "firebase_credentials_json"),
        description="Path to service-account JSON file or JSON string itself.",
    )

    # Cloud Storage
    bucket_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("BUCKET_NAME", "bucket_name"),
        description="Unset means the Firebase default bucket (from FIREBASE_CONFIG).",
    )
    signed_url_expiry_days: int = Field(7, ge=1, le=7)
    cache_control: str = Field("public,max-age=3600")

    # Generative model. The key is injected as a secret by the hosting
    # environment; a missing key is reported per request, not at startup.
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "gemini_api_key"),
    )
    gemini_api_base: str = Field(
        "https://generativelanguage.googleapis.com/v1beta",
        validation_alias=AliasChoices("GEMINI_API_BASE", "gemini_api_base"),
    )
    image_provider: str = Field("gemini", validation_alias=AliasChoices("IMAGE_PROVIDER", "image_provider"))

    # Outbound HTTP timeouts (seconds)
    fetch_timeout_seconds: float = Field(30.0, gt=0)
    generation_timeout_seconds: float = Field(120.0, gt=0)

    # Upper bound for the downloaded source picture (Gemini inline request limit)
    max_source_image_bytes: int = Field(20 * 1024 * 1024, gt=0)


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
