"""Profile picture generation pipeline.

Stages run strictly in sequence and every stage makes at most one network
call::

    validate -> fetch source -> generate -> persist

Any failure aborts the run. Typed errors reach the caller unchanged; every
other exception is logged and replaced by a generic ``Internal`` error.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from profilegen.config import Settings, get_settings
from profilegen.errors import CallableError, FailedPrecondition, Internal, InvalidArgument, Unauthenticated
from profilegen.models import GenerateRequest, GenerateResponse, GenerationResult, ValidatedRequest
from profilegen.services.firestore_db import FirestoreDB, get_firestore_db
from profilegen.services.genai import ImageProvider, create_provider
from profilegen.services.image_fetcher import ImageFetcher
from profilegen.services.storage import StorageService, get_storage_service

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "Create a professional profile headshot with even lighting."


def validate_request(uid: Optional[str], data: Mapping[str, Any] | None, *, api_key: Optional[str]) -> ValidatedRequest:
    """Check caller identity and payload shape before any I/O happens."""

    if not uid:
        raise Unauthenticated("Authentication required.")

    try:
        payload = GenerateRequest.model_validate(data or {})
    except ValidationError as exc:
        raise InvalidArgument("Invalid request payload.") from exc

    if not payload.image_url.startswith("http"):
        raise InvalidArgument("A valid HTTPS imageUrl is required.")

    prompt = (payload.prompt or "").strip() or DEFAULT_PROMPT

    if not api_key:
        raise FailedPrecondition("GEMINI_API_KEY secret is not configured.")

    return ValidatedRequest(uid=uid, image_url=payload.image_url, prompt=prompt)


class GenerationPipeline:
    """Runs one generation per call.

    Collaborators not passed in are resolved lazily from the process-wide
    handles, so a request rejected during validation never touches Firebase.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        fetcher: Optional[ImageFetcher] = None,
        provider: Optional[ImageProvider] = None,
        storage: Optional[StorageService] = None,
        db: Optional[FirestoreDB] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._fetcher = fetcher
        self._provider = provider
        self._storage = storage
        self._db = db

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    @property
    def fetcher(self) -> ImageFetcher:
        if self._fetcher is None:
            self._fetcher = ImageFetcher(
                timeout=self._settings.fetch_timeout_seconds,
                max_bytes=self._settings.max_source_image_bytes,
            )
        return self._fetcher

    @property
    def storage(self) -> StorageService:
        if self._storage is None:
            self._storage = get_storage_service()
        return self._storage

    @property
    def db(self) -> FirestoreDB:
        if self._db is None:
            self._db = get_firestore_db()
        return self._db

    def provider(self, api_key: str) -> ImageProvider:
        if self._provider is None:
            self._provider = create_provider(self._settings, api_key=api_key)
        return self._provider

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def run(self, uid: Optional[str], data: Mapping[str, Any] | None) -> GenerateResponse:
        try:
            request = validate_request(uid, data, api_key=self._settings.gemini_api_key)
        except CallableError as exc:
            logger.warning("Rejected generation request (uid=%s): %r", uid, exc)
            raise

        try:
            source = await self.fetcher.fetch(request.image_url)
            generated = await self.provider(self._settings.gemini_api_key).edit_image(source, request.prompt)
            # Storage and Firestore clients block; keep the event loop free
            result = await asyncio.to_thread(self.persist, request.uid, generated, request.prompt)
        except Exception as exc:
            logger.exception("Generation failed (uid=%s)", request.uid)
            if isinstance(exc, CallableError):
                raise
            raise Internal("Generation failed, please retry later.") from exc

        logger.info("Generated result id=%s for uid=%s", result.result_id, request.uid)
        return GenerateResponse(image_url=result.image_url, result_id=result.result_id)

    def persist(self, uid: str, image_bytes: bytes, prompt: str) -> GenerationResult:
        """Store the picture and record its metadata.

        Upload, profile merge and result document are separate writes; a
        failure part-way leaves the earlier writes in place.
        """

        result_id = str(uuid.uuid4())
        image_path, image_url = self.storage.upload_generated_image(image_bytes, uid, result_id)
        result = GenerationResult(
            result_id=result_id,
            image_url=image_url,
            image_path=image_path,
            prompt=prompt,
        )
        self.db.touch_last_generated(uid)
        self.db.add_result(uid, result)
        return result
