"""Shared pytest fixtures for profile picture generator tests.

Firebase services are replaced by small in-memory fakes and all outbound
HTTP goes through ``httpx.MockTransport``, so no test touches the network.
"""

from __future__ import annotations

import base64
import time
from datetime import timedelta
from typing import Any, Callable

import httpx
import pytest

from profilegen.config import Settings
from profilegen.models import SourceImage
from profilegen.services.firestore_db import FirestoreDB
from profilegen.services.genai import GeminiProvider, ImageProvider
from profilegen.services.image_fetcher import ImageFetcher
from profilegen.services.pipeline import GenerationPipeline
from profilegen.services.storage import StorageService

SOURCE_URL = "https://photos.example.com/me.png"
SOURCE_BYTES = b"\x89PNG\r\n\x1a\nsource-pixels"
GENERATED_BYTES = b"\xff\xd8\xffgenerated-jpeg"


# ---------------------------------------------------------------------------
# Cloud Storage fake
# ---------------------------------------------------------------------------


class FakeBlob:
    def __init__(self, bucket: "FakeBucket", name: str) -> None:
        self.bucket = bucket
        self.name = name
        self.cache_control: str | None = None

    def upload_from_string(self, data: bytes, content_type: str | None = None) -> None:
        if self.bucket.fail_uploads:
            raise RuntimeError("storage unavailable")
        if self.bucket.upload_delay:
            time.sleep(self.bucket.upload_delay)
        self.bucket.objects[self.name] = {
            "data": data,
            "content_type": content_type,
            "cache_control": self.cache_control,
        }

    def generate_signed_url(
        self, version: str = "v2", expiration: timedelta | None = None, method: str = "GET", **kwargs: Any
    ) -> str:
        self.bucket.signed.append(
            {"name": self.name, "version": version, "expiration": expiration, "method": method, **kwargs}
        )
        return f"https://storage.googleapis.com/{self.bucket.name}/{self.name}?X-Goog-Signature=fake"


class FakeBucket:
    def __init__(self, name: str = "demo-project.appspot.com") -> None:
        self.name = name
        self.objects: dict[str, dict[str, Any]] = {}
        self.signed: list[dict[str, Any]] = []
        self.fail_uploads = False
        self.upload_delay = 0.0
        self.client: Any = None

    def blob(self, name: str) -> FakeBlob:
        return FakeBlob(self, name)

    def read_signed_url(self, url: str) -> bytes:
        """Resolve a URL produced by ``generate_signed_url`` back to the stored bytes."""
        prefix = f"https://storage.googleapis.com/{self.name}/"
        path = url[len(prefix):].split("?", 1)[0]
        return self.objects[path]["data"]


# ---------------------------------------------------------------------------
# Firestore fake
# ---------------------------------------------------------------------------


class FakeDocument:
    def __init__(self, store: "FakeFirestore", path: str) -> None:
        self._store = store
        self.path = path

    def set(self, data: dict[str, Any], merge: bool = False) -> None:
        self._store.writes.append((self.path, dict(data), merge))
        if merge:
            self._store.docs.setdefault(self.path, {}).update(data)
        else:
            self._store.docs[self.path] = dict(data)

    def collection(self, name: str) -> "FakeCollection":
        return FakeCollection(self._store, f"{self.path}/{name}")


class FakeCollection:
    def __init__(self, store: "FakeFirestore", path: str) -> None:
        self._store = store
        self.path = path

    def document(self, doc_id: str) -> FakeDocument:
        return FakeDocument(self._store, f"{self.path}/{doc_id}")


class FakeFirestore:
    def __init__(self) -> None:
        self.docs: dict[str, dict[str, Any]] = {}
        self.writes: list[tuple[str, dict[str, Any], bool]] = []

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)


# ---------------------------------------------------------------------------
# Model provider stub
# ---------------------------------------------------------------------------


class StubProvider(ImageProvider):
    name = "stub"

    def __init__(self, result: bytes = GENERATED_BYTES) -> None:
        self.result = result
        self.calls: list[tuple[SourceImage, str]] = []

    async def edit_image(self, source: SourceImage, prompt: str) -> bytes:
        self.calls.append((source, prompt))
        return self.result


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------


def gemini_image_response(data: bytes = GENERATED_BYTES, mime_type: str = "image/png") -> dict[str, Any]:
    return {
        "candidates": [
            {
                "content": {
                    "role": "model",
                    "parts": [
                        {"text": "Here is your edited portrait."},
                        {"inlineData": {"mimeType": mime_type, "data": base64.b64encode(data).decode("ascii")}},
                    ],
                }
            }
        ]
    }


class RecordingRouter:
    """MockTransport handler that serves the source image and the Gemini API."""

    def __init__(
        self,
        *,
        source_status: int = 200,
        source_content_type: str | None = "image/png",
        gemini_json: dict[str, Any] | None = None,
        gemini_status: int = 200,
    ) -> None:
        self.source_status = source_status
        self.source_content_type = source_content_type
        self.gemini_json = gemini_json if gemini_json is not None else gemini_image_response()
        self.gemini_status = gemini_status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "generativelanguage.googleapis.com":
            return httpx.Response(self.gemini_status, json=self.gemini_json)
        headers = {}
        if self.source_content_type is not None:
            headers["Content-Type"] = self.source_content_type
        return httpx.Response(self.source_status, content=SOURCE_BYTES, headers=headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def failing_transport() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected outbound request to {request.url}")

    return httpx.MockTransport(handler)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    """Settings with a configured model key and no .env lookup."""
    return Settings(
        project_id="demo-project",
        gemini_api_key="test-gemini-key",
        _env_file=None,
    )


@pytest.fixture
def fake_bucket() -> FakeBucket:
    return FakeBucket()


@pytest.fixture
def fake_firestore() -> FakeFirestore:
    return FakeFirestore()


@pytest.fixture
def storage_service(fake_bucket: FakeBucket) -> StorageService:
    return StorageService(fake_bucket)


@pytest.fixture
def firestore_db(fake_firestore: FakeFirestore) -> FirestoreDB:
    return FirestoreDB(fake_firestore)


@pytest.fixture
def router() -> RecordingRouter:
    return RecordingRouter()


@pytest.fixture
def make_pipeline(
    settings: Settings,
    storage_service: StorageService,
    firestore_db: FirestoreDB,
) -> Callable[..., GenerationPipeline]:
    """Build a pipeline wired to fakes; the HTTP transport is supplied per test."""

    def _make(transport: httpx.AsyncBaseTransport, *, settings_override: Settings | None = None) -> GenerationPipeline:
        cfg = settings_override or settings
        return GenerationPipeline(
            cfg,
            fetcher=ImageFetcher(transport=transport),
            provider=GeminiProvider(api_key=cfg.gemini_api_key or "", transport=transport),
            storage=storage_service,
            db=firestore_db,
        )

    return _make
