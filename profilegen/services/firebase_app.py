"""Process-wide Firebase Admin SDK handle.

The app is initialised on first use and reused by every request handled by
the process. Storage and Firestore handles derived from it are cached the
same way.
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Optional

import firebase_admin
from firebase_admin import credentials

from profilegen.config import Settings, get_settings

logger = logging.getLogger(__name__)


def _load_credentials(raw: str | None) -> credentials.Base:
    if not raw:
        # Default credentials (Cloud Run / Functions). Token only; signed URLs go through IAM.
        return credentials.ApplicationDefault()
    # Accept path or JSON string
    if raw.lstrip().startswith("{"):
        return credentials.Certificate(json.loads(raw))
    return credentials.Certificate(raw)


def app_options(settings: Settings) -> Optional[dict[str, str]]:
    """Return explicit app options, or None to let the SDK read FIREBASE_CONFIG.

    Any non-empty options dict stops firebase_admin from reading
    FIREBASE_CONFIG, so options are only built for an explicit bucket.
    """

    if not settings.bucket_name:
        return None
    options = {"storageBucket": settings.bucket_name}
    if settings.project_id:
        options["projectId"] = settings.project_id
    return options


@lru_cache()
def get_firebase_app() -> firebase_admin.App:
    """Initialise the Firebase Admin SDK exactly once."""

    if firebase_admin._apps:  # type: ignore[attr-defined]
        return firebase_admin.get_app()

    settings = get_settings()
    try:
        app = firebase_admin.initialize_app(
            _load_credentials(settings.firebase_credentials_json),
            app_options(settings),
        )
    except Exception as exc:  # pragma: no cover
        logger.exception("Failed to initialise Firebase Admin SDK: %s", exc)
        raise
    logger.info("Firebase Admin SDK initialised (project=%s).", settings.project_id or "<default>")
    return app
