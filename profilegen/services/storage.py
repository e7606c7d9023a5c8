"""Google Cloud Storage helper for generated pictures.

Objects are stored under the following key pattern:

    users/{uid}/generated/{result_id}.jpg

The storage path is internal; callers only ever receive a V4 signed URL.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Tuple

import google.auth.transport.requests
from firebase_admin import storage as firebase_storage
from google.auth.credentials import Signing
from google.cloud.storage import Bucket

from profilegen.config import get_settings
from profilegen.services.firebase_app import get_firebase_app

logger = logging.getLogger(__name__)

GENERATED_CONTENT_TYPE = "image/jpeg"


def generated_image_path(uid: str, result_id: str) -> str:
    return f"users/{uid}/generated/{result_id}.jpg"


class StorageService:  # pylint: disable=too-few-public-methods
    """Wrapper around Cloud Storage uploads and signed URLs."""

    def __init__(
        self,
        bucket: Bucket,
        *,
        cache_control: str = "public,max-age=3600",
        expires: timedelta = timedelta(days=7),
    ) -> None:
        self._bucket = bucket
        self._cache_control = cache_control
        self._expires = expires

    def upload_generated_image(self, image_bytes: bytes, uid: str, result_id: str) -> Tuple[str, str]:
        """Upload a generated picture and return (storage_path, signed_url).

        The bytes are always tagged as JPEG regardless of what the model
        reported.
        """

        path = generated_image_path(uid, result_id)
        blob = self._bucket.blob(path)
        blob.cache_control = self._cache_control
        blob.upload_from_string(image_bytes, content_type=GENERATED_CONTENT_TYPE)
        logger.debug("Uploaded %d bytes to gs://%s/%s", len(image_bytes), self._bucket.name, path)

        url = blob.generate_signed_url(
            version="v4",
            expiration=self._expires,
            method="GET",
            **self._iam_signing_kwargs(),
        )
        return path, url

    def _iam_signing_kwargs(self) -> dict[str, str]:
        """Return signBlob arguments when the client credentials hold no private key.

        Application default credentials on Cloud Run / Functions are token
        only; V4 signing then goes through the IAM signBlob API using the
        runtime service account.
        """

        creds = getattr(getattr(self._bucket, "client", None), "_credentials", None)
        if creds is None or isinstance(creds, Signing):
            return {}
        if not hasattr(creds, "service_account_email"):
            logger.warning("Credentials %s cannot sign and carry no service account.", type(creds).__name__)
            return {}
        # Compute credentials report "default" until refreshed
        if not creds.valid or creds.service_account_email == "default":
            creds.refresh(google.auth.transport.requests.Request())
        return {"service_account_email": creds.service_account_email, "access_token": creds.token}


@lru_cache()
def get_storage_service() -> StorageService:
    settings = get_settings()
    bucket = firebase_storage.bucket(settings.bucket_name, app=get_firebase_app())
    if settings.bucket_name is None:
        logger.info("Using default Firebase bucket '%s'.", bucket.name)
    return StorageService(
        bucket,
        cache_control=settings.cache_control,
        expires=timedelta(days=settings.signed_url_expiry_days),
    )
