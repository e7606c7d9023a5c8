"""Cloud Firestore helper utilities.

Generation metadata lives under the following path structure:

/users/{uid}                       (merged with ``lastGeneratedAt``)
/users/{uid}/results/{result_id}   (one document per generated picture)

The two writes are independent; there is no transaction spanning them or
the Storage upload that precedes them.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from firebase_admin import firestore
from google.cloud.firestore import SERVER_TIMESTAMP

from profilegen.models import GenerationResult
from profilegen.services.firebase_app import get_firebase_app

logger = logging.getLogger(__name__)


class FirestoreDB:  # pylint: disable=too-few-public-methods
    """Wrapper around the Firestore writes made after a generation."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def _user_ref(self, uid: str):
        return self._client.collection("users").document(uid)

    def touch_last_generated(self, uid: str) -> None:
        """Merge the last-generation timestamp into the user document."""

        self._user_ref(uid).set({"lastGeneratedAt": SERVER_TIMESTAMP}, merge=True)

    def add_result(self, uid: str, result: GenerationResult) -> None:
        data = result.to_document()
        data["createdAt"] = SERVER_TIMESTAMP
        self._user_ref(uid).collection("results").document(result.result_id).set(data)
        logger.debug("Added result id=%s to uid=%s", result.result_id, uid)


@lru_cache()
def get_firestore_db() -> FirestoreDB:
    return FirestoreDB(firestore.client(get_firebase_app()))
