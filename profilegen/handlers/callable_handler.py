"""Firebase callable endpoint for profile picture generation.

Speaks the callable wire protocol so the Firebase client SDKs can invoke it
with ``httpsCallable(functions, "generateProfilePicture")``:

    request:  {"data": {"imageUrl": "...", "prompt": "..."}}
    success:  {"result": {"imageUrl": "...", "resultId": "..."}}
    failure:  {"error": {"status": "INVALID_ARGUMENT", "message": "..."}}
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from firebase_admin import auth

from profilegen.config import get_settings
from profilegen.errors import CallableError, Internal, InvalidArgument
from profilegen.services.firebase_app import get_firebase_app
from profilegen.services.pipeline import GenerationPipeline

router = APIRouter()
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_caller_uid(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Return the uid of a verified Firebase ID token, or None."""

    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        logger.warning("Malformed Authorization header")
        return None
    try:
        firebase_app = get_firebase_app()
    except Exception as exc:
        logger.exception("Firebase Admin SDK unavailable for token verification")
        raise Internal("Generation failed, please retry later.") from exc

    try:
        decoded = auth.verify_id_token(token, app=firebase_app)
    except (ValueError, auth.InvalidIdTokenError, auth.CertificateFetchError, auth.UserDisabledError) as exc:
        logger.warning("ID token rejected: %s", exc)
        return None
    return decoded.get("uid")


def get_pipeline() -> GenerationPipeline:
    return GenerationPipeline(get_settings())


def _error_response(exc: CallableError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content={"error": exc.to_dict()})


# ---------------------------------------------------------------------------
# POST callable
# ---------------------------------------------------------------------------


@router.post("/generateProfilePicture")
async def generate_profile_picture(
    request: Request,
    uid: Optional[str] = Depends(get_caller_uid),
    pipeline: GenerationPipeline = Depends(get_pipeline),
):
    try:
        body = await request.json()
    except ValueError:
        logger.warning("Request body is not valid JSON")
        return _error_response(InvalidArgument("Bad Request"))

    if not isinstance(body, dict) or "data" not in body:
        logger.warning("Request body is missing the data field")
        return _error_response(InvalidArgument("Bad Request"))
    data = body["data"]
    if data is not None and not isinstance(data, dict):
        return _error_response(InvalidArgument("Bad Request"))

    try:
        response = await pipeline.run(uid, data)
    except CallableError as exc:
        return _error_response(exc)

    return {"result": response.model_dump(by_alias=True)}


async def callable_error_handler(request: Request, exc: CallableError) -> JSONResponse:
    """Render typed errors raised outside the route body (e.g. in dependencies)."""

    return _error_response(exc)
