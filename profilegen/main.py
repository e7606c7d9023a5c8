from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from profilegen.config import get_settings
from profilegen.errors import CallableError
from profilegen.handlers import callable_handler

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Profile Picture Generator")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(callable_handler.router)
app.add_exception_handler(CallableError, callable_handler.callable_error_handler)

logger.info("Serving generateProfilePicture (region=%s)", settings.region)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}
