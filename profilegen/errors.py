"""Typed errors returned to callers of the callable endpoint.

Every error carries one of the callable-protocol codes below. The HTTP layer
renders them as ``{"error": {"status": ..., "message": ...}}`` so that
Firebase client SDKs surface them as ``HttpsError`` instances.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    INVALID_ARGUMENT = "invalid-argument"
    FAILED_PRECONDITION = "failed-precondition"
    INTERNAL = "internal"

    @property
    def canonical_status(self) -> str:
        return self.value.replace("-", "_").upper()

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorCode.UNAUTHENTICATED: 401,
    ErrorCode.INVALID_ARGUMENT: 400,
    ErrorCode.FAILED_PRECONDITION: 400,
    ErrorCode.INTERNAL: 500,
}


class CallableError(Exception):
    """Base class for errors that are safe to show to the caller."""

    code: ErrorCode = ErrorCode.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def http_status(self) -> int:
        return self.code.http_status

    def to_dict(self) -> dict[str, str]:
        return {"status": self.code.canonical_status, "message": self.message}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class Unauthenticated(CallableError):
    code = ErrorCode.UNAUTHENTICATED


class InvalidArgument(CallableError):
    code = ErrorCode.INVALID_ARGUMENT


class FailedPrecondition(CallableError):
    code = ErrorCode.FAILED_PRECONDITION


class Internal(CallableError):
    code = ErrorCode.INTERNAL
