"""Error hierarchy and code mapping for IG sessions."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    REQUEST_FAILED = "REQUEST_FAILED"
    DECODE_FAILED = "DECODE_FAILED"
    INVALID_ARGS = "INVALID_ARGS"
    TRANSPORT_FAILED = "TRANSPORT_FAILED"
    TIMEOUT = "TIMEOUT"


class IGError(Exception):
    """Base typed exception for every failure surfaced by a session."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.suggestion = suggestion

    def to_error_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }
        if self.suggestion:
            payload["suggestion"] = self.suggestion
        return payload


class TransportError(IGError):
    """Raised by transports when no HTTP response could be obtained."""

    def __init__(self, message: str, *, timeout: bool = False, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.TIMEOUT if timeout else ErrorCode.TRANSPORT_FAILED, message, details=details)
        self.timeout = timeout


class AuthenticationError(IGError):
    """Login was rejected upstream or could not be completed. Session state is unchanged."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None, suggestion: str | None = None) -> None:
        super().__init__(ErrorCode.AUTHENTICATION_FAILED, message, details=details, suggestion=suggestion)


class RequestError(IGError):
    """An authenticated call failed in transport or returned a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str = "",
        details: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ) -> None:
        merged = {"status_code": status_code, **(details or {})}
        super().__init__(ErrorCode.REQUEST_FAILED, message, details=merged, suggestion=suggestion)
        self.status_code = status_code
        self.body = body


class DecodeError(IGError):
    """A response body did not match the shape expected for its endpoint."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(ErrorCode.DECODE_FAILED, f"{field}: {message}", details={"field": field})
        self.field = field


class InvalidArgumentError(IGError):
    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.INVALID_ARGS, message, details=details)
