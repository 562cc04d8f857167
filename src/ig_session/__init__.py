"""Session-scoped async client for the IG REST trading API."""

from ig_session.exceptions import (
    AuthenticationError,
    DecodeError,
    ErrorCode,
    IGError,
    InvalidArgumentError,
    RequestError,
    TransportError,
)
from ig_session.models.prices import Resolution
from ig_session.models.session import SessionState
from ig_session.session import IGSession
from ig_session.transport import HttpxTransport, Transport, TransportResponse

__all__ = [
    "AuthenticationError",
    "DecodeError",
    "ErrorCode",
    "HttpxTransport",
    "IGError",
    "IGSession",
    "InvalidArgumentError",
    "RequestError",
    "Resolution",
    "SessionState",
    "Transport",
    "TransportError",
    "TransportResponse",
]
