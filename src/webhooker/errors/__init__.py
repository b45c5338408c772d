"""Error hierarchy for the relay."""

from __future__ import annotations

from webhooker.errors.relay_errors import (
    ConfigIncomplete,
    DecodeError,
    EncodingError,
    ForwardError,
    NetworkError,
    PersistenceError,
    StreamConnectionError,
    UnreachableEndpoint,
)
from webhooker.errors.webhooker_errors import WebhookerError

__all__ = [
    "ConfigIncomplete",
    "DecodeError",
    "EncodingError",
    "ForwardError",
    "NetworkError",
    "PersistenceError",
    "StreamConnectionError",
    "UnreachableEndpoint",
    "WebhookerError",
]
