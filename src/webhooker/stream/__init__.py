"""Stream: the notification stream connection and the relay engine."""

from __future__ import annotations

from webhooker.stream.connection import (
    StreamConnection,
    WebSocketConnection,
    open_stream,
    probe_stream,
)
from webhooker.stream.engine import ConnectionEngine, EngineResult, EngineState

__all__ = [
    "ConnectionEngine",
    "EngineResult",
    "EngineState",
    "StreamConnection",
    "WebSocketConnection",
    "open_stream",
    "probe_stream",
]
