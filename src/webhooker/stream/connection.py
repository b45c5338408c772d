"""Websocket stream connection: open, probe and wrap a client connection.

The engine talks to a :class:`StreamConnection`; :class:`WebSocketConnection`
is the production implementation over the ``websockets`` asyncio client.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Protocol

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from webhooker.errors.relay_errors import StreamConnectionError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from websockets.asyncio.client import ClientConnection

logger = logging.getLogger(__name__)

NORMAL_CLOSURE = 1000
DEFAULT_OPEN_TIMEOUT = 10.0
DEFAULT_CLOSE_TIMEOUT = 1.0

_TOKEN_RE = re.compile(r"(token=)[^&]*")


def redact(url: str) -> str:
    """Mask the client token in a stream URL for logging."""
    return _TOKEN_RE.sub(r"\1***", url)


class StreamConnection(Protocol):
    """One live streaming connection.

    The engine's reader is the only consumer of :meth:`frames`; its control
    loop is the only caller of :meth:`send` and :meth:`send_close`.
    """

    def frames(self) -> AsyncIterator[str | bytes]:
        """Iterate inbound frames until the peer closes normally.

        Raises:
            StreamConnectionError: If the connection drops abnormally.
        """
        ...

    async def send(self, message: str) -> None: ...
    async def send_close(self, code: int, reason: str) -> None: ...
    async def close(self) -> None: ...


class WebSocketConnection:
    """:class:`StreamConnection` backed by a ``websockets`` client connection."""

    def __init__(self, ws: ClientConnection) -> None:
        self._ws = ws

    async def frames(self) -> AsyncIterator[str | bytes]:
        try:
            while True:
                yield await self._ws.recv()
        except ConnectionClosedOK:
            return
        except ConnectionClosed as exc:
            msg = f"Websocket read message error: {exc}"
            raise StreamConnectionError(msg) from exc

    async def send(self, message: str) -> None:
        try:
            await self._ws.send(message)
        except (ConnectionClosed, OSError) as exc:
            msg = f"Websocket write error: {exc}"
            raise StreamConnectionError(msg) from exc

    async def send_close(self, code: int, reason: str) -> None:
        """Start the closing handshake with *code* and *reason*.

        Waits at most the connection's close timeout for the peer to answer.
        """
        try:
            await self._ws.close(code, reason)
        except OSError as exc:
            msg = f"Websocket close error: {exc}"
            raise StreamConnectionError(msg) from exc

    async def close(self) -> None:
        """Release the connection; a no-op if it is already closed."""
        await self._ws.close()


async def open_stream(
    url: str,
    *,
    open_timeout: float = DEFAULT_OPEN_TIMEOUT,
    close_timeout: float = DEFAULT_CLOSE_TIMEOUT,
) -> WebSocketConnection:
    """Open a websocket connection to *url*.

    Raises:
        StreamConnectionError: If the connection cannot be established.
    """
    try:
        ws = await connect(url, open_timeout=open_timeout, close_timeout=close_timeout)
    except (WebSocketException, OSError, TimeoutError, ValueError) as exc:
        msg = f"Websocket error connecting to {redact(url)}: {redact(str(exc))}"
        raise StreamConnectionError(msg) from exc
    return WebSocketConnection(ws)


async def probe_stream(url: str, *, open_timeout: float = DEFAULT_OPEN_TIMEOUT) -> None:
    """Check that *url* accepts a websocket connection, then close it.

    Raises:
        StreamConnectionError: If the connection cannot be established.
    """
    conn = await open_stream(url, open_timeout=open_timeout)
    await conn.close()
    logger.debug("Probe connected to %s", redact(url))
