"""Connection engine: one streaming connection, one reader, one control loop.

State machine, one run per engine instance::

    IDLE -> CONNECTING -> CONNECTED -> CLOSING -> CLOSED

There is no reconnect transition. A failed connect, a finished reader, a
failed keepalive write or an external shutdown all end in ``CLOSED``; the
connection is closed exactly once on the way out of ``CONNECTED``.

While connected, the reader task consumes frames and forwards each decoded
event to the webhook, and the control loop waits on whichever comes first
of the keepalive tick, the shutdown event and the reader finishing.
"""

from __future__ import annotations

import asyncio
import enum
import functools
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from webhooker.errors.relay_errors import DecodeError, ForwardError, StreamConnectionError
from webhooker.notifications.events import NotificationEvent
from webhooker.stream.connection import NORMAL_CLOSURE, open_stream, redact

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from webhooker.config.settings import EngineConfig
    from webhooker.errors.webhooker_errors import WebhookerError
    from webhooker.metrics.collector import RelayMetrics
    from webhooker.notifications.webhook import WebhookForwarder
    from webhooker.stream.connection import StreamConnection

    Connector = Callable[[str], Awaitable[StreamConnection]]

logger = logging.getLogger(__name__)

DEFAULT_KEEPALIVE_INTERVAL = 1.0
DEFAULT_CLOSE_GRACE = 1.0
DEFAULT_OPEN_TIMEOUT = 10.0

REASON_READER_FINISHED = "reader-finished"
REASON_SHUTDOWN = "shutdown"


class EngineState(enum.StrEnum):
    """Lifecycle states of a single engine run."""

    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass(frozen=True)
class EngineResult:
    """Outcome of a completed engine run."""

    reason: str
    forwarded: int = 0
    forward_failures: int = 0
    reader_error: WebhookerError | None = None


def _timestamp() -> str:
    return datetime.now(UTC).isoformat()


class ConnectionEngine:
    """Relays frames from one stream connection to the webhook.

    Usage::

        engine = ConnectionEngine(forwarder, webhook_url)
        task = asyncio.create_task(engine.run(stream_url))
        ...
        engine.request_shutdown()
        result = await task
    """

    def __init__(
        self,
        forwarder: WebhookForwarder,
        webhook_url: str,
        *,
        config: EngineConfig | None = None,
        connect: Connector | None = None,
        shutdown: asyncio.Event | None = None,
        metrics: RelayMetrics | None = None,
        clock: Callable[[], str] = _timestamp,
    ) -> None:
        self._forwarder = forwarder
        self._webhook_url = webhook_url
        if config is not None:
            self._interval = config.keepalive_interval
            self._grace = config.close_grace
            open_timeout = config.open_timeout
        else:
            self._interval = DEFAULT_KEEPALIVE_INTERVAL
            self._grace = DEFAULT_CLOSE_GRACE
            open_timeout = DEFAULT_OPEN_TIMEOUT
        self._connect = connect or functools.partial(
            open_stream, open_timeout=open_timeout, close_timeout=self._grace
        )
        self._shutdown = shutdown if shutdown is not None else asyncio.Event()
        self._metrics = metrics
        self._clock = clock
        self._state = EngineState.IDLE
        self._settled = asyncio.Event()
        self._was_connected = False
        self._forwarded = 0
        self._forward_failures = 0

    @property
    def state(self) -> EngineState:
        """Current lifecycle state."""
        return self._state

    def request_shutdown(self) -> None:
        """Ask the control loop to close the connection gracefully."""
        self._shutdown.set()

    async def wait_connected(self) -> bool:
        """Wait until the connect attempt settles; True if it connected."""
        await self._settled.wait()
        return self._was_connected

    def _set_state(self, state: EngineState) -> None:
        self._state = state
        if state is EngineState.CONNECTED:
            self._was_connected = True
        if state is not EngineState.CONNECTING:
            self._settled.set()
        if self._metrics:
            self._metrics.set_engine_state(state.value)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self, stream_url: str) -> EngineResult:
        """Connect to *stream_url* and relay until the run ends.

        Raises:
            StreamConnectionError: If connecting fails, or writing a
                keepalive or close frame fails.
            RuntimeError: If this engine has already been run.
        """
        if self._state is not EngineState.IDLE:
            msg = f"Engine already used (state {self._state})"
            raise RuntimeError(msg)

        self._set_state(EngineState.CONNECTING)
        try:
            conn = await self._connect(stream_url)
        except StreamConnectionError:
            logger.exception("Websocket error")
            self._set_state(EngineState.CLOSED)
            raise
        except BaseException:
            self._set_state(EngineState.CLOSED)
            raise
        logger.info("Connected to %s", redact(stream_url))
        self._set_state(EngineState.CONNECTED)

        reader = asyncio.create_task(self._read(conn), name="webhooker-reader")
        stop = asyncio.create_task(self._shutdown.wait(), name="webhooker-shutdown")
        try:
            reason = await self._control(conn, reader, stop)
        finally:
            self._set_state(EngineState.CLOSING)
            stop.cancel()
            await conn.close()
            if not reader.done():
                reader.cancel()
            await asyncio.gather(stop, reader, return_exceptions=True)
            self._set_state(EngineState.CLOSED)
            logger.info("Disconnected from %s", redact(stream_url))

        reader_error = None
        if not reader.cancelled():
            exc = reader.exception()
            if exc is not None:
                logger.error("Stream reader crashed", exc_info=exc)
            else:
                reader_error = reader.result()
        return EngineResult(
            reason=reason,
            forwarded=self._forwarded,
            forward_failures=self._forward_failures,
            reader_error=reader_error,
        )

    async def _control(
        self,
        conn: StreamConnection,
        reader: asyncio.Task[WebhookerError | None],
        stop: asyncio.Task[bool],
    ) -> str:
        """Send keepalives until the reader ends or shutdown is requested."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._interval
        while True:
            timeout = max(0.0, next_tick - loop.time())
            done, _ = await asyncio.wait(
                {reader, stop},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
            if reader in done:
                return REASON_READER_FINISHED
            if stop in done:
                logger.info("Shutdown requested, closing stream")
                self._set_state(EngineState.CLOSING)
                try:
                    await conn.send_close(NORMAL_CLOSURE, "")
                except StreamConnectionError:
                    logger.exception("Websocket close error")
                    raise
                await asyncio.wait({reader}, timeout=self._grace)
                return REASON_SHUTDOWN

            try:
                await conn.send(self._clock())
            except StreamConnectionError:
                logger.exception("Websocket write error")
                raise
            if self._metrics:
                self._metrics.keepalive_sent()
            # Skip ticks missed while the write was blocked.
            now = loop.time()
            next_tick += self._interval
            while next_tick <= now:
                next_tick += self._interval

    async def _read(self, conn: StreamConnection) -> WebhookerError | None:
        """Forward every decodable frame; stop at the first bad one."""
        try:
            async for frame in conn.frames():
                if self._metrics:
                    self._metrics.event_received()
                try:
                    event = NotificationEvent.from_frame(frame)
                except DecodeError as exc:
                    logger.error("Json parsing error: %s", exc.message)  # noqa: TRY400
                    if self._metrics:
                        self._metrics.decode_failed()
                    return exc
                await self._forward(event)
        except StreamConnectionError as exc:
            logger.error("%s", exc.message)  # noqa: TRY400
            return exc
        logger.info("Stream closed by peer")
        return None

    async def _forward(self, event: NotificationEvent) -> None:
        try:
            if self._metrics:
                with self._metrics.track_forward():
                    await self._forwarder.forward(self._webhook_url, event)
            else:
                await self._forwarder.forward(self._webhook_url, event)
        except ForwardError as exc:
            self._forward_failures += 1
            if self._metrics:
                self._metrics.forward_failed(exc.code)
            logger.warning("POST error: %s", exc.message)
        except Exception:
            self._forward_failures += 1
            logger.exception("Unexpected error forwarding event %r", event.title)
        else:
            self._forwarded += 1
            if self._metrics:
                self._metrics.event_forwarded()
