"""Lifecycle controller: arm/disarm the relay and persist the armed state.

``enable()`` validates the configuration, probes the stream host, starts a
:class:`ConnectionEngine` on a detached task and persists
``{"wasEnabled": true}``. ``disable()`` persists ``{"wasEnabled": false}``
and, unless ``EngineConfig.stop_on_disable`` is off, signals the running
engine to shut down. Entry points are serialized by a lock.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from webhooker.config.settings import EngineConfig, RelayConfig
from webhooker.errors.relay_errors import (
    ConfigIncomplete,
    StreamConnectionError,
    UnreachableEndpoint,
)
from webhooker.storage.state import PersistedState
from webhooker.stream.connection import probe_stream, redact
from webhooker.stream.engine import ConnectionEngine, EngineState

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from webhooker.metrics.collector import RelayMetrics
    from webhooker.notifications.webhook import WebhookForwarder
    from webhooker.storage.client import StorageClient
    from webhooker.stream.engine import Connector, EngineResult

    Prober = Callable[[str], Awaitable[None]]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ControllerState:
    """Configuration and armed flag, replaced only by controller entry points."""

    config: RelayConfig | None = None
    enabled: bool = False


class LifecycleController:
    """Public start/stop contract for the relay.

    Usage::

        ctl = LifecycleController(storage, forwarder)
        await ctl.validate_and_set_config(RelayConfig(...))
        await ctl.enable()
        ...
        await ctl.disable()
    """

    def __init__(
        self,
        storage: StorageClient,
        forwarder: WebhookForwarder,
        *,
        engine_config: EngineConfig | None = None,
        connect: Connector | None = None,
        probe: Prober | None = None,
        metrics: RelayMetrics | None = None,
    ) -> None:
        self._storage = storage
        self._forwarder = forwarder
        self._engine_config = engine_config or EngineConfig()
        self._connect = connect
        self._probe = probe
        self._metrics = metrics
        self._state = ControllerState()
        self._lock = asyncio.Lock()
        self._engine: ConnectionEngine | None = None
        self._engine_task: asyncio.Task[EngineResult] | None = None
        self._last_result: EngineResult | None = None
        self._last_error: BaseException | None = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def enabled(self) -> bool:
        return self._state.enabled

    @property
    def config(self) -> RelayConfig | None:
        return self._state.config

    @property
    def engine(self) -> ConnectionEngine | None:
        """The most recently started engine, if any."""
        return self._engine

    @property
    def engine_task(self) -> asyncio.Task[EngineResult] | None:
        return self._engine_task

    @property
    def engine_state(self) -> EngineState:
        return self._engine.state if self._engine else EngineState.IDLE

    @property
    def last_result(self) -> EngineResult | None:
        """Outcome of the most recent engine run that ended normally."""
        return self._last_result

    @property
    def last_error(self) -> BaseException | None:
        """Error that ended the most recent engine run, if it failed."""
        return self._last_error

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @staticmethod
    def default_config() -> RelayConfig:
        """Configuration shown to an operator before anything is set."""
        return RelayConfig(webhook_url="", client_token="")

    async def validate_and_set_config(self, config: RelayConfig | Mapping[str, Any]) -> None:
        """Replace the configuration and restore the persisted armed state.

        Raises:
            pydantic.ValidationError: If *config* is not a valid RelayConfig.
            PersistenceError: If the stored state cannot be loaded.
        """
        if not isinstance(config, RelayConfig):
            config = RelayConfig.model_validate(dict(config))
        async with self._lock:
            self._state = dataclasses.replace(self._state, config=config)
            await self._restore_state()

    async def restore_state(self) -> None:
        """Set the in-memory armed flag from storage without starting anything.

        Raises:
            PersistenceError: If the stored state cannot be loaded.
        """
        async with self._lock:
            await self._restore_state()

    async def _restore_state(self) -> None:
        stored = await self._storage.load_state()
        self._state = dataclasses.replace(self._state, enabled=stored.was_enabled)
        logger.info("Restored armed state: enabled=%s", stored.was_enabled)

    # ------------------------------------------------------------------
    # Enable / disable
    # ------------------------------------------------------------------

    async def enable(self) -> None:
        """Arm the relay and start streaming.

        Raises:
            ConfigIncomplete: If no configuration is set or a field is empty.
            UnreachableEndpoint: If the stream host rejects the probe.
            PersistenceError: If the armed state cannot be saved. The engine
                has already been started in that case and keeps running.
        """
        async with self._lock:
            config = self._state.config
            if config is None:
                raise ConfigIncomplete("config")
            missing = config.missing_field()
            if missing is not None:
                raise ConfigIncomplete(missing)

            stream_url = config.stream_url
            try:
                await self._run_probe(stream_url)
            except StreamConnectionError as exc:
                logger.warning("Test dial error: %s", exc.message)
                raise UnreachableEndpoint from exc

            logger.info("Websocket url: %s", redact(stream_url))
            await self._retire_engine()
            self._start_engine(stream_url, config.webhook_url)

            self._state = dataclasses.replace(self._state, enabled=True)
            logger.info("Webhooker relay enabled")
            await self._storage.save_state(PersistedState(was_enabled=True))

    async def disable(self) -> None:
        """Disarm the relay.

        Raises:
            PersistenceError: If the armed state cannot be saved.
        """
        async with self._lock:
            self._state = dataclasses.replace(self._state, enabled=False)
            if self._engine_config.stop_on_disable:
                self._stop_engine()
            logger.info("Webhooker relay disabled")
            await self._storage.save_state(PersistedState(was_enabled=False))

    async def shutdown(self) -> None:
        """Stop the running engine and wait for it; persisted state is kept."""
        async with self._lock:
            task = self._engine_task
            self._stop_engine()
        if task is not None and not task.done():
            await asyncio.wait({task})

    # ------------------------------------------------------------------
    # Engine supervision
    # ------------------------------------------------------------------

    async def _run_probe(self, stream_url: str) -> None:
        if self._probe is not None:
            await self._probe(stream_url)
        elif self._connect is not None:
            conn = await self._connect(stream_url)
            await conn.close()
        else:
            await probe_stream(stream_url, open_timeout=self._engine_config.open_timeout)

    async def _retire_engine(self) -> None:
        """Stop the current engine and wait until its connection is closed.

        The engine is detached first, so its outcome is not reported as the
        outcome of the engine that replaces it.
        """
        task = self._engine_task
        self._engine_task = None
        self._stop_engine()
        if task is not None and not task.done():
            await asyncio.wait({task})

    def _start_engine(self, stream_url: str, webhook_url: str) -> None:
        engine = ConnectionEngine(
            self._forwarder,
            webhook_url,
            config=self._engine_config,
            connect=self._connect,
            metrics=self._metrics,
        )
        task = asyncio.create_task(engine.run(stream_url), name="webhooker-engine")
        task.add_done_callback(self._on_engine_done)
        self._engine = engine
        self._engine_task = task
        self._last_result = None
        self._last_error = None

    def _stop_engine(self) -> None:
        if self._engine is not None and self._engine.state is not EngineState.CLOSED:
            logger.info("Signalling running engine to shut down")
            self._engine.request_shutdown()

    def _on_engine_done(self, task: asyncio.Task[EngineResult]) -> None:
        if task.cancelled():
            logger.warning("Engine task was cancelled")
            return
        exc = task.exception()
        if task is not self._engine_task:
            logger.info("Replaced engine finished: %s", exc or task.result().reason)
            return
        if exc is not None:
            self._last_error = exc
            logger.error("Engine run failed: %s", exc)
            return
        result = task.result()
        self._last_result = result
        self._last_error = result.reader_error
        logger.info(
            "Engine run ended (%s): forwarded=%d failures=%d",
            result.reason,
            result.forwarded,
            result.forward_failures,
        )
