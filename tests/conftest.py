"""Shared test fixtures for the webhooker test suite."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from webhooker.config.settings import (
    AppConfig,
    EngineConfig,
    RelayConfig,
    StorageConfig,
    StorageEngine,
)
from webhooker.errors.relay_errors import NetworkError, StreamConnectionError
from webhooker.storage.client import StorageClient
from webhooker.storage.memory import MemoryStorage

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from webhooker.notifications.events import NotificationEvent


class FakeStreamConnection:
    """In-memory stream connection that records everything written to it.

    Yields *frames* in order, then either ends (peer closed normally) or
    blocks until closed, depending on *hold_open*.
    """

    def __init__(
        self,
        frames: list[str] | None = None,
        *,
        hold_open: bool = True,
        answer_close: bool = True,
        fail_send: bool = False,
        fail_close_frame: bool = False,
        read_error: Exception | None = None,
    ) -> None:
        self._frames = list(frames or [])
        self.hold_open = hold_open
        self.answer_close = answer_close
        self.fail_send = fail_send
        self.fail_close_frame = fail_close_frame
        self.read_error = read_error
        self.sent: list[str] = []
        self.close_frames: list[tuple[int, str]] = []
        self.close_calls = 0
        self.frames_read = 0
        self._closed = asyncio.Event()

    async def frames(self) -> AsyncIterator[str]:
        for frame in self._frames:
            if self._closed.is_set():
                return
            self.frames_read += 1
            yield frame
            await asyncio.sleep(0)
        if self.read_error is not None:
            raise self.read_error
        if self.hold_open:
            await self._closed.wait()

    async def send(self, message: str) -> None:
        if self.fail_send:
            raise StreamConnectionError("Websocket write error: broken pipe")
        self.sent.append(message)

    async def send_close(self, code: int, reason: str) -> None:
        self.close_frames.append((code, reason))
        if self.fail_close_frame:
            raise StreamConnectionError("Websocket close error: broken pipe")
        if self.answer_close:
            self._closed.set()

    async def close(self) -> None:
        self.close_calls += 1
        self._closed.set()


class FakeConnector:
    """Connect callable handing out :class:`FakeStreamConnection` instances."""

    def __init__(self, make: Callable[[], FakeStreamConnection] | None = None) -> None:
        self._make = make or FakeStreamConnection
        self.urls: list[str] = []
        self.connections: list[FakeStreamConnection] = []
        self.fail = False

    async def __call__(self, url: str) -> FakeStreamConnection:
        self.urls.append(url)
        if self.fail:
            raise StreamConnectionError(f"Websocket error connecting to {url}: refused")
        conn = self._make()
        self.connections.append(conn)
        return conn


class RecordingForwarder:
    """Forwarder stand-in that records events and fails for chosen titles."""

    def __init__(self, fail_titles: set[str] | None = None) -> None:
        self.fail_titles = fail_titles or set()
        self.calls: list[tuple[str, NotificationEvent]] = []

    async def forward(self, endpoint: str, event: NotificationEvent) -> None:
        if event.title in self.fail_titles:
            raise NetworkError(f"POST to {endpoint} failed: connection refused")
        self.calls.append((endpoint, event))


@pytest.fixture
def fake_connection_cls() -> type[FakeStreamConnection]:
    return FakeStreamConnection


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def connector_cls() -> type[FakeConnector]:
    return FakeConnector


@pytest.fixture
def forwarder() -> RecordingForwarder:
    return RecordingForwarder()


@pytest.fixture
def forwarder_cls() -> type[RecordingForwarder]:
    return RecordingForwarder


@pytest.fixture
def engine_config() -> EngineConfig:
    """Fast timings so engine tests finish in milliseconds."""
    return EngineConfig(keepalive_interval=0.01, close_grace=0.05, open_timeout=1.0)


@pytest.fixture
def relay_config() -> RelayConfig:
    return RelayConfig(
        host_server="ws://localhost:8080",
        client_token="abc",
        webhook_url="http://example.com/hook",
    )


@pytest.fixture
def memory_backend() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
async def storage(memory_backend: MemoryStorage) -> AsyncIterator[StorageClient]:
    """Connected storage client over an in-memory backend."""
    client = StorageClient(StorageConfig(engine=StorageEngine.MEMORY), backend=memory_backend)
    await client.connect()
    yield client
    await client.close()


@pytest.fixture
def app_config(relay_config: RelayConfig, engine_config: EngineConfig) -> AppConfig:
    """Provide a test AppConfig with safe defaults."""
    return AppConfig(
        debug=True,
        relay=relay_config,
        engine=engine_config,
        storage=StorageConfig(engine=StorageEngine.MEMORY),
    )
