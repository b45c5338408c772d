"""Storage client abstraction with memory, file and Redis backends."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from pydantic import ValidationError

from webhooker.errors.relay_errors import PersistenceError
from webhooker.storage.state import PersistedState

if TYPE_CHECKING:
    from webhooker.config.settings import StorageConfig

logger = logging.getLogger(__name__)


class StorageClient:
    """Storage facade that delegates to a memory, file or Redis backend.

    Backend failures are re-raised as :class:`PersistenceError`.
    """

    def __init__(self, config: StorageConfig, *, backend: StorageBackend | None = None) -> None:
        """Initialize storage client with configuration.

        Args:
            config: Storage configuration with engine type and location.
            backend: Pre-built backend; skips engine selection on connect.
        """
        self._config = config
        self._backend = backend
        self._connected = False

    async def connect(self) -> None:
        """Connect to the storage backend.

        Raises:
            ValueError: If the storage engine type is invalid.
            PersistenceError: If the backend cannot be reached.
        """
        if self._backend is None:
            self._backend = self._build_backend()
        try:
            await self._backend.connect()
        except (OSError, ConnectionError) as exc:
            msg = f"Failed to connect storage backend: {exc}"
            raise PersistenceError(msg) from exc
        self._connected = True

    def _build_backend(self) -> StorageBackend:
        from webhooker.storage.file import FileStorage
        from webhooker.storage.memory import MemoryStorage
        from webhooker.storage.redis import RedisStorage

        engine = self._config.engine.lower()
        if engine == "memory":
            return MemoryStorage()
        if engine == "file":
            return FileStorage(self._config)
        if engine == "redis":
            return RedisStorage(self._config)
        msg = f"Unsupported storage engine: {engine}"
        raise ValueError(msg)

    async def close(self) -> None:
        """Close the storage connection (idempotent)."""
        if self._backend is not None and self._connected:
            await self._backend.close()
        self._connected = False

    @property
    def is_connected(self) -> bool:
        """Check if the storage backend is connected."""
        return self._connected and self._backend is not None

    async def load(self) -> bytes:
        """Load the raw blob.

        Raises:
            PersistenceError: If not connected or the backend fails.
        """
        backend = self._ensure_connected()
        try:
            return await backend.load()
        except Exception as exc:
            msg = f"Failed to load state: {exc}"
            raise PersistenceError(msg) from exc

    async def save(self, data: bytes) -> None:
        """Save the raw blob.

        Raises:
            PersistenceError: If not connected or the backend fails.
        """
        backend = self._ensure_connected()
        try:
            await backend.save(data)
        except Exception as exc:
            msg = f"Failed to save state: {exc}"
            raise PersistenceError(msg) from exc

    async def load_state(self) -> PersistedState:
        """Load and decode the armed state.

        An undecodable blob is logged and read as the default (disarmed).
        """
        data = await self.load()
        try:
            return PersistedState.from_bytes(data)
        except ValidationError:
            logger.warning("Stored state is not valid JSON state, treating as disabled: %r", data)
            return PersistedState()

    async def save_state(self, state: PersistedState) -> None:
        """Encode and save the armed state."""
        await self.save(state.to_bytes())

    def _ensure_connected(self) -> StorageBackend:
        if not self._connected or self._backend is None:
            msg = "Storage not connected. Call connect() first."
            raise PersistenceError(msg)
        return self._backend


class StorageBackend(Protocol):
    """Protocol for storage backend implementations."""

    async def connect(self) -> None: ...
    async def close(self) -> None: ...
    async def load(self) -> bytes: ...
    async def save(self, data: bytes) -> None: ...
