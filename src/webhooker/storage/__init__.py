"""Storage — opaque byte-blob persistence for the relay's armed state.

Provides:
- ``StorageClient`` — facade selecting a backend from ``StorageConfig``
- ``MemoryStorage`` / ``FileStorage`` / ``RedisStorage`` — backends
- ``PersistedState`` — the ``{"wasEnabled": bool}`` record
"""

from __future__ import annotations

from webhooker.storage.client import StorageBackend, StorageClient
from webhooker.storage.file import FileStorage
from webhooker.storage.memory import MemoryStorage
from webhooker.storage.redis import RedisStorage
from webhooker.storage.state import PersistedState

__all__ = [
    "FileStorage",
    "MemoryStorage",
    "PersistedState",
    "RedisStorage",
    "StorageBackend",
    "StorageClient",
]
