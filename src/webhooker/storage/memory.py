"""In-memory storage backend for development and testing."""

from __future__ import annotations


class MemoryStorage:
    """Keeps the blob in process memory; lost on restart."""

    def __init__(self, initial: bytes = b"") -> None:
        self._data = initial
        self.saves = 0

    async def connect(self) -> None:  # noqa: ASYNC910
        """Connect (no-op for in-memory)."""

    async def close(self) -> None:  # noqa: ASYNC910
        """Close (no-op; data survives for inspection in tests)."""

    async def load(self) -> bytes:  # noqa: ASYNC910
        """Return the stored blob, empty if nothing was saved."""
        return self._data

    async def save(self, data: bytes) -> None:  # noqa: ASYNC910
        """Replace the stored blob."""
        self._data = data
        self.saves += 1
