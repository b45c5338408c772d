"""File storage backend: one JSON file on local disk."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from webhooker.config.settings import StorageConfig


class FileStorage:
    """Stores the blob in a single file, replaced atomically on save."""

    def __init__(self, config: StorageConfig) -> None:
        """Initialize file storage.

        Args:
            config: Storage configuration; only ``path`` is used.
        """
        self._path = Path(config.path)

    @property
    def path(self) -> Path:
        """Location of the state file."""
        return self._path

    async def connect(self) -> None:  # noqa: ASYNC910
        """Ensure the parent directory exists."""
        self._path.parent.mkdir(parents=True, exist_ok=True)

    async def close(self) -> None:  # noqa: ASYNC910
        """Close (no-op for files)."""

    async def load(self) -> bytes:  # noqa: ASYNC910
        """Read the state file; a missing file reads as empty."""
        if not self._path.exists():
            return b""
        return self._path.read_bytes()

    async def save(self, data: bytes) -> None:  # noqa: ASYNC910
        """Write to a temp file next to the target, then rename over it."""
        tmp = self._path.with_name(self._path.name + ".tmp")
        tmp.write_bytes(data)
        os.replace(tmp, self._path)
