"""Redis storage backend."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from webhooker.config.settings import StorageConfig


class RedisStorage:
    """Stores the blob under a single Redis key using redis-py."""

    def __init__(self, config: StorageConfig) -> None:
        """Initialize Redis storage.

        Args:
            config: Storage configuration with Redis URL and key.
        """
        self._config = config
        self._redis = None

    async def connect(self) -> None:
        """Connect to Redis.

        Raises:
            ImportError: If redis package not installed.
            ConnectionError: If Redis connection fails.
        """
        try:
            from redis.asyncio import Redis
        except ImportError as e:
            msg = "redis package not installed. Install with: pip install redis"
            raise ImportError(msg) from e

        self._redis = Redis.from_url(self._config.url)

        try:
            await self._redis.ping()
        except Exception as e:
            msg = f"Failed to connect to Redis at {self._config.url}"
            raise ConnectionError(msg) from e

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    async def load(self) -> bytes:
        """Return the stored blob, empty if the key is unset."""
        assert self._redis is not None
        data = await self._redis.get(self._config.key)
        return data or b""

    async def save(self, data: bytes) -> None:
        """Store the blob under the configured key."""
        assert self._redis is not None
        await self._redis.set(self._config.key, data)
