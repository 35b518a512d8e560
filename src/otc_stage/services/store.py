"""Key-value storage backends for challenges and rate-limit markers.

All lifecycle state lives in a TTL-capable key-value store. Production
deployments use Redis; the in-process backend exists for tests and local
development, mirroring Redis semantics for the handful of commands we use.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol

import redis.asyncio as redis

from otc_stage.core.settings import Settings, settings

# Configure logger for this module
logger = logging.getLogger(__name__)

# Redis TTL sentinels
TTL_MISSING = -2
TTL_PERSISTENT = -1


class KeyValueStore(Protocol):
    """Asynchronous subset of the Redis command set used by the OTP core."""

    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def get(self, key: str) -> str | None: ...

    async def delete(self, key: str) -> int: ...

    async def ttl(self, key: str) -> int: ...

    async def incr(self, key: str) -> int: ...

    async def expire(self, key: str, ttl_seconds: int) -> bool: ...

    async def close(self) -> None: ...


class RedisStore:
    """Key-value store backed by a shared Redis instance."""

    def __init__(self, client: redis.Redis) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> RedisStore:
        """Build a store from a Redis connection URL."""
        return cls(redis.from_url(url, decode_responses=True))

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._redis.set(key, value, ex=int(ttl_seconds))
        logger.debug("SET %s (TTL: %ss)", key, ttl_seconds)

    async def get(self, key: str) -> str | None:
        value = await self._redis.get(key)
        logger.debug("GET %s -> %s", key, "hit" if value is not None else "miss")
        return value

    async def delete(self, key: str) -> int:
        result = int(await self._redis.delete(key))
        logger.debug("DEL %s -> %d", key, result)
        return result

    async def ttl(self, key: str) -> int:
        remaining = int(await self._redis.ttl(key))
        logger.debug("TTL %s -> %ds", key, remaining)
        return remaining

    async def incr(self, key: str) -> int:
        count = int(await self._redis.incr(key))
        logger.debug("INCR %s -> %d", key, count)
        return count

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        result = bool(await self._redis.expire(key, int(ttl_seconds)))
        logger.debug("EXPIRE %s -> %ss => %s", key, ttl_seconds, result)
        return result

    async def close(self) -> None:
        await self._redis.aclose()


class InMemoryStore:
    """Process-local store with Redis-like TTL behaviour.

    Entries are expired lazily on access using a monotonic clock. Not shared
    between processes, so only suitable for tests and single-process dev runs.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: dict[str, tuple[str, float | None]] = {}

    def _live_entry(self, key: str) -> tuple[str, float | None] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        expires_at = entry[1]
        if expires_at is not None and expires_at <= self._clock():
            self._data.pop(key, None)
            return None
        return entry

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._data[key] = (str(value), self._clock() + ttl_seconds)
        logger.debug("SET %s (TTL: %ss)", key, ttl_seconds)

    async def get(self, key: str) -> str | None:
        entry = self._live_entry(key)
        logger.debug("GET %s -> %s", key, "hit" if entry is not None else "miss")
        return entry[0] if entry is not None else None

    async def delete(self, key: str) -> int:
        removed = 1 if self._live_entry(key) is not None else 0
        self._data.pop(key, None)
        logger.debug("DEL %s -> %d", key, removed)
        return removed

    async def ttl(self, key: str) -> int:
        entry = self._live_entry(key)
        if entry is None:
            remaining = TTL_MISSING
        elif entry[1] is None:
            remaining = TTL_PERSISTENT
        else:
            remaining = round(entry[1] - self._clock())
        logger.debug("TTL %s -> %ds", key, remaining)
        return remaining

    async def incr(self, key: str) -> int:
        entry = self._live_entry(key)
        if entry is None:
            count, expires_at = 1, None
        else:
            try:
                count = int(entry[0]) + 1
            except ValueError as err:
                raise ValueError(f"value at {key!r} is not an integer") from err
            expires_at = entry[1]
        self._data[key] = (str(count), expires_at)
        logger.debug("INCR %s -> %d", key, count)
        return count

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        entry = self._live_entry(key)
        if entry is None:
            result = False
        elif ttl_seconds <= 0:
            self._data.pop(key, None)
            result = True
        else:
            self._data[key] = (entry[0], self._clock() + ttl_seconds)
            result = True
        logger.debug("EXPIRE %s -> %ss => %s", key, ttl_seconds, result)
        return result

    async def close(self) -> None:
        self._data.clear()


def create_store(config: Settings | None = None) -> KeyValueStore:
    """Build the store backend selected by configuration."""
    config = config or settings
    if config.store_backend == "memory":
        return InMemoryStore()
    return RedisStore.from_url(config.redis_url)


class _StoreSingleton:
    """Singleton wrapper for the configured store."""

    _instance: KeyValueStore | None = None

    @classmethod
    def get_instance(cls) -> KeyValueStore:
        """Get or create the singleton store instance."""
        if cls._instance is None:
            cls._instance = create_store()
        return cls._instance

    @classmethod
    async def reset(cls) -> None:
        """Close and forget the current instance."""
        if cls._instance is not None:
            await cls._instance.close()
            cls._instance = None


def get_store() -> KeyValueStore:
    """Return a singleton key-value store instance."""
    return _StoreSingleton.get_instance()


async def close_store() -> None:
    """Release store connections; a later `get_store` reconnects."""
    await _StoreSingleton.reset()
