"""Per-address cooldown between one-time code requests."""

from __future__ import annotations

from typing import Final

from otc_stage.services.store import KeyValueStore

DEFAULT_WINDOW_SECONDS: Final[int] = 60


def rate_limit_key(address: str) -> str:
    return f"otp:rate-limit:{address}"


class RateLimiter:
    """Cooldown marker stored as a TTL-bearing key; presence means limited."""

    def __init__(self, store: KeyValueStore, window_seconds: int = DEFAULT_WINDOW_SECONDS) -> None:
        self._store = store
        self.window_seconds = window_seconds

    async def is_limited(self, address: str) -> bool:
        """Return True while a cooldown marker exists for the address."""
        return await self._store.get(rate_limit_key(address)) is not None

    async def mark_limited(self, address: str) -> None:
        """Start the cooldown window for the address."""
        await self._store.set(rate_limit_key(address), "1", self.window_seconds)
