"""Bounded retry with backoff around a notifier."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Final

from otc_stage.services.notifier import Notifier, NotifierError

# Configure logger for this module
logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS: Final[int] = 3
DEFAULT_BACKOFF_BASE: Final[float] = 1.0
DEFAULT_BACKOFF_CAP: Final[float] = 5.0

BackoffPolicy = Callable[[int], float]
SleepFn = Callable[[float], Awaitable[None]]


class FatalDeliveryError(RuntimeError):
    """Raised once every delivery attempt has failed.

    Attributes:
        attempts: Number of attempts made.
        failures: Error raised by each failed attempt, in order.
    """

    def __init__(self, message: str, *, attempts: int, failures: list[Exception]) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.failures = failures


def linear_backoff(
    base: float = DEFAULT_BACKOFF_BASE,
    cap: float = DEFAULT_BACKOFF_CAP,
) -> BackoffPolicy:
    """Return a policy waiting `base * n` seconds after the n-th failure, capped at `cap`."""

    def policy(attempt_index: int) -> float:
        return max(0.0, min(base * attempt_index, cap))

    return policy


class DeliveryRetrier:
    """Invokes a notifier up to `attempts` times, sleeping between failures.

    Only `NotifierError` is treated as transient. Anything else, including
    cancellation of the awaiting task, propagates immediately.
    """

    def __init__(
        self,
        notifier: Notifier,
        *,
        attempts: int = DEFAULT_ATTEMPTS,
        backoff: BackoffPolicy | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self._notifier = notifier
        self.attempts = attempts
        self._backoff = backoff or linear_backoff()
        self._sleep = sleep

    async def deliver_with_retry(self, address: str, code: str) -> None:
        """Deliver `code` to `address`, raising FatalDeliveryError on exhaustion."""
        failures: list[Exception] = []
        for attempt in range(1, self.attempts + 1):
            try:
                await self._notifier.send_code(address, code)
                return
            except NotifierError as exc:
                failures.append(exc)
                remaining = self.attempts - attempt
                logger.warning(
                    "Failed to send OTP to %s, attempts left: %d (%s)", address, remaining, exc
                )
                if remaining == 0:
                    break
                await self._sleep(self._backoff(attempt))

        logger.error("Giving up on OTP delivery to %s after %d attempts", address, self.attempts)
        raise FatalDeliveryError(
            "Failed to send OTP after multiple attempts.",
            attempts=self.attempts,
            failures=failures,
        )
