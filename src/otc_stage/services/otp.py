"""One-time code lifecycle: issuance, delivery, verification.

`OtpService` composes the generator, hasher, rate limiter and delivery
retrier over a shared key-value store. It keeps no per-request state; a
challenge exists for an address exactly while its store entry does.

Concurrent requests for the same address are not serialized. Two `issue`
calls can both pass the rate-limit check, and two `verify` calls can both
read the digest before either deletes it, so one code may be accepted
twice under that race. Strict single-use would need an atomic
get-and-delete on the store side.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from otc_stage.core.security import CredentialHasher
from otc_stage.core.settings import Settings, settings
from otc_stage.services.delivery import (
    DeliveryRetrier,
    FatalDeliveryError,
    linear_backoff,
)
from otc_stage.services.notifier import Notifier, get_notifier
from otc_stage.services.rate_limit import RateLimiter
from otc_stage.services.store import KeyValueStore, get_store
from otc_stage.utils.otp_generator import DEFAULT_LENGTH, generate_otp

# Configure logger for this module
logger = logging.getLogger(__name__)

MSG_SENT = "OTP sent successfully"
MSG_VERIFIED = "OTP verified successfully"
MSG_RATE_LIMITED = "Please wait before requesting another OTP."
MSG_DELIVERY_FAILED = "Failed to send OTP after multiple attempts."
MSG_NOT_FOUND = "OTP expired or not found."
MSG_MISMATCH = "Invalid OTP."


def challenge_key(address: str) -> str:
    return f"otp:{address}"


class OtpErrorCode(str, Enum):
    """Failure tags returned by the lifecycle operations."""

    RATE_LIMITED = "rate_limited"
    DELIVERY_FAILED = "delivery_failed"
    CHALLENGE_NOT_FOUND = "challenge_not_found"
    CHALLENGE_MISMATCH = "challenge_mismatch"


@dataclass(frozen=True)
class OtpResult:
    """Outcome of an issue or verify call."""

    ok: bool
    message: str
    error: OtpErrorCode | None = None
    valid: bool = False

    @classmethod
    def success(cls, message: str, *, valid: bool = False) -> OtpResult:
        return cls(ok=True, message=message, valid=valid)

    @classmethod
    def failure(cls, error: OtpErrorCode, message: str) -> OtpResult:
        return cls(ok=False, message=message, error=error)


@dataclass(frozen=True)
class OtpConfig:
    """Immutable configuration for the OTP lifecycle."""

    challenge_ttl_seconds: int = 300
    rate_limit_seconds: int = 60
    delivery_attempts: int = 3
    backoff_base_seconds: float = 1.0
    backoff_cap_seconds: float = 5.0


def load_otp_config(config: Settings | None = None) -> OtpConfig:
    """Build configuration object from global settings."""
    config = config or settings
    return OtpConfig(
        challenge_ttl_seconds=config.otp_expiry_seconds,
        rate_limit_seconds=config.otp_rate_limit_seconds,
        delivery_attempts=config.otp_delivery_attempts,
        backoff_base_seconds=config.otp_backoff_base_seconds,
        backoff_cap_seconds=config.otp_backoff_cap_seconds,
    )


class OtpService:
    """Coordinates issuing and verifying one-time codes."""

    def __init__(
        self,
        store: KeyValueStore,
        notifier: Notifier,
        *,
        hasher: CredentialHasher | None = None,
        generator: Callable[[int], str] = generate_otp,
        config: OtpConfig | None = None,
        retrier: DeliveryRetrier | None = None,
    ) -> None:
        self.config = config or OtpConfig()
        self._store = store
        self._hasher = hasher or CredentialHasher()
        self._generator = generator
        self._rate_limiter = RateLimiter(store, self.config.rate_limit_seconds)
        self._retrier = retrier or DeliveryRetrier(
            notifier,
            attempts=self.config.delivery_attempts,
            backoff=linear_backoff(
                self.config.backoff_base_seconds,
                self.config.backoff_cap_seconds,
            ),
        )

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    async def issue(self, address: str) -> OtpResult:
        """Generate, deliver and persist a new code for `address`.

        Nothing is written to the store unless delivery succeeded, so a failed
        send neither creates a challenge nor starts the cooldown.
        """
        if await self._rate_limiter.is_limited(address):
            logger.info("OTP request for %s rejected by cooldown", address)
            return OtpResult.failure(OtpErrorCode.RATE_LIMITED, MSG_RATE_LIMITED)

        code = self._generator(DEFAULT_LENGTH)
        digest = await self._hasher.hash_async(code)

        try:
            await self._retrier.deliver_with_retry(address, code)
        except FatalDeliveryError:
            return OtpResult.failure(OtpErrorCode.DELIVERY_FAILED, MSG_DELIVERY_FAILED)

        # Overwrites any earlier challenge, invalidating its code.
        await self._store.set(challenge_key(address), digest, self.config.challenge_ttl_seconds)
        await self._rate_limiter.mark_limited(address)

        logger.info("OTP sent successfully to %s", address)
        return OtpResult.success(MSG_SENT)

    async def verify(self, address: str, submitted_code: str) -> OtpResult:
        """Check `submitted_code` and consume the challenge on a match.

        A wrong code leaves the challenge in place so the user can retry until
        it expires. Missing, expired and already-used challenges all report
        CHALLENGE_NOT_FOUND.
        """
        key = challenge_key(address)
        digest = await self._store.get(key)
        if digest is None:
            return OtpResult.failure(OtpErrorCode.CHALLENGE_NOT_FOUND, MSG_NOT_FOUND)

        if not await self._hasher.compare_async(submitted_code, digest):
            logger.info("OTP mismatch for %s", address)
            return OtpResult.failure(OtpErrorCode.CHALLENGE_MISMATCH, MSG_MISMATCH)

        await self._store.delete(key)
        logger.info("OTP verified for %s", address)
        return OtpResult.success(MSG_VERIFIED, valid=True)


def get_otp_service() -> OtpService:
    """Return an OTP service wired to the shared store and notifier."""
    return OtpService(
        get_store(),
        get_notifier(),
        hasher=CredentialHasher(rounds=settings.otp_hash_rounds),
        config=load_otp_config(),
    )
