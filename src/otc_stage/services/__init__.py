# src/otc_stage/services/__init__.py
"""Business logic services for the OTC Stage application."""

from .delivery import DeliveryRetrier, FatalDeliveryError
from .notifier import NotifierError
from .otp import OtpErrorCode, OtpResult, OtpService
from .rate_limit import RateLimiter
from .store import InMemoryStore, RedisStore

__all__ = [
    "DeliveryRetrier",
    "FatalDeliveryError",
    "InMemoryStore",
    "NotifierError",
    "OtpErrorCode",
    "OtpResult",
    "OtpService",
    "RateLimiter",
    "RedisStore",
]
