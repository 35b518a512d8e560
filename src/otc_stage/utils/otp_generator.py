# src/otc_stage/utils/otp_generator.py
"""Numeric one-time code generation."""

from __future__ import annotations

import secrets
from typing import Final

MIN_LENGTH: Final[int] = 1
MAX_LENGTH: Final[int] = 6
DEFAULT_LENGTH: Final[int] = 6
DIGITS: Final[str] = "0123456789"


class InvalidParameterError(ValueError):
    """Raised when the generator is called with an unsupported length."""


def generate_otp(length: int = DEFAULT_LENGTH) -> str:
    """Return a string of `length` random decimal digits.

    Every digit is drawn independently from the operating system CSPRNG via
    `secrets`; leading zeros are kept.

    Args:
        length: Number of digits, between 1 and 6 inclusive.

    Returns:
        The generated code.

    Raises:
        InvalidParameterError: If `length` is outside [1, 6].
    """
    if isinstance(length, bool) or not isinstance(length, int):
        raise InvalidParameterError(f"OTP length must be an integer, got {length!r}")
    if length < MIN_LENGTH or length > MAX_LENGTH:
        raise InvalidParameterError(
            f"OTP length must be between {MIN_LENGTH} and {MAX_LENGTH}",
        )
    return "".join(secrets.choice(DIGITS) for _ in range(length))
