# mypy: ignore-errors
"""Tests for the per-address cooldown."""

from __future__ import annotations

import pytest

from otc_stage.services.rate_limit import RateLimiter, rate_limit_key


@pytest.mark.asyncio
async def test_not_limited_without_marker(store) -> None:
    limiter = RateLimiter(store)
    assert await limiter.is_limited("a@b.com") is False


@pytest.mark.asyncio
async def test_marker_limits_for_window(store, clock) -> None:
    limiter = RateLimiter(store)
    await limiter.mark_limited("a@b.com")

    assert await limiter.is_limited("a@b.com") is True
    assert await store.ttl(rate_limit_key("a@b.com")) == 60

    clock.advance(59)
    assert await limiter.is_limited("a@b.com") is True
    clock.advance(1)
    assert await limiter.is_limited("a@b.com") is False


@pytest.mark.asyncio
async def test_addresses_are_independent(store) -> None:
    limiter = RateLimiter(store)
    await limiter.mark_limited("a@b.com")
    assert await limiter.is_limited("c@d.com") is False


@pytest.mark.asyncio
async def test_custom_window(store) -> None:
    limiter = RateLimiter(store, window_seconds=15)
    await limiter.mark_limited("a@b.com")
    assert await store.ttl("otp:rate-limit:a@b.com") == 15
