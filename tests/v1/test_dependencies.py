# mypy: ignore-errors
"""Tests for production wiring of the OTP dependency."""

from __future__ import annotations

import pytest

from otc_stage.api.v1.dependencies import get_otp_service_dep
from otc_stage.services.notifier import ConsoleNotifier, close_notifier, get_notifier
from otc_stage.services.otp import OtpService
from otc_stage.services.store import InMemoryStore, close_store, get_store


@pytest.mark.asyncio
async def test_dependency_builds_service_from_settings() -> None:
    try:
        service = get_otp_service_dep()
        assert isinstance(service, OtpService)
        assert service.config.challenge_ttl_seconds == 300
        assert service.rate_limiter.window_seconds == 60
        # Test environment selects the in-process backends.
        assert isinstance(get_store(), InMemoryStore)
        assert isinstance(get_notifier(), ConsoleNotifier)
        assert get_store() is get_store()
    finally:
        await close_notifier()
        await close_store()


@pytest.mark.asyncio
async def test_issue_through_default_wiring() -> None:
    try:
        service = get_otp_service_dep()
        result = await service.issue("wired@example.com")
        assert result.ok is True
        assert await get_store().get("otp:wired@example.com") is not None
    finally:
        await close_notifier()
        await close_store()
