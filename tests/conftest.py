# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

os.environ.setdefault("OTP_STORE_BACKEND", "memory")
os.environ.setdefault("EMAIL_MODE", "console")
os.environ.setdefault("OTP_HASH_ROUNDS", "4")

from otc_stage.api.v1 import dependencies as api_dependencies
from otc_stage.core.security import CredentialHasher
from otc_stage.main import app as fastapi_app
from otc_stage.services.delivery import DeliveryRetrier, linear_backoff
from otc_stage.services.notifier import NotifierError
from otc_stage.services.otp import OtpConfig, OtpService
from otc_stage.services.store import InMemoryStore

TEST_HASH_ROUNDS = 4


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingNotifier:
    """Notifier double that fails the first `failures` sends and records the rest."""

    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.calls = 0
        self.sent: list[tuple[str, str]] = []

    async def send_code(self, destination: str, code: str) -> None:
        self.calls += 1
        if self.calls <= self.failures:
            raise NotifierError(f"simulated failure #{self.calls}")
        self.sent.append((destination, code))

    async def close(self) -> None:
        return None

    def last_code(self, destination: str) -> str:
        for sent_to, code in reversed(self.sent):
            if sent_to == destination:
                return code
        raise AssertionError(f"no code sent to {destination}")


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> InMemoryStore:
    return InMemoryStore(clock=clock)


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def hasher() -> CredentialHasher:
    return CredentialHasher(rounds=TEST_HASH_ROUNDS)


@pytest.fixture()
def otp_config() -> OtpConfig:
    return OtpConfig()


@pytest.fixture()
def otp_service(
    store: InMemoryStore,
    notifier: RecordingNotifier,
    hasher: CredentialHasher,
    sleeper: SleepRecorder,
    otp_config: OtpConfig,
) -> OtpService:
    retrier = DeliveryRetrier(
        notifier,
        attempts=otp_config.delivery_attempts,
        backoff=linear_backoff(otp_config.backoff_base_seconds, otp_config.backoff_cap_seconds),
        sleep=sleeper,
    )
    return OtpService(store, notifier, hasher=hasher, config=otp_config, retrier=retrier)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_otp_service(app: FastAPI, otp_service: OtpService) -> Iterator[None]:
    app.dependency_overrides[api_dependencies.get_otp_service_dep] = lambda: otp_service
    try:
        yield
    finally:
        app.dependency_overrides.pop(api_dependencies.get_otp_service_dep, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client
