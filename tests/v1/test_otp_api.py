# mypy: ignore-errors
"""Tests for the /otp endpoints."""

from __future__ import annotations

from typing import Any

import pytest

from otc_stage.services.otp import OtpConfig

ADDRESS = "user@example.com"


def _send(client: Any, email: str = ADDRESS):
    return client.post("/api/v1/otp/send", json={"email": email})


def _verify(client: Any, otp: str, email: str = ADDRESS):
    return client.post("/api/v1/otp/verify", json={"email": email, "otp": otp})


def test_send_then_verify(client: Any, notifier) -> None:
    r = _send(client)
    assert r.status_code == 200
    assert r.json() == {"message": "OTP sent successfully"}

    code = notifier.last_code(ADDRESS)
    assert code not in r.text

    r = _verify(client, code)
    assert r.status_code == 200
    assert r.json() == {"valid": True, "message": "OTP verified successfully"}

    r = _verify(client, code)
    assert r.status_code == 400
    assert r.json()["detail"] == "OTP expired or not found."


def test_send_is_rate_limited(client: Any) -> None:
    assert _send(client).status_code == 200

    r = _send(client)
    assert r.status_code == 429
    assert r.json()["detail"] == "Please wait before requesting another OTP."


def test_send_reports_delivery_failure(client: Any, notifier, store) -> None:
    notifier.failures = 3

    r = _send(client)

    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to send OTP after multiple attempts."
    assert notifier.calls == 3


def test_verify_unknown_address(client: Any) -> None:
    r = _verify(client, "000000")
    assert r.status_code == 400
    assert r.json()["detail"] == "OTP expired or not found."


def test_verify_wrong_code(client: Any, notifier) -> None:
    _send(client)
    code = notifier.last_code(ADDRESS)
    wrong = "000000" if code != "000000" else "111111"

    r = _verify(client, wrong)
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid OTP."

    assert _verify(client, code).status_code == 200


def test_send_rejects_invalid_email(client: Any, notifier) -> None:
    r = _send(client, email="not-an-email")
    assert r.status_code == 422
    assert notifier.calls == 0


def test_verify_rejects_wrong_length_code(client: Any) -> None:
    assert _verify(client, "12345").status_code == 422
    assert _verify(client, "1234567").status_code == 422


def test_openapi_lists_otp_routes(client: Any) -> None:
    paths = client.get("/openapi.json").json()["paths"]
    assert "/api/v1/otp/send" in paths
    assert "/api/v1/otp/verify" in paths


@pytest.mark.parametrize(
    "otp_config",
    [OtpConfig(challenge_ttl_seconds=120, rate_limit_seconds=30, delivery_attempts=1)],
)
def test_issued_code_passes_verify_schema(client: Any, notifier) -> None:
    assert _send(client).status_code == 200

    code = notifier.last_code(ADDRESS)
    assert len(code) == 6 and code.isdigit()

    r = _verify(client, code)
    assert r.status_code == 200
    assert r.json()["valid"] is True
