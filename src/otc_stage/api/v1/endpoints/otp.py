# src/otc_stage/api/v1/endpoints/otp.py
"""One-time code endpoints for the OTC Stage API."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from otc_stage.api.v1.dependencies import OtpServiceDep
from otc_stage.schemas.otp import (
    SendOtpRequest,
    SendOtpResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from otc_stage.services.otp import OtpErrorCode, OtpResult

router = APIRouter(prefix="/otp", tags=["OTP"])

_ERROR_STATUS: dict[OtpErrorCode, int] = {
    OtpErrorCode.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    OtpErrorCode.DELIVERY_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    OtpErrorCode.CHALLENGE_NOT_FOUND: status.HTTP_400_BAD_REQUEST,
    OtpErrorCode.CHALLENGE_MISMATCH: status.HTTP_400_BAD_REQUEST,
}


def _raise_for_failure(result: OtpResult) -> None:
    """Translate a failed lifecycle result into an HTTP error."""
    if result.ok or result.error is None:
        return
    raise HTTPException(status_code=_ERROR_STATUS[result.error], detail=result.message)


@router.post("/send", response_model=SendOtpResponse)
async def send_otp(payload: SendOtpRequest, otp_service: OtpServiceDep) -> SendOtpResponse:
    """Email a fresh one-time code, replacing any outstanding one."""
    result = await otp_service.issue(payload.email)
    _raise_for_failure(result)
    return SendOtpResponse(message=result.message)


@router.post("/verify", response_model=VerifyOtpResponse)
async def verify_otp(payload: VerifyOtpRequest, otp_service: OtpServiceDep) -> VerifyOtpResponse:
    """Check a submitted code and consume it on success."""
    result = await otp_service.verify(payload.email, payload.otp)
    _raise_for_failure(result)
    return VerifyOtpResponse(valid=result.valid, message=result.message)
