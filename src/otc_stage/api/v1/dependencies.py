"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends

from otc_stage.services.otp import OtpService, get_otp_service


def get_otp_service_dep() -> OtpService:
    """Get OtpService dependency for dependency injection."""
    return get_otp_service()


# Type alias for the OTP lifecycle dependency
OtpServiceDep = Annotated[OtpService, Depends(get_otp_service_dep)]
