# src/otc_stage/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .otp import SendOtpRequest, SendOtpResponse, VerifyOtpRequest, VerifyOtpResponse

__all__ = [
    "SendOtpRequest", "SendOtpResponse",
    "VerifyOtpRequest", "VerifyOtpResponse",
]
