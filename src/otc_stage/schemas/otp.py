"""One-time code request/response schemas."""

from pydantic import BaseModel, EmailStr, Field


class SendOtpRequest(BaseModel):
    """Request to email a fresh one-time code."""

    email: EmailStr = Field(
        ...,
        description="Valid email address to receive the OTP",
        examples=["user@example.com"],
    )


class SendOtpResponse(BaseModel):
    """Acknowledgement that a code was sent."""

    message: str


class VerifyOtpRequest(BaseModel):
    """Request to check a previously emailed code."""

    email: EmailStr = Field(
        ...,
        description="Email associated with the OTP",
        examples=["user@example.com"],
    )
    otp: str = Field(
        ...,
        min_length=6,
        max_length=6,
        description="6-digit OTP code received on email",
        examples=["123456"],
    )


class VerifyOtpResponse(BaseModel):
    """Successful verification result."""

    valid: bool
    message: str
