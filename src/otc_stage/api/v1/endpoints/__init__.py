# src/otc_stage/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .otp import router as otp_router

__all__ = [
    "otp_router",
]
