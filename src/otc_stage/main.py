# src/otc_stage/main.py
"""Main entry point for the OTC Stage application."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from otc_stage.api.v1 import otp_router
from otc_stage.core.settings import settings
from otc_stage.services.notifier import close_notifier
from otc_stage.services.store import close_store

API_DESCRIPTION = "API for sending and verifying OTPs using email + Redis"

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description=API_DESCRIPTION,
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(otp_router, prefix="/api/v1")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await close_notifier()
    await close_store()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": API_DESCRIPTION,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("otc_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
