# src/ictdesk/main.py
"""Main entry point for the ICT desk application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware

from ictdesk.api.v1 import (
    batches_router,
    designations_router,
    devices_router,
    system_router,
    tickets_router,
)
from ictdesk.core.errors import install_error_handlers
from ictdesk.core.logging import configure_logging
from ictdesk.core.settings import settings

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=f"{settings.app_name} API",
    description="Ticket numbering and device batch registration",
    version=settings.app_version,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

install_error_handlers(app)

# Include API routers
app.include_router(tickets_router, prefix=settings.api_prefix)
app.include_router(batches_router, prefix=settings.api_prefix)
app.include_router(devices_router, prefix=settings.api_prefix)
app.include_router(designations_router, prefix=settings.api_prefix)
app.include_router(system_router, prefix=settings.api_prefix)


@app.on_event("startup")
async def on_startup() -> None:
    logger.info("%s %s starting", settings.app_name, settings.app_version)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": f"{settings.app_name} API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("ictdesk.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
