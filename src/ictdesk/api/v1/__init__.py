# src/ictdesk/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    batches_router,
    designations_router,
    devices_router,
    system_router,
    tickets_router,
)

__all__ = [
    "batches_router",
    "designations_router",
    "devices_router",
    "system_router",
    "tickets_router",
]
