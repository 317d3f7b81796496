# src/ictdesk/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .batches import router as batches_router
from .designations import router as designations_router
from .devices import router as devices_router
from .system import router as system_router
from .tickets import router as tickets_router

__all__ = [
    "batches_router",
    "designations_router",
    "devices_router",
    "system_router",
    "tickets_router",
]
