"""CRUD-style helpers for the device type catalog."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ictdesk.core.errors import DuplicateError, NotFoundError, ValidationError
from ictdesk.db.transaction import transaction
from ictdesk.models import DeviceType

__all__ = [
    "add_device_type",
    "delete_device_type",
    "list_device_types",
]

logger = logging.getLogger(__name__)


def list_device_types(db: Session) -> Sequence[DeviceType]:
    """Return catalog entries sorted by name."""
    return db.execute(select(DeviceType).order_by(DeviceType.device_name)).scalars().all()


def _find(db: Session, device_name: str) -> DeviceType | None:
    return db.execute(
        select(DeviceType).where(DeviceType.device_name == device_name)
    ).scalar_one_or_none()


def add_device_type(db: Session, device_name: str) -> DeviceType:
    """Add a device name to the catalog."""
    device_name = (device_name or "").strip()
    if not device_name:
        raise ValidationError("Device name is required")

    entry = DeviceType(device_name=device_name)
    with transaction(
        db,
        "add device",
        on_integrity_error=lambda _exc: DuplicateError("Device already exists"),
    ):
        if _find(db, device_name) is not None:
            raise DuplicateError("Device already exists")
        db.add(entry)
    db.refresh(entry)
    logger.info("Added device type %r", device_name)
    return entry


def delete_device_type(db: Session, device_name: str) -> None:
    """Remove a device name from the catalog."""
    with transaction(db, "delete device"):
        entry = _find(db, (device_name or "").strip())
        if entry is None:
            raise NotFoundError("Device not found")
        db.delete(entry)
    logger.info("Deleted device type %r", device_name)
