# src/ictdesk/api/v1/endpoints/devices.py
"""Device type catalog endpoints."""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import APIRouter, status

from ictdesk.models import DeviceType
from ictdesk.schemas.batch import DeviceTypeCreate, DeviceTypeResponse
from ictdesk.schemas.common import MessageResponse
from ictdesk.services import device_catalog

from ..dependencies import SessionDep

router = APIRouter(prefix="/devices", tags=["devices"])


@router.get("", response_model=list[DeviceTypeResponse])
def list_devices(db: SessionDep) -> Sequence[DeviceType]:
    """List the device types offered when building a batch."""
    return device_catalog.list_device_types(db)


@router.post("", response_model=DeviceTypeResponse, status_code=status.HTTP_201_CREATED)
def add_device(payload: DeviceTypeCreate, db: SessionDep) -> DeviceType:
    return device_catalog.add_device_type(db, payload.device_name)


@router.delete("/{device_name}", response_model=MessageResponse)
def delete_device(device_name: str, db: SessionDep) -> MessageResponse:
    device_catalog.delete_device_type(db, device_name)
    return MessageResponse(message="Device deleted successfully")
