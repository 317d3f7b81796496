# src/ictdesk/api/v1/endpoints/batches.py
"""Batch shipment endpoints."""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import APIRouter, status

from ictdesk.models import Batch, BatchDevice
from ictdesk.schemas.batch import (
    BatchCreate,
    BatchCreated,
    BatchDeviceResponse,
    BatchResponse,
    BatchStatusUpdate,
    BatchUpdate,
    DevicesUpdate,
    DevicesUpdated,
    NextBatchNumber,
)
from ictdesk.services.batches import DeviceLine, DeviceSerialChange

from ..dependencies import RegistrarDep, SessionDep

router = APIRouter(prefix="/batch", tags=["batches"])


@router.post("", response_model=BatchCreated, status_code=status.HTTP_201_CREATED)
def create_batch(
    payload: BatchCreate,
    db: SessionDep,
    registrar: RegistrarDep,
) -> BatchCreated:
    """Register a batch with all of its devices in one transaction.

    Responds 409 with ``{"error", "duplicates"}`` when a serial is already
    recorded or repeats within the payload.
    """
    created = registrar.create_batch(
        db,
        batch_number=payload.batch_number,
        send_date=payload.send_date,
        school_code=payload.school_code,
        school_name=payload.school_name,
        devices=[
            DeviceLine(device_type=device.device_type, serial_number=device.serial_number)
            for device in payload.devices
        ],
    )
    return BatchCreated(batch_id=created.batch_id, status=created.status)


@router.get("", response_model=list[BatchResponse])
def list_batches(
    db: SessionDep,
    registrar: RegistrarDep,
    school_code: str | None = None,
    status: str | None = None,
) -> Sequence[Batch]:
    """List batches, newest send date first."""
    return registrar.list_batches(db, school_code=school_code, status=status)


# Declared before /{batch_id} so the literal path wins.
@router.get("/next-number", response_model=NextBatchNumber)
def next_batch_number(db: SessionDep, registrar: RegistrarDep) -> NextBatchNumber:
    """Suggest a batch number for today; nothing is reserved."""
    return NextBatchNumber(next_batch_number=registrar.suggest_batch_number(db))


@router.get("/{batch_id}", response_model=BatchResponse)
def get_batch(batch_id: int, db: SessionDep, registrar: RegistrarDep) -> Batch:
    return registrar.get_batch(db, batch_id)


@router.get("/{batch_id}/devices", response_model=list[BatchDeviceResponse])
def list_batch_devices(
    batch_id: int,
    db: SessionDep,
    registrar: RegistrarDep,
) -> Sequence[BatchDevice]:
    return registrar.list_devices(db, batch_id)


@router.put("/{batch_id}", response_model=BatchResponse)
def update_batch(
    batch_id: int,
    payload: BatchUpdate,
    db: SessionDep,
    registrar: RegistrarDep,
) -> Batch:
    """Edit the batch number and send date."""
    return registrar.update_batch(
        db, batch_id, batch_number=payload.batch_number, send_date=payload.send_date
    )


@router.put("/{batch_id}/status", response_model=BatchResponse)
def update_batch_status(
    batch_id: int,
    payload: BatchStatusUpdate,
    db: SessionDep,
    registrar: RegistrarDep,
) -> Batch:
    """Receive or cancel a pending batch."""
    return registrar.set_status(db, batch_id, payload.status)


@router.put("/{batch_id}/devices", response_model=DevicesUpdated)
def update_batch_devices(
    batch_id: int,
    payload: DevicesUpdate,
    db: SessionDep,
    registrar: RegistrarDep,
) -> DevicesUpdated:
    """Replace device serials of a batch; all or nothing."""
    count = registrar.update_devices(
        db,
        batch_id,
        [
            DeviceSerialChange(device_id=device.batch_devices_id, device_number=device.device_number)
            for device in payload.devices
        ],
    )
    return DevicesUpdated(message="Devices updated successfully", count=count)
