"""Batch registration: shipments of devices to schools.

A batch and all of its device rows are written in one transaction. Device
serials are unique across every batch ever recorded; the check made before the
write only exists to fail fast with a readable list of offenders, the UNIQUE
constraint on ``batch_device.device_number`` is what actually guarantees it.
Both run inside the same ``transaction`` so a failing read surfaces as a
``PersistenceError`` like a failing write does.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ictdesk.core.errors import (
    DuplicateSerialError,
    NotFoundError,
    StateTransitionError,
    ValidationError,
)
from ictdesk.db.time import local_today
from ictdesk.db.transaction import transaction
from ictdesk.models import Batch, BatchDevice
from ictdesk.models.batch import (
    BATCH_STATUS_CANCELLED,
    BATCH_STATUS_DELIVERED,
    BATCH_STATUS_PENDING,
    BATCH_STATUSES,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceLine:
    """Device type and serial of a device being registered."""

    device_type: str
    serial_number: str


@dataclass(frozen=True)
class DeviceSerialChange:
    """New serial for an existing device row."""

    device_id: int
    device_number: str


@dataclass(frozen=True)
class RegisteredBatch:
    """Outcome of a successful batch registration."""

    batch_id: int
    status: str


class BatchRegistrar:
    """Create, edit and move batches through their lifecycle."""

    def __init__(self, clock: Callable[[], date] = local_today) -> None:
        self.clock = clock

    # --- Registration ---------------------------------------------------------------
    def create_batch(
        self,
        db: Session,
        *,
        batch_number: str,
        send_date: date,
        school_code: str,
        devices: Sequence[DeviceLine],
        school_name: str = "",
    ) -> RegisteredBatch:
        """Register a batch and every one of its devices, or nothing at all.

        Args:
            db: Request-scoped session.
            batch_number: Sender supplied batch number.
            send_date: Day the batch left; decides the initial status.
            school_code: Receiving school.
            devices: Non-empty list of devices in the batch.
            school_name: Display name of the receiving school.

        Returns:
            The new batch id and its derived status.

        Raises:
            ValidationError: A required field is missing.
            DuplicateSerialError: A serial repeats within ``devices`` or is
                already recorded against any batch.
            PersistenceError: The transaction failed; nothing was committed.
        """
        lines = self._validate_new_batch(batch_number, send_date, school_code, devices)
        serials = [line.serial_number for line in lines]

        status, received_date = self.derive_status(send_date)
        batch = Batch(
            batch_number=batch_number.strip(),
            school_code=school_code.strip(),
            school_name=(school_name or "").strip(),
            send_date=send_date,
            status=status,
            received_date=received_date,
            devices=[
                BatchDevice(device_type=line.device_type, device_number=line.serial_number)
                for line in lines
            ],
        )

        with transaction(
            db,
            "create batch",
            on_integrity_error=lambda _exc: self._serial_conflict(db, serials),
        ):
            duplicates = self.find_duplicate_serials(db, serials)
            if duplicates:
                logger.info(
                    "Rejected batch %s: duplicate serials %s", batch_number, duplicates
                )
                raise DuplicateSerialError(duplicates)
            db.add(batch)
            db.flush()
            batch_id = batch.id

        logger.info(
            "Registered batch %s (id=%d) with %d devices as %s",
            batch_number,
            batch_id,
            len(lines),
            status,
        )
        return RegisteredBatch(batch_id=batch_id, status=status)

    def derive_status(self, send_date: date) -> tuple[str, date | None]:
        """Return the initial status and received date for a send date.

        Batches sent before today are considered delivered on their send date.
        """
        if send_date < self.clock():
            return BATCH_STATUS_DELIVERED, send_date
        return BATCH_STATUS_PENDING, None

    def find_duplicate_serials(
        self,
        db: Session,
        serials: Sequence[str],
        owner_ids: Sequence[int | None] | None = None,
    ) -> list[str]:
        """Return serials that repeat in ``serials`` or belong to another device.

        Args:
            db: Session to query.
            serials: Candidate serials.
            owner_ids: Device id each serial is meant for, aligned with
                ``serials``; ``None`` for devices not yet stored. A serial
                already held by its own device is not a duplicate.
        """
        if not serials:
            return []
        owners = list(owner_ids) if owner_ids is not None else [None] * len(serials)
        duplicates = {serial for serial, count in Counter(serials).items() if count > 1}
        claimed = dict(zip(serials, owners))
        rows = db.execute(
            select(BatchDevice.id, BatchDevice.device_number).where(
                BatchDevice.device_number.in_(list(claimed))
            )
        ).all()
        duplicates.update(number for device_id, number in rows if device_id != claimed[number])
        return sorted(duplicates)

    def _serial_conflict(
        self,
        db: Session,
        serials: Sequence[str],
        owner_ids: Sequence[int | None] | None = None,
    ) -> DuplicateSerialError:
        # A concurrent writer won the race past the pre-check.
        found = self.find_duplicate_serials(db, serials, owner_ids)
        return DuplicateSerialError(found or serials)

    @staticmethod
    def _validate_new_batch(
        batch_number: str,
        send_date: date | None,
        school_code: str,
        devices: Sequence[DeviceLine],
    ) -> list[DeviceLine]:
        if not (batch_number or "").strip():
            raise ValidationError("Batch number is required")
        if send_date is None:
            raise ValidationError("Send date is required")
        if not (school_code or "").strip():
            raise ValidationError("School is required")
        if not devices:
            raise ValidationError("At least one device is required")

        lines = [
            DeviceLine(
                device_type=(device.device_type or "").strip(),
                serial_number=(device.serial_number or "").strip(),
            )
            for device in devices
        ]
        invalid = [
            index for index, line in enumerate(lines)
            if not line.device_type or not line.serial_number
        ]
        if invalid:
            raise ValidationError("Some devices are missing required fields", invalid=invalid)
        return lines

    # --- Edits ----------------------------------------------------------------------
    def update_batch(
        self,
        db: Session,
        batch_id: int,
        *,
        batch_number: str,
        send_date: date | None,
    ) -> Batch:
        """Change the batch number and send date; the status is left alone."""
        if not (batch_number or "").strip() or send_date is None:
            raise ValidationError("All fields are required")
        with transaction(db, "update batch"):
            batch = self.get_batch(db, batch_id)
            batch.batch_number = batch_number.strip()
            batch.send_date = send_date
        logger.info("Updated batch %d header", batch_id)
        return batch

    def update_devices(
        self,
        db: Session,
        batch_id: int,
        changes: Sequence[DeviceSerialChange],
    ) -> int:
        """Replace the serials of several devices of one batch atomically.

        Every device id must belong to ``batch_id``. If any single update
        touches no row the whole change set is rolled back.

        Returns:
            Number of devices updated.
        """
        if not changes:
            raise ValidationError("No devices provided for update")
        invalid = [
            index for index, change in enumerate(changes)
            if not change.device_id or not (change.device_number or "").strip()
        ]
        if invalid:
            raise ValidationError("Some devices are missing required fields", invalid=invalid)

        device_ids = [change.device_id for change in changes]
        repeated = sorted(i for i, count in Counter(device_ids).items() if count > 1)
        if repeated:
            raise ValidationError("Device ids must not repeat", repeated=repeated)

        serials = [change.device_number.strip() for change in changes]

        with transaction(
            db,
            "update devices",
            on_integrity_error=lambda _exc: self._serial_conflict(db, serials, device_ids),
        ):
            self.get_batch(db, batch_id)
            found = set(
                db.execute(
                    select(BatchDevice.id).where(
                        BatchDevice.id.in_(device_ids),
                        BatchDevice.batch_id == batch_id,
                    )
                ).scalars()
            )
            missing = [device_id for device_id in device_ids if device_id not in found]
            if missing:
                raise ValidationError("Some devices not found in batch", missing=missing)

            duplicates = self.find_duplicate_serials(db, serials, device_ids)
            if duplicates:
                raise DuplicateSerialError(duplicates)

            for device_id, serial in zip(device_ids, serials):
                result = db.execute(
                    update(BatchDevice)
                    .where(BatchDevice.id == device_id, BatchDevice.batch_id == batch_id)
                    .values(device_number=serial)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    raise NotFoundError(f"No rows updated for device {device_id}")

        logger.info("Updated %d devices of batch %d", len(changes), batch_id)
        return len(changes)

    # --- Lifecycle ------------------------------------------------------------------
    def set_status(self, db: Session, batch_id: int, status: str) -> Batch:
        """Apply a requested transition: ``Delivered`` or ``Cancelled``."""
        if status == BATCH_STATUS_DELIVERED:
            return self.receive_batch(db, batch_id)
        if status == BATCH_STATUS_CANCELLED:
            return self.cancel_batch(db, batch_id)
        current = self.get_batch(db, batch_id).status
        raise StateTransitionError(f"Batches cannot be moved to {status}", current=current)

    def receive_batch(self, db: Session, batch_id: int) -> Batch:
        """Mark a pending batch delivered as of today."""
        return self._transition(
            db, batch_id, BATCH_STATUS_DELIVERED, "received", received_date=self.clock()
        )

    def cancel_batch(self, db: Session, batch_id: int) -> Batch:
        """Cancel a pending batch as of today."""
        return self._transition(
            db, batch_id, BATCH_STATUS_CANCELLED, "cancelled", cancelled_date=self.clock()
        )

    def _transition(
        self,
        db: Session,
        batch_id: int,
        target: str,
        verb: str,
        **stamps: date,
    ) -> Batch:
        # Conditional update: only one of two racing transitions can match.
        with transaction(db, f"mark batch {verb}"):
            result = db.execute(
                update(Batch)
                .where(Batch.id == batch_id, Batch.status == BATCH_STATUS_PENDING)
                .values(status=target, **stamps)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                batch = db.get(Batch, batch_id)
                if batch is None:
                    raise NotFoundError("Batch not found")
                raise StateTransitionError(
                    f"Only pending batches can be {verb}", current=batch.status
                )
        logger.info("Batch %d %s", batch_id, verb)
        return self.get_batch(db, batch_id)

    # --- Reads ----------------------------------------------------------------------
    def get_batch(self, db: Session, batch_id: int) -> Batch:
        batch = db.get(Batch, batch_id, populate_existing=True)
        if batch is None:
            raise NotFoundError("Batch not found")
        return batch

    def list_batches(
        self,
        db: Session,
        *,
        school_code: str | None = None,
        status: str | None = None,
    ) -> Sequence[Batch]:
        """Return batches, newest send date first, optionally filtered."""
        stmt = select(Batch)
        if school_code:
            stmt = stmt.where(Batch.school_code == school_code)
        if status:
            stmt = stmt.where(Batch.status == _canonical_batch_status(status))
        stmt = stmt.order_by(Batch.send_date.desc(), Batch.id.desc())
        return db.execute(stmt).scalars().all()

    def list_devices(self, db: Session, batch_id: int) -> Sequence[BatchDevice]:
        self.get_batch(db, batch_id)
        return db.execute(
            select(BatchDevice)
            .where(BatchDevice.batch_id == batch_id)
            .order_by(BatchDevice.id)
        ).scalars().all()

    def suggest_batch_number(self, db: Session, on: date | None = None) -> str:
        """Suggest ``YYYYMMDD-NNNN`` following the highest number of the day.

        Only a hint for the entry form: nothing is reserved.
        """
        prefix = (on or self.clock()).strftime("%Y%m%d")
        numbers = db.execute(
            select(Batch.batch_number).where(Batch.batch_number.like(f"{prefix}-%"))
        ).scalars()
        highest = 0
        for number in numbers:
            suffix = number[len(prefix) + 1:]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return f"{prefix}-{highest + 1:04d}"


def _canonical_batch_status(value: str) -> str:
    wanted = value.strip().lower()
    if wanted == "received":
        wanted = BATCH_STATUS_DELIVERED.lower()
    for status in BATCH_STATUSES:
        if status.lower() == wanted:
            return status
    raise ValidationError(f"Unknown batch status: {value}")


def get_batch_registrar() -> BatchRegistrar:
    """Return a batch registrar instance."""
    return BatchRegistrar()
