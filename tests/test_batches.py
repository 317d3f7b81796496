# tests/test_batches.py
"""Tests for batch registration, editing and lifecycle transitions."""

from datetime import date, timedelta

import pytest
from sqlalchemy import event, false, func, select
from sqlalchemy.exc import DataError, OperationalError

from ictdesk.core.errors import (
    DuplicateSerialError,
    NotFoundError,
    PersistenceError,
    StateTransitionError,
    ValidationError,
)
from ictdesk.models import Batch, BatchDevice
from ictdesk.services.batches import BatchRegistrar, DeviceLine, DeviceSerialChange

from tests.conftest import next_serial

TODAY = date(2025, 3, 10)


@pytest.fixture()
def registrar() -> BatchRegistrar:
    return BatchRegistrar(clock=lambda: TODAY)


def _lines(*serials: str) -> list[DeviceLine]:
    return [DeviceLine(device_type="Laptop", serial_number=serial) for serial in serials]


def _register(db, registrar, *serials, send_date=TODAY, batch_number="20250310-0001"):
    return registrar.create_batch(
        db,
        batch_number=batch_number,
        send_date=send_date,
        school_code="300001",
        school_name="Test Elementary School",
        devices=_lines(*(serials or (next_serial(),))),
    )


def _count(db, model) -> int:
    return db.scalar(select(func.count()).select_from(model))


# --- Registration -------------------------------------------------------------------


def test_past_send_date_is_delivered_on_send_date(db_session, registrar) -> None:
    sent = TODAY - timedelta(days=1)
    created = _register(db_session, registrar, "SN-1", "SN-2", send_date=sent)

    batch = registrar.get_batch(db_session, created.batch_id)
    assert created.status == "Delivered"
    assert batch.status == "Delivered"
    assert batch.received_date == sent
    assert [d.device_number for d in batch.devices] == ["SN-1", "SN-2"]


@pytest.mark.parametrize("offset", [0, 1])
def test_today_or_future_send_date_is_pending(db_session, registrar, offset) -> None:
    created = _register(db_session, registrar, send_date=TODAY + timedelta(days=offset))

    batch = registrar.get_batch(db_session, created.batch_id)
    assert created.status == "Pending"
    assert batch.received_date is None


def test_serial_already_recorded_rejects_whole_batch(db_session, registrar, make_batch) -> None:
    make_batch("SN-A")

    with pytest.raises(DuplicateSerialError) as excinfo:
        _register(db_session, registrar, "SN-A", "SN-B")

    assert excinfo.value.duplicates == ["SN-A"]
    assert excinfo.value.status_code == 409
    assert _count(db_session, Batch) == 1
    assert _count(db_session, BatchDevice) == 1


def test_serial_recorded_against_cancelled_batch_still_conflicts(
    db_session, registrar, make_batch
) -> None:
    make_batch("SN-OLD", status="Cancelled")

    with pytest.raises(DuplicateSerialError) as excinfo:
        _register(db_session, registrar, "SN-OLD")
    assert excinfo.value.duplicates == ["SN-OLD"]


def test_serial_repeated_in_payload_is_rejected(db_session, registrar) -> None:
    with pytest.raises(DuplicateSerialError) as excinfo:
        _register(db_session, registrar, "SN-X", "SN-Y", "SN-X")

    assert excinfo.value.duplicates == ["SN-X"]
    assert _count(db_session, Batch) == 0


def test_failure_mid_batch_persists_nothing(db_session, registrar) -> None:
    inserted = []

    def fail_on_second_device(_mapper, _connection, target) -> None:
        inserted.append(target.device_number)
        if len(inserted) == 2:
            raise OperationalError("INSERT INTO batch_device", {}, Exception("simulated"))

    event.listen(BatchDevice, "before_insert", fail_on_second_device)
    try:
        with pytest.raises(PersistenceError):
            _register(db_session, registrar, "SN-1", "SN-2", "SN-3")
    finally:
        event.remove(BatchDevice, "before_insert", fail_on_second_device)

    assert _count(db_session, Batch) == 0
    assert _count(db_session, BatchDevice) == 0


def test_value_rejected_by_database_is_a_validation_error(db_session, registrar) -> None:
    def reject_value(_mapper, _connection, _target) -> None:
        raise DataError("INSERT INTO batch_device", {}, Exception("value too long"))

    event.listen(BatchDevice, "before_insert", reject_value)
    try:
        with pytest.raises(ValidationError, match="Invalid value"):
            _register(db_session, registrar, "SN-1")
    finally:
        event.remove(BatchDevice, "before_insert", reject_value)

    assert _count(db_session, Batch) == 0


def test_unique_constraint_catches_race_past_precheck(
    db_session, registrar, make_batch, mocker
) -> None:
    make_batch("SN-RACE")
    real_check = registrar.find_duplicate_serials
    calls = []

    def stale_then_real(db, serials, owner_ids=None):
        calls.append(list(serials))
        if len(calls) == 1:
            return []
        return real_check(db, serials, owner_ids)

    mocker.patch.object(registrar, "find_duplicate_serials", side_effect=stale_then_real)

    with pytest.raises(DuplicateSerialError) as excinfo:
        _register(db_session, registrar, "SN-NEW", "SN-RACE")

    assert excinfo.value.duplicates == ["SN-RACE"]
    assert len(calls) == 2
    assert _count(db_session, Batch) == 1
    assert db_session.scalar(
        select(func.count()).where(BatchDevice.device_number == "SN-NEW")
    ) == 0



def test_failed_serial_lookup_is_a_persistence_error(db_session, registrar, mocker) -> None:
    mocker.patch.object(
        db_session,
        "execute",
        side_effect=OperationalError("SELECT", {}, Exception("connection lost")),
    )
    with pytest.raises(PersistenceError, match="Failed to create batch") as excinfo:
        _register(db_session, registrar, "SN-1")
    assert excinfo.value.extra["retryable"] is True


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"batch_number": "  "}, "Batch number is required"),
        ({"send_date": None}, "Send date is required"),
        ({"school_code": ""}, "School is required"),
        ({"devices": []}, "At least one device is required"),
    ],
)
def test_missing_fields_are_rejected(db_session, registrar, overrides, message) -> None:
    kwargs = {
        "batch_number": "20250310-0001",
        "send_date": TODAY,
        "school_code": "300001",
        "devices": _lines("SN-1"),
    }
    kwargs.update(overrides)

    with pytest.raises(ValidationError, match=message):
        registrar.create_batch(db_session, **kwargs)
    assert _count(db_session, Batch) == 0


def test_devices_missing_fields_are_reported_by_position(db_session, registrar) -> None:
    devices = [
        DeviceLine(device_type="Laptop", serial_number="SN-1"),
        DeviceLine(device_type="", serial_number="SN-2"),
        DeviceLine(device_type="Tablet", serial_number="  "),
    ]
    with pytest.raises(ValidationError) as excinfo:
        registrar.create_batch(
            db_session,
            batch_number="20250310-0001",
            send_date=TODAY,
            school_code="300001",
            devices=devices,
        )
    assert excinfo.value.extra["invalid"] == [1, 2]


def test_find_duplicate_serials_ignores_own_device(db_session, registrar, make_batch) -> None:
    batch = make_batch("SN-OWN", "SN-OTHER")
    own, other = batch.devices

    assert registrar.find_duplicate_serials(db_session, ["SN-OWN"], [own.id]) == []
    assert registrar.find_duplicate_serials(db_session, ["SN-OTHER"], [own.id]) == ["SN-OTHER"]
    assert registrar.find_duplicate_serials(db_session, []) == []


# --- Edits --------------------------------------------------------------------------


def test_update_batch_header_keeps_status(db_session, registrar, make_batch) -> None:
    batch = make_batch()
    new_date = TODAY - timedelta(days=30)

    updated = registrar.update_batch(
        db_session, batch.id, batch_number=" 20250201-0003 ", send_date=new_date
    )

    assert updated.batch_number == "20250201-0003"
    assert updated.send_date == new_date
    assert updated.status == "Pending"


def test_update_batch_requires_all_fields(db_session, registrar, make_batch) -> None:
    batch = make_batch()
    with pytest.raises(ValidationError, match="All fields are required"):
        registrar.update_batch(db_session, batch.id, batch_number="", send_date=TODAY)
    with pytest.raises(NotFoundError):
        registrar.update_batch(db_session, 9999, batch_number="X", send_date=TODAY)


def test_update_devices_replaces_serials(db_session, registrar, make_batch) -> None:
    batch = make_batch("SN-1", "SN-2")
    first, second = batch.devices

    count = registrar.update_devices(
        db_session,
        batch.id,
        [
            DeviceSerialChange(device_id=first.id, device_number="SN-1"),
            DeviceSerialChange(device_id=second.id, device_number=" SN-2B "),
        ],
    )

    assert count == 2
    serials = [d.device_number for d in registrar.list_devices(db_session, batch.id)]
    assert serials == ["SN-1", "SN-2B"]


def test_update_devices_rejects_device_of_other_batch(
    db_session, registrar, make_batch
) -> None:
    mine = make_batch("SN-MINE")
    theirs = make_batch("SN-THEIRS")
    foreign_id = theirs.devices[0].id

    with pytest.raises(ValidationError) as excinfo:
        registrar.update_devices(
            db_session,
            mine.id,
            [
                DeviceSerialChange(device_id=mine.devices[0].id, device_number="SN-NEW"),
                DeviceSerialChange(device_id=foreign_id, device_number="SN-HIJACK"),
            ],
        )

    assert excinfo.value.extra["missing"] == [foreign_id]
    serials = db_session.scalars(select(BatchDevice.device_number).order_by(BatchDevice.id))
    assert list(serials) == ["SN-MINE", "SN-THEIRS"]


def test_update_devices_rejects_serial_held_elsewhere(
    db_session, registrar, make_batch
) -> None:
    mine = make_batch("SN-MINE")
    make_batch("SN-THEIRS")

    with pytest.raises(DuplicateSerialError) as excinfo:
        registrar.update_devices(
            db_session,
            mine.id,
            [DeviceSerialChange(device_id=mine.devices[0].id, device_number="SN-THEIRS")],
        )
    assert excinfo.value.duplicates == ["SN-THEIRS"]


def test_update_devices_rolls_back_when_a_row_is_not_updated(
    db_session, registrar, make_batch
) -> None:
    batch = make_batch("SN-1", "SN-2")
    first, second = batch.devices
    updates = []

    def lose_second_update(state) -> None:
        if state.is_update:
            updates.append(state)
            if len(updates) == 2:
                state.statement = state.statement.where(false())

    event.listen(db_session, "do_orm_execute", lose_second_update)
    try:
        with pytest.raises(NotFoundError, match=f"device {second.id}"):
            registrar.update_devices(
                db_session,
                batch.id,
                [
                    DeviceSerialChange(device_id=first.id, device_number="SN-1B"),
                    DeviceSerialChange(device_id=second.id, device_number="SN-2B"),
                ],
            )
    finally:
        event.remove(db_session, "do_orm_execute", lose_second_update)

    serials = [d.device_number for d in registrar.list_devices(db_session, batch.id)]
    assert serials == ["SN-1", "SN-2"]


def test_update_devices_input_checks(db_session, registrar, make_batch) -> None:
    batch = make_batch("SN-1")
    device_id = batch.devices[0].id

    with pytest.raises(ValidationError, match="No devices provided"):
        registrar.update_devices(db_session, batch.id, [])
    with pytest.raises(ValidationError, match="must not repeat"):
        registrar.update_devices(
            db_session,
            batch.id,
            [
                DeviceSerialChange(device_id=device_id, device_number="A"),
                DeviceSerialChange(device_id=device_id, device_number="B"),
            ],
        )
    with pytest.raises(NotFoundError):
        registrar.update_devices(
            db_session, 9999, [DeviceSerialChange(device_id=device_id, device_number="A")]
        )


def test_failed_device_lookup_is_a_persistence_error(
    db_session, registrar, make_batch, mocker
) -> None:
    batch = make_batch("SN-1")
    device_id = batch.devices[0].id
    mocker.patch.object(
        db_session,
        "execute",
        side_effect=OperationalError("SELECT", {}, Exception("connection lost")),
    )
    with pytest.raises(PersistenceError, match="Failed to update devices"):
        registrar.update_devices(
            db_session, batch.id, [DeviceSerialChange(device_id=device_id, device_number="A")]
        )



# --- Lifecycle ----------------------------------------------------------------------


def test_receive_pending_batch(db_session, registrar, make_batch) -> None:
    batch = make_batch()

    received = registrar.set_status(db_session, batch.id, "Delivered")

    assert received.status == "Delivered"
    assert received.received_date == TODAY
    assert received.cancelled_date is None


def test_cancel_pending_batch(db_session, registrar, make_batch) -> None:
    batch = make_batch()

    cancelled = registrar.cancel_batch(db_session, batch.id)

    assert cancelled.status == "Cancelled"
    assert cancelled.cancelled_date == TODAY


@pytest.mark.parametrize("current", ["Delivered", "Cancelled"])
def test_only_pending_batches_can_be_cancelled(
    db_session, registrar, make_batch, current
) -> None:
    batch = make_batch(status=current)

    with pytest.raises(StateTransitionError, match="Only pending batches can be cancelled") as excinfo:
        registrar.cancel_batch(db_session, batch.id)

    assert excinfo.value.current == current
    assert registrar.get_batch(db_session, batch.id).status == current


def test_received_batch_cannot_be_received_again(db_session, registrar, make_batch) -> None:
    batch = make_batch()
    registrar.receive_batch(db_session, batch.id)

    with pytest.raises(StateTransitionError, match="received"):
        registrar.receive_batch(db_session, batch.id)


def test_batches_cannot_be_moved_back_to_pending(db_session, registrar, make_batch) -> None:
    batch = make_batch(status="Delivered")

    with pytest.raises(StateTransitionError) as excinfo:
        registrar.set_status(db_session, batch.id, "Pending")
    assert excinfo.value.current == "Delivered"


def test_transition_of_unknown_batch(db_session, registrar) -> None:
    with pytest.raises(NotFoundError, match="Batch not found"):
        registrar.cancel_batch(db_session, 4242)


# --- Reads --------------------------------------------------------------------------


def test_list_batches_filters_and_orders(db_session, registrar, make_batch) -> None:
    older = make_batch(send_date=TODAY - timedelta(days=5))
    newer = make_batch(send_date=TODAY + timedelta(days=5))
    delivered = make_batch(status="Delivered", school_code="300099", send_date=TODAY)

    assert [b.id for b in registrar.list_batches(db_session)] == [
        newer.id,
        delivered.id,
        older.id,
    ]
    assert [b.id for b in registrar.list_batches(db_session, school_code="300099")] == [
        delivered.id
    ]
    assert [b.id for b in registrar.list_batches(db_session, status="received")] == [
        delivered.id
    ]
    assert [b.id for b in registrar.list_batches(db_session, status="pending")] == [
        newer.id,
        older.id,
    ]
    with pytest.raises(ValidationError):
        registrar.list_batches(db_session, status="lost")


def test_list_devices_of_unknown_batch(db_session, registrar) -> None:
    with pytest.raises(NotFoundError):
        registrar.list_devices(db_session, 77)


def test_suggest_batch_number(db_session, registrar, make_batch) -> None:
    assert registrar.suggest_batch_number(db_session) == "20250310-0001"

    make_batch(batch_number="20250310-0001")
    make_batch(batch_number="20250310-0007")
    make_batch(batch_number="20250309-0020")
    make_batch(batch_number="20250310-extra")

    assert registrar.suggest_batch_number(db_session) == "20250310-0008"
    assert registrar.suggest_batch_number(db_session, date(2025, 3, 9)) == "20250309-0021"
