"""Pydantic schemas for batch shipments and their devices."""

from __future__ import annotations

from datetime import date

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ictdesk.models.batch import BATCH_STATUSES


class DeviceIn(BaseModel):
    """One device line of a new batch."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    device_type: str = Field(alias="deviceType", min_length=1, max_length=64)
    serial_number: str = Field(alias="serialNumber", min_length=1, max_length=128)


class BatchCreate(BaseModel):
    """Payload registering a batch together with all of its devices."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    batch_number: str = Field(alias="batchNumber", min_length=1, max_length=64)
    send_date: date = Field(alias="sendDate")
    school_code: str = Field(
        min_length=1,
        max_length=32,
        validation_alias=AliasChoices("school", "schoolCode"),
    )
    school_name: str = Field(default="", alias="schoolName")
    devices: list[DeviceIn] = Field(min_length=1)


class BatchCreated(BaseModel):
    """Identifier and derived status of a registered batch."""

    model_config = ConfigDict(populate_by_name=True)

    batch_id: int = Field(alias="batchId")
    status: str


class BatchUpdate(BaseModel):
    """Editable header fields of a batch."""

    model_config = ConfigDict(str_strip_whitespace=True)

    batch_number: str = Field(min_length=1, max_length=64)
    send_date: date


class BatchStatusUpdate(BaseModel):
    """Requested status transition."""

    status: str

    @field_validator("status")
    @classmethod
    def normalize_status(cls, value: str) -> str:
        wanted = value.strip().lower()
        if wanted == "received":
            wanted = "delivered"
        for status in BATCH_STATUSES:
            if status.lower() == wanted:
                return status
        raise ValueError(f"status must be one of {', '.join(BATCH_STATUSES)}")


class DeviceUpdateIn(BaseModel):
    """New serial for one existing device of a batch."""

    model_config = ConfigDict(str_strip_whitespace=True)

    batch_devices_id: int
    device_number: str = Field(max_length=128)


class DevicesUpdate(BaseModel):
    """Bulk device serial update."""

    devices: list[DeviceUpdateIn]


class DevicesUpdated(BaseModel):
    """Result of a bulk device update."""

    message: str
    count: int


class BatchDeviceResponse(BaseModel):
    """A device recorded against a batch."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    batch_id: int
    device_type: str
    device_number: str


class BatchResponse(BaseModel):
    """A batch header."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    batch_number: str
    school_code: str
    school_name: str
    send_date: date
    status: str
    received_date: date | None
    cancelled_date: date | None


class NextBatchNumber(BaseModel):
    """Suggested batch number for today."""

    model_config = ConfigDict(populate_by_name=True)

    next_batch_number: str = Field(alias="nextBatchNumber")


class DeviceTypeCreate(BaseModel):
    """New entry for the device type catalog."""

    model_config = ConfigDict(str_strip_whitespace=True)

    device_name: str = Field(min_length=1, max_length=128)


class DeviceTypeResponse(BaseModel):
    """A device type catalog entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    device_name: str
