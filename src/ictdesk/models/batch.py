"""Models for device shipments (batches) sent to schools."""

from __future__ import annotations

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ictdesk.db.session import Base

BATCH_STATUS_PENDING = "Pending"
BATCH_STATUS_DELIVERED = "Delivered"
BATCH_STATUS_CANCELLED = "Cancelled"

BATCH_STATUSES = (BATCH_STATUS_PENDING, BATCH_STATUS_DELIVERED, BATCH_STATUS_CANCELLED)


class Batch(Base):
    """One consignment of devices sent to one school on one date."""

    __tablename__ = "batch"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Supplied by the sender; not unique.
    batch_number: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    school_code: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    school_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    send_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=BATCH_STATUS_PENDING
    )
    received_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    cancelled_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    devices: Mapped[list[BatchDevice]] = relationship(
        back_populates="batch",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="BatchDevice.id",
    )


class BatchDevice(Base):
    """A physical device recorded against exactly one batch."""

    __tablename__ = "batch_device"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    batch_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("batch.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    device_type: Mapped[str] = mapped_column(String(64), nullable=False)
    # Unique across every batch ever recorded.
    device_number: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)

    batch: Mapped[Batch] = relationship(back_populates="devices")


class DeviceType(Base):
    """Catalog of device names offered when building a batch."""

    __tablename__ = "device_type"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    device_name: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
