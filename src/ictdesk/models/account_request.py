"""Models for account and account-reset requests submitted by school staff."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ictdesk.db.time import utcnow
from ictdesk.db.session import Base

REQUEST_STATUS_PENDING = "Pending"
REQUEST_STATUS_APPROVED = "Approved"
REQUEST_STATUS_REJECTED = "Rejected"
REQUEST_STATUS_COMPLETED = "Completed"

REQUEST_STATUSES = (
    REQUEST_STATUS_PENDING,
    REQUEST_STATUS_APPROVED,
    REQUEST_STATUS_REJECTED,
    REQUEST_STATUS_COMPLETED,
)


class AccountRequest(Base):
    """A request for a new organisational account."""

    __tablename__ = "account_request"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    request_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    selected_type: Mapped[str] = mapped_column(String(64), nullable=False)
    # "Surname, First Middle" as shown to admins.
    name: Mapped[str] = mapped_column(Text, nullable=False)
    surname: Mapped[str] = mapped_column(Text, nullable=False)
    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    middle_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    designation: Mapped[str] = mapped_column(Text, nullable=False)
    school: Mapped[str] = mapped_column(Text, nullable=False)
    school_id: Mapped[str] = mapped_column(String(32), nullable=False)
    personal_gmail: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=REQUEST_STATUS_PENDING
    )
    email_reject_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class ResetRequest(Base):
    """A request to reset an existing organisational account."""

    __tablename__ = "reset_request"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reset_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    selected_type: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    surname: Mapped[str] = mapped_column(Text, nullable=False)
    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    middle_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    school: Mapped[str] = mapped_column(Text, nullable=False)
    school_id: Mapped[str] = mapped_column(String(32), nullable=False)
    employee_number: Mapped[str] = mapped_column(String(32), nullable=False)
    reset_email: Mapped[str] = mapped_column(Text, nullable=False)
    deped_email: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=REQUEST_STATUS_PENDING
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
