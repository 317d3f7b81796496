"""Ticket issuance for account and reset requests, plus the admin helpers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from ictdesk.core.errors import NotFoundError, ValidationError
from ictdesk.core.settings import settings
from ictdesk.db.time import local_today, utcnow
from ictdesk.db.transaction import transaction
from ictdesk.models import AccountRequest, ResetRequest
from ictdesk.models.account_request import REQUEST_STATUS_COMPLETED, REQUEST_STATUS_REJECTED
from ictdesk.schemas.tickets import (
    AccountRequestCreate,
    ResetRequestCreate,
    TransactionStatus,
)
from ictdesk.services.sequence import (
    LEGACY_REQUEST_PATTERN,
    SequenceAllocator,
    TicketType,
    format_ticket_number,
    get_sequence_allocator,
    match_ticket_number,
)

__all__ = [
    "check_transaction",
    "delete_account_request",
    "delete_reset_request",
    "list_account_requests",
    "list_reset_requests",
    "submit_account_request",
    "submit_reset_request",
    "update_account_request_status",
    "update_reset_request_status",
]

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", AccountRequest, ResetRequest)


def _full_name(surname: str, first_name: str, middle_name: str) -> str:
    return f"{surname}, {first_name} {middle_name or ''}".strip()


def _issue(
    db: Session,
    ticket_type: TicketType,
    build: Callable[[str], RecordT],
    allocator: SequenceAllocator | None,
) -> RecordT:
    """Allocate a ticket number and insert its record in one transaction."""
    allocator = allocator or get_sequence_allocator()
    bucket = local_today()
    with transaction(db, f"issue {ticket_type.value} ticket"):
        sequence = allocator.next(db, ticket_type, bucket)
        record = build(format_ticket_number(ticket_type, bucket, sequence))
        db.add(record)
        db.flush()
    db.refresh(record)
    return record


def submit_account_request(
    db: Session,
    data: AccountRequestCreate,
    allocator: SequenceAllocator | None = None,
) -> AccountRequest:
    """Persist a new account request under a fresh ``REQ`` ticket number."""
    record = _issue(
        db,
        TicketType.REQUEST,
        lambda number: AccountRequest(
            request_number=number,
            selected_type=data.selected_type,
            name=_full_name(data.surname, data.first_name, data.middle_name),
            surname=data.surname,
            first_name=data.first_name,
            middle_name=data.middle_name or "",
            designation=data.designation,
            school=data.school,
            school_id=data.school_id,
            personal_gmail=data.personal_gmail,
        ),
        allocator,
    )
    logger.info("Account request %s submitted (id=%d)", record.request_number, record.id)
    return record


def submit_reset_request(
    db: Session,
    data: ResetRequestCreate,
    allocator: SequenceAllocator | None = None,
) -> ResetRequest:
    """Persist a new reset request under a fresh ``RST`` ticket number.

    The organisational mailbox is checked before a number is allocated.
    """
    domain = settings.deped_email_domain
    if not data.deped_email.lower().endswith(domain.lower()):
        raise ValidationError(f"DepEd email must end with {domain}")

    record = _issue(
        db,
        TicketType.RESET,
        lambda number: ResetRequest(
            reset_number=number,
            selected_type=data.selected_type,
            name=_full_name(data.surname, data.first_name, data.middle_name),
            surname=data.surname,
            first_name=data.first_name,
            middle_name=data.middle_name or "",
            school=data.school,
            school_id=data.school_id,
            employee_number=data.employee_number,
            reset_email=data.personal_email,
            deped_email=data.deped_email,
        ),
        allocator,
    )
    logger.info("Reset request %s submitted (id=%d)", record.reset_number, record.id)
    return record


def check_transaction(db: Session, number: str | None) -> TransactionStatus:
    """Look up a request or reset request by its ticket number.

    Accepts ``REQ-YYYY-MM-DD-NNNN``, ``RST-YYYY-MM-DD-NNNN`` and the legacy
    request format ``YYYYMMDD-NN``.
    """
    number = (number or "").strip()
    if not number:
        raise ValidationError("Transaction number is required")

    match = match_ticket_number(number)
    if match is not None:
        is_reset = match.group("type") == TicketType.RESET.value
    elif LEGACY_REQUEST_PATTERN.match(number):
        is_reset = False
    else:
        raise ValidationError("Invalid transaction number")

    if is_reset:
        reset = db.execute(
            select(ResetRequest).where(
                ResetRequest.reset_number == number,
                ResetRequest.deleted.is_(False),
            )
        ).scalar_one_or_none()
        if reset is None:
            raise NotFoundError("Transaction not found")
        return TransactionStatus(
            number=reset.reset_number,
            name=reset.name,
            school=reset.school,
            status=reset.status,
            notes=reset.notes,
        )

    request = db.execute(
        select(AccountRequest).where(
            AccountRequest.request_number == number,
            AccountRequest.deleted.is_(False),
        )
    ).scalar_one_or_none()
    if request is None:
        raise NotFoundError("Transaction not found")
    return TransactionStatus(
        number=request.request_number,
        name=request.name,
        school=request.school,
        status=request.status,
        notes=request.email_reject_reason,
    )


def list_account_requests(db: Session) -> Sequence[AccountRequest]:
    """Return visible account requests, oldest first."""
    return db.execute(
        select(AccountRequest)
        .where(AccountRequest.deleted.is_(False))
        .order_by(AccountRequest.created_at, AccountRequest.id)
    ).scalars().all()


def list_reset_requests(db: Session) -> Sequence[ResetRequest]:
    """Return visible reset requests, oldest first."""
    return db.execute(
        select(ResetRequest)
        .where(ResetRequest.deleted.is_(False))
        .order_by(ResetRequest.created_at, ResetRequest.id)
    ).scalars().all()


def _get_visible(db: Session, model: type[RecordT], record_id: int) -> RecordT:
    record = db.get(model, record_id)
    if record is None or record.deleted:
        raise NotFoundError("Request not found")
    return record


def update_account_request_status(
    db: Session,
    request_id: int,
    status: str,
    email_reject_reason: str | None = None,
) -> AccountRequest:
    """Change the status of an account request.

    A reject reason is only recorded together with ``Rejected``.
    """
    with transaction(db, "update account request status"):
        record = _get_visible(db, AccountRequest, request_id)
        record.status = status
        if status == REQUEST_STATUS_REJECTED and email_reject_reason:
            record.email_reject_reason = email_reject_reason
    logger.info("Account request %d marked %s", request_id, status)
    return record


def update_reset_request_status(
    db: Session,
    request_id: int,
    status: str,
    notes: str | None = None,
) -> ResetRequest:
    """Change the status and notes of a reset request.

    ``completed_at`` is stamped on completion and cleared for other statuses.
    """
    with transaction(db, "update reset request status"):
        record = _get_visible(db, ResetRequest, request_id)
        record.status = status
        record.notes = notes
        record.completed_at = utcnow() if status == REQUEST_STATUS_COMPLETED else None
    logger.info("Reset request %d marked %s", request_id, status)
    return record


def delete_account_request(db: Session, request_id: int) -> None:
    """Hide an account request from every listing and lookup."""
    with transaction(db, "delete account request"):
        _get_visible(db, AccountRequest, request_id).deleted = True
    logger.info("Account request %d deleted", request_id)


def delete_reset_request(db: Session, request_id: int) -> None:
    """Hide a reset request from every listing and lookup."""
    with transaction(db, "delete reset request"):
        _get_visible(db, ResetRequest, request_id).deleted = True
    logger.info("Reset request %d deleted", request_id)
