# src/ictdesk/api/v1/endpoints/tickets.py
"""Account request, reset request and ticket lookup endpoints."""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import APIRouter, Query, status

from ictdesk.models import AccountRequest, ResetRequest
from ictdesk.schemas.common import MessageResponse
from ictdesk.schemas.tickets import (
    AccountRequestCreate,
    AccountRequestCreated,
    AccountRequestResponse,
    AccountStatusUpdate,
    ResetRequestCreate,
    ResetRequestCreated,
    ResetRequestResponse,
    ResetStatusUpdate,
    TransactionStatus,
)
from ictdesk.services import tickets

from ..dependencies import AllocatorDep, SessionDep

router = APIRouter(tags=["tickets"])


@router.post(
    "/request",
    response_model=AccountRequestCreated,
    status_code=status.HTTP_201_CREATED,
)
def submit_request(
    payload: AccountRequestCreate,
    db: SessionDep,
    allocator: AllocatorDep,
) -> AccountRequestCreated:
    """Submit an account request and return its ticket number."""
    record = tickets.submit_account_request(db, payload, allocator)
    return AccountRequestCreated(request_id=record.id, request_number=record.request_number)


@router.post(
    "/reset-request",
    response_model=ResetRequestCreated,
    status_code=status.HTTP_201_CREATED,
)
def submit_reset_request(
    payload: ResetRequestCreate,
    db: SessionDep,
    allocator: AllocatorDep,
) -> ResetRequestCreated:
    """Submit an account reset request and return its ticket number."""
    record = tickets.submit_reset_request(db, payload, allocator)
    return ResetRequestCreated(
        request_id=record.id,
        reset_number=record.reset_number,
        deped_email=record.deped_email,
    )


@router.get("/check-transaction", response_model=TransactionStatus)
def check_transaction(
    db: SessionDep,
    number: str = Query("", description="REQ-/RST- ticket number"),
) -> TransactionStatus:
    """Return status and notes of the request identified by a ticket number."""
    return tickets.check_transaction(db, number)


@router.get("/requests", response_model=list[AccountRequestResponse])
def list_requests(db: SessionDep) -> Sequence[AccountRequest]:
    """List account requests, oldest first."""
    return tickets.list_account_requests(db)


@router.get("/reset-requests", response_model=list[ResetRequestResponse])
def list_reset_requests(db: SessionDep) -> Sequence[ResetRequest]:
    """List reset requests, oldest first."""
    return tickets.list_reset_requests(db)


@router.put("/requests/{request_id}/status", response_model=MessageResponse)
def update_request_status(
    request_id: int,
    payload: AccountStatusUpdate,
    db: SessionDep,
) -> MessageResponse:
    tickets.update_account_request_status(
        db, request_id, payload.status, payload.email_reject_reason
    )
    return MessageResponse(message="Status updated")


@router.put("/reset-requests/{request_id}/status", response_model=MessageResponse)
def update_reset_request_status(
    request_id: int,
    payload: ResetStatusUpdate,
    db: SessionDep,
) -> MessageResponse:
    tickets.update_reset_request_status(db, request_id, payload.status, payload.notes)
    return MessageResponse(message="Status updated")


@router.delete("/requests/{request_id}", response_model=MessageResponse)
def delete_request(request_id: int, db: SessionDep) -> MessageResponse:
    tickets.delete_account_request(db, request_id)
    return MessageResponse(message="Account request deleted")


@router.delete("/reset-requests/{request_id}", response_model=MessageResponse)
def delete_reset_request(request_id: int, db: SessionDep) -> MessageResponse:
    tickets.delete_reset_request(db, request_id)
    return MessageResponse(message="Reset request deleted")
