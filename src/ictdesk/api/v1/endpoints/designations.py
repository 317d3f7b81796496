# src/ictdesk/api/v1/endpoints/designations.py
"""Designation catalog endpoints."""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import APIRouter, status

from ictdesk.models import Designation
from ictdesk.schemas.common import MessageResponse
from ictdesk.schemas.tickets import DesignationCreate, DesignationResponse
from ictdesk.services import designations

from ..dependencies import SessionDep

router = APIRouter(prefix="/designations", tags=["designations"])


@router.get("", response_model=list[DesignationResponse])
def list_designations(db: SessionDep) -> Sequence[Designation]:
    """List the designations offered on the account request form."""
    return designations.list_designations(db)


@router.post("", response_model=DesignationResponse, status_code=status.HTTP_201_CREATED)
def add_designation(payload: DesignationCreate, db: SessionDep) -> Designation:
    return designations.add_designation(db, payload.designation)


@router.delete("/{designation_id}", response_model=MessageResponse)
def delete_designation(designation_id: int, db: SessionDep) -> MessageResponse:
    designations.delete_designation(db, designation_id)
    return MessageResponse(message="Designation deleted successfully")
