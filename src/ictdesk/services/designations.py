"""Helpers for the designation catalog behind the account request form."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ictdesk.core.errors import DuplicateError, NotFoundError, ValidationError
from ictdesk.db.transaction import transaction
from ictdesk.models import Designation

__all__ = [
    "add_designation",
    "delete_designation",
    "list_designations",
]

logger = logging.getLogger(__name__)


def list_designations(db: Session) -> Sequence[Designation]:
    """Return designations in alphabetical order."""
    return db.execute(select(Designation).order_by(Designation.designation)).scalars().all()


def add_designation(db: Session, designation: str) -> Designation:
    designation = (designation or "").strip()
    if not designation:
        raise ValidationError("Designation is required")

    entry = Designation(designation=designation)
    with transaction(
        db,
        "add designation",
        on_integrity_error=lambda _exc: DuplicateError("Designation already exists"),
    ):
        existing = db.execute(
            select(Designation.id).where(Designation.designation == designation)
        ).scalar_one_or_none()
        if existing is not None:
            raise DuplicateError("Designation already exists")
        db.add(entry)
    db.refresh(entry)
    logger.info("Added designation %r", designation)
    return entry


def delete_designation(db: Session, designation_id: int) -> None:
    with transaction(db, "delete designation"):
        entry = db.get(Designation, designation_id)
        if entry is None:
            raise NotFoundError("Designation not found")
        db.delete(entry)
    logger.info("Deleted designation %d", designation_id)
