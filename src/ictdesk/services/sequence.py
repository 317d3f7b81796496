"""Per-day ticket sequence allocation.

Ticket numbers look like ``REQ-2025-02-04-0001``: a type prefix, the bucket
day and a zero-padded sequence. The sequence for a (day, type) bucket lives in
the ``ticket_counter`` table and is only ever advanced by the database itself,
either through a single upsert that returns the new value or, on dialects
without ``ON CONFLICT ... RETURNING``, through a row-locked compare-and-swap.

Allocation joins the caller's transaction. The value becomes durable when the
caller commits the row that carries the ticket number, so a caller that fails
and rolls back never leaves a gap behind.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from enum import Enum
from functools import lru_cache
from typing import Final, Literal

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ictdesk.core.errors import AllocationError, SequenceExhaustedError
from ictdesk.core.settings import settings
from ictdesk.db.time import local_today
from ictdesk.models import TicketCounter

logger = logging.getLogger(__name__)

Strategy = Literal["auto", "upsert", "locked"]

# Dialects that support INSERT ... ON CONFLICT DO UPDATE ... RETURNING
UPSERT_DIALECTS: Final[frozenset[str]] = frozenset({"postgresql", "sqlite"})

# Request numbers issued before the dated format: YYYYMMDD-NN
LEGACY_REQUEST_PATTERN: Final = re.compile(r"^\d{8}-\d{2}$")


@lru_cache(maxsize=8)
def _ticket_number_pattern(width: int) -> re.Pattern[str]:
    return re.compile(
        rf"^(?P<type>REQ|RST)-(?P<date>\d{{4}}-\d{{2}}-\d{{2}})-(?P<seq>\d{{{width},}})$"
    )


def match_ticket_number(number: str) -> re.Match[str] | None:
    """Match ``TYPE-YYYY-MM-DD-N...`` with at least the configured ticket width."""
    return _ticket_number_pattern(settings.ticket_width).match(number)


class TicketType(str, Enum):
    """Closed set of ticket categories, valued by their number prefix."""

    REQUEST = "REQ"
    RESET = "RST"


class SequenceAllocator:
    """Hand out gap-free, collision-free sequence values per (day, type)."""

    def __init__(
        self,
        *,
        strategy: Strategy = "auto",
        max_retries: int | None = None,
    ) -> None:
        self.strategy = strategy
        self.max_retries = max_retries or settings.allocation_max_retries

    def next(
        self,
        db: Session,
        ticket_type: TicketType | str,
        on: date | None = None,
    ) -> int:
        """Allocate the next value in the bucket inside the caller's transaction.

        Args:
            db: Session whose transaction the increment joins.
            ticket_type: Ticket category.
            on: Bucket day; defaults to today in the configured time zone.

        Returns:
            The previous ``last_sequence`` plus one (1 for a new bucket).

        Raises:
            AllocationError: The counter could not be advanced. The caller
                must roll back and must not invent a number.
            SequenceExhaustedError: The value no longer fits the ticket width
                and the overflow policy is ``error``. Rolling back leaves the
                counter at its maximum.
        """
        kind = TicketType(ticket_type)
        bucket = on or local_today()
        try:
            if self._uses_upsert(db):
                value = self._upsert(db, bucket, kind)
            else:
                value = self._locked_increment(db, bucket, kind)
        except SQLAlchemyError as exc:
            logger.error("Sequence allocation failed for %s/%s: %s", kind.value, bucket, exc)
            raise AllocationError("Failed to allocate ticket number") from exc

        if value > settings.max_ticket_sequence and settings.ticket_overflow == "error":
            logger.error(
                "Ticket bucket %s/%s exhausted at %d", kind.value, bucket, value - 1
            )
            raise SequenceExhaustedError(
                f"No {kind.value} ticket numbers left for {bucket.isoformat()}"
            )
        logger.debug("Allocated %s/%s sequence %d", kind.value, bucket, value)
        return value

    def peek(self, db: Session, ticket_type: TicketType | str, on: date | None = None) -> int:
        """Return the last value issued in the bucket without allocating."""
        kind = TicketType(ticket_type)
        bucket = on or local_today()
        value = db.execute(
            select(TicketCounter.last_sequence).where(
                TicketCounter.counter_date == bucket,
                TicketCounter.ticket_type == kind.value,
            )
        ).scalar_one_or_none()
        return int(value or 0)

    def _uses_upsert(self, db: Session) -> bool:
        if self.strategy == "upsert":
            return True
        if self.strategy == "locked":
            return False
        return db.get_bind().dialect.name in UPSERT_DIALECTS

    @staticmethod
    def _upsert(db: Session, bucket: date, kind: TicketType) -> int:
        dialect = db.get_bind().dialect.name
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
        stmt = insert(TicketCounter).values(
            counter_date=bucket,
            ticket_type=kind.value,
            last_sequence=1,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["counter_date", "ticket_type"],
            set_={"last_sequence": TicketCounter.last_sequence + 1},
        ).returning(TicketCounter.last_sequence)
        return int(db.execute(stmt).scalar_one())

    def _locked_increment(self, db: Session, bucket: date, kind: TicketType) -> int:
        for attempt in range(1, self.max_retries + 1):
            prior = db.execute(
                select(TicketCounter.last_sequence)
                .where(
                    TicketCounter.counter_date == bucket,
                    TicketCounter.ticket_type == kind.value,
                )
                .with_for_update()
            ).scalar_one_or_none()

            if prior is None:
                try:
                    with db.begin_nested():
                        db.add(
                            TicketCounter(
                                counter_date=bucket,
                                ticket_type=kind.value,
                                last_sequence=1,
                            )
                        )
                    return 1
                except IntegrityError:
                    logger.info(
                        "Counter %s/%s created concurrently (attempt %d)",
                        kind.value,
                        bucket,
                        attempt,
                    )
                    continue

            if self._swap(db, bucket, kind, int(prior)):
                return int(prior) + 1
            logger.info(
                "Counter %s/%s moved past %d (attempt %d)", kind.value, bucket, prior, attempt
            )

        raise AllocationError(
            f"Gave up allocating a {kind.value} ticket after {self.max_retries} attempts"
        )

    @staticmethod
    def _swap(db: Session, bucket: date, kind: TicketType, prior: int) -> bool:
        """Advance the counter only if it still holds ``prior``."""
        result = db.execute(
            update(TicketCounter)
            .where(
                TicketCounter.counter_date == bucket,
                TicketCounter.ticket_type == kind.value,
                TicketCounter.last_sequence == prior,
            )
            .values(last_sequence=prior + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


def format_ticket_number(ticket_type: TicketType | str, bucket: date, sequence: int) -> str:
    """Render ``TYPE-YYYY-MM-DD-NNNN``; wider sequences keep all their digits."""
    kind = TicketType(ticket_type)
    return f"{kind.value}-{bucket.isoformat()}-{sequence:0{settings.ticket_width}d}"


def get_sequence_allocator() -> SequenceAllocator:
    """Return a sequence allocator instance."""
    return SequenceAllocator()
