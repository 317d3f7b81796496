"""Commit-or-rollback scope for request-scoped sessions."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ictdesk.core.errors import IctDeskError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)


@contextmanager
def transaction(
    db: Session,
    action: str,
    *,
    on_integrity_error: Callable[[IntegrityError], IctDeskError] | None = None,
) -> Iterator[Session]:
    """Commit the session when the block succeeds, roll it back otherwise.

    Args:
        db: Session whose current transaction is committed or rolled back.
        action: Short description used in logs and ``PersistenceError``.
        on_integrity_error: Builds the domain error for a constraint
            violation. Called after the rollback, so it may query ``db``.

    Raises:
        ValidationError: The database rejected a value, e.g. one too long
            for its column.
        PersistenceError: Any other database failure; nothing was committed.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Constraint violation while trying to %s: %s", action, exc.orig)
        if on_integrity_error is None:
            raise PersistenceError(f"Failed to {action}") from exc
        raise on_integrity_error(exc) from exc
    except DataError as exc:
        db.rollback()
        logger.warning("Rejected value while trying to %s: %s", action, exc.orig)
        raise ValidationError(f"Invalid value while trying to {action}") from exc
    except IctDeskError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Database error while trying to %s: %s", action, exc)
        raise PersistenceError(f"Failed to {action}") from exc
    except BaseException:
        db.rollback()
        raise
