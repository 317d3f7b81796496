"""Service health endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ictdesk.core.settings import settings

from ..dependencies import SessionDep

router = APIRouter(tags=["system"])
logger = logging.getLogger(__name__)


@router.get("/health")
def get_health(db: SessionDep) -> dict[str, object]:
    """Report liveness and database connectivity."""
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as exc:
        logger.warning("Health check database ping failed: %s", exc)
        db_status = f"unhealthy: {exc}"

    return {
        "status": "ok" if db_status == "healthy" else "degraded",
        "components": {"database": db_status},
        "version": settings.app_version,
    }
