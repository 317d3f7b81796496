"""Calendar helpers bound to the configured service time zone."""

from __future__ import annotations

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from ictdesk.core.settings import settings


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def local_today() -> date:
    """Return today's date in the configured time zone."""
    return datetime.now(ZoneInfo(settings.timezone)).date()
