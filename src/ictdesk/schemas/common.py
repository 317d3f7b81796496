"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Plain acknowledgement returned by update and delete endpoints."""

    message: str
