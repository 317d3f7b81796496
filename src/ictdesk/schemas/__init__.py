"""Pydantic schemas for the ICT desk API."""

from .batch import BatchCreate, BatchCreated, BatchResponse, DeviceIn
from .common import MessageResponse
from .tickets import (
    AccountRequestCreate,
    AccountRequestCreated,
    ResetRequestCreate,
    ResetRequestCreated,
    TransactionStatus,
)

__all__ = [
    "AccountRequestCreate",
    "AccountRequestCreated",
    "BatchCreate",
    "BatchCreated",
    "BatchResponse",
    "DeviceIn",
    "MessageResponse",
    "ResetRequestCreate",
    "ResetRequestCreated",
    "TransactionStatus",
]
