"""SQLAlchemy models for the ICT desk service."""

from .account_request import AccountRequest, ResetRequest
from .batch import Batch, BatchDevice, DeviceType
from .designation import Designation
from .ticket_counter import TicketCounter

__all__ = [
    "AccountRequest", "ResetRequest",
    "Batch", "BatchDevice", "DeviceType",
    "Designation",
    "TicketCounter",
]
