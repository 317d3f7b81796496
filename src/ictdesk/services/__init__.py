"""Business logic services for the ICT desk."""

from .batches import BatchRegistrar, DeviceLine, DeviceSerialChange, RegisteredBatch
from .sequence import SequenceAllocator, TicketType, format_ticket_number

__all__ = [
    "BatchRegistrar",
    "DeviceLine",
    "DeviceSerialChange",
    "RegisteredBatch",
    "SequenceAllocator",
    "TicketType",
    "format_ticket_number",
]
