"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from ictdesk.db.session import get_db
from ictdesk.services.batches import BatchRegistrar, get_batch_registrar
from ictdesk.services.sequence import SequenceAllocator, get_sequence_allocator


def get_batch_registrar_dep() -> BatchRegistrar:
    """Get BatchRegistrar dependency for dependency injection."""
    return get_batch_registrar()


def get_sequence_allocator_dep() -> SequenceAllocator:
    """Get SequenceAllocator dependency for dependency injection."""
    return get_sequence_allocator()


# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
RegistrarDep = Annotated[BatchRegistrar, Depends(get_batch_registrar_dep)]
AllocatorDep = Annotated[SequenceAllocator, Depends(get_sequence_allocator_dep)]
