"""FastAPI dependencies for service injection."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from billing.db import async_session_maker, get_session
from billing.services.numbering.allocator import SequenceAllocator
from billing.services.numbering.document_numbering import DocumentNumberingService
from billing.services.numbering.sql_store import SqlSequenceStore
from billing.services.numbering.store import SequenceStore


def get_sequence_store() -> SequenceStore:
    """Get the database-backed sequence store."""
    return SqlSequenceStore(async_session_maker)


def get_allocator(
    store: Annotated[SequenceStore, Depends(get_sequence_store)],
) -> SequenceAllocator:
    """Get a SequenceAllocator over the configured store."""
    return SequenceAllocator(store)


async def get_document_numbering_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    allocator: Annotated[SequenceAllocator, Depends(get_allocator)],
) -> DocumentNumberingService:
    """Get a DocumentNumberingService instance with the current session."""
    return DocumentNumberingService(session, allocator)


# Type aliases for cleaner endpoint signatures
AllocatorDep = Annotated[SequenceAllocator, Depends(get_allocator)]
DocumentNumberingServiceDep = Annotated[DocumentNumberingService, Depends(get_document_numbering_service)]
