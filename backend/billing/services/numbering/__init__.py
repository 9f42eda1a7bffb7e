"""Gap-filling document numbering."""

from billing.services.numbering.allocator import LostReservationRace, SequenceAllocator, validate_sequence_number
from billing.services.numbering.document_numbering import DEFAULT_PREFIXES, DocumentNumberingService, DocumentType
from billing.services.numbering.exceptions import (
    InvalidDocumentNumber,
    InvalidSequenceNumber,
    InvalidSeriesKey,
    NumberAlreadyReserved,
    OrganizationNotFound,
    StoreUnavailable,
    TransientAllocationConflict,
)
from billing.services.numbering.formatting import fiscal_year_label, format_document_number, parse_document_number
from billing.services.numbering.gaps import find_first_available
from billing.services.numbering.memory_store import InMemorySequenceStore
from billing.services.numbering.series import SERIES_KEY_SEPARATOR, SeriesKey, validate_series_key
from billing.services.numbering.series_locks import SeriesLocks
from billing.services.numbering.sql_store import SqlSequenceStore
from billing.services.numbering.store import ReserveResult, SequenceStore

__all__ = [
    "DEFAULT_PREFIXES",
    "SERIES_KEY_SEPARATOR",
    "DocumentNumberingService",
    "DocumentType",
    "InMemorySequenceStore",
    "InvalidDocumentNumber",
    "InvalidSequenceNumber",
    "InvalidSeriesKey",
    "LostReservationRace",
    "NumberAlreadyReserved",
    "OrganizationNotFound",
    "ReserveResult",
    "SequenceAllocator",
    "SequenceStore",
    "SeriesKey",
    "SeriesLocks",
    "SqlSequenceStore",
    "StoreUnavailable",
    "TransientAllocationConflict",
    "find_first_available",
    "fiscal_year_label",
    "format_document_number",
    "parse_document_number",
    "validate_sequence_number",
    "validate_series_key",
]
