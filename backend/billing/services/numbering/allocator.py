"""Gap-filling sequence number allocator.

Numbers are handed out per series as the lowest positive integer that is not
currently reserved, so numbers freed by deleted or voided documents are reused
before the series grows. Concurrency safety comes from the store: the
allocator reads the reserved set, computes a candidate and asks the store to
reserve it conditionally. Losing that race means the reserved set changed, so
the whole read-compute-reserve cycle is repeated (never a blind increment).
"""

import structlog
from tenacity import AsyncRetrying, RetryError, retry_if_exception_type, stop_after_attempt, wait_random

from billing.config import settings
from billing.services.numbering.exceptions import (
    InvalidSequenceNumber,
    NumberAlreadyReserved,
    TransientAllocationConflict,
)
from billing.services.numbering.gaps import find_first_available
from billing.services.numbering.series import validate_series_key
from billing.services.numbering.series_locks import SeriesLocks
from billing.services.numbering.store import ReserveResult, SequenceStore

logger = structlog.get_logger(__name__)


class LostReservationRace(Exception):
    """Another caller reserved the candidate first. Triggers a new attempt."""

    def __init__(self, series_key: str, candidate: int):
        self.series_key = series_key
        self.candidate = candidate
        super().__init__(f"Number {candidate} in series {series_key!r} was reserved concurrently")


def validate_sequence_number(number: object) -> int:
    """Return ``number`` if it is a positive integer."""
    if isinstance(number, bool) or not isinstance(number, int) or number < 1:
        raise InvalidSequenceNumber(f"Sequence number must be a positive integer, got {number!r}")
    return number


class SequenceAllocator:
    """Allocates and releases sequence numbers within series.

    Usage:
        allocator = SequenceAllocator(SqlSequenceStore(async_session_maker))
        number = await allocator.allocate_next("org_01:invoice:24-25", document_ref=invoice.id)
        try:
            ...  # create the document
        except Exception:
            await allocator.release("org_01:invoice:24-25", number)
            raise

    A number is reserved before allocate_next returns. If the caller abandons
    the call after that point the number stays reserved until released.
    """

    def __init__(
        self,
        store: SequenceStore,
        *,
        max_attempts: int | None = None,
        retry_jitter: float | None = None,
    ):
        self.store = store
        self.max_attempts = max_attempts if max_attempts is not None else settings.allocation_max_attempts
        self.retry_jitter = retry_jitter if retry_jitter is not None else settings.allocation_retry_jitter
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        # Stores without an atomic conditional insert get per-series serialization
        self._locks: SeriesLocks | None = None if store.atomic_reserve else SeriesLocks()

    async def allocate_next(self, series_key: str, document_ref: str | None = None) -> int:
        """Reserve and return the lowest free number in the series.

        Raises:
            InvalidSeriesKey: key is empty or malformed (store is not touched)
            TransientAllocationConflict: lost the race max_attempts times
            StoreUnavailable: the store failed (not retried)
        """
        validate_series_key(series_key)

        retrying = AsyncRetrying(
            retry=retry_if_exception_type(LostReservationRace),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_random(0, self.retry_jitter),
        )
        try:
            async for attempt in retrying:
                with attempt:
                    number = await self._attempt(series_key, document_ref, attempt.retry_state.attempt_number)
        except RetryError as e:
            logger.error(
                "Sequence allocation retry ceiling reached",
                series_key=series_key,
                max_attempts=self.max_attempts,
            )
            raise TransientAllocationConflict(series_key, self.max_attempts) from e

        logger.info(
            "Allocated sequence number",
            series_key=series_key,
            number=number,
            document_ref=document_ref,
        )
        return number

    async def release(self, series_key: str, number: int) -> None:
        """Make ``number`` available again. Releasing a free number is a no-op."""
        validate_series_key(series_key)
        validate_sequence_number(number)
        await self.store.release(series_key, number)
        logger.info("Released sequence number", series_key=series_key, number=number)

    async def claim(self, series_key: str, number: int, document_ref: str | None = None) -> None:
        """Reserve a number chosen by the caller, e.g. for an imported document.

        Raises:
            NumberAlreadyReserved: the number is held by another document
        """
        validate_series_key(series_key)
        validate_sequence_number(number)
        if self._locks is None:
            result = await self.store.try_reserve(series_key, number, document_ref)
        else:
            async with self._locks.hold(series_key):
                result = await self.store.try_reserve(series_key, number, document_ref)

        if result == ReserveResult.ALREADY_RESERVED:
            raise NumberAlreadyReserved(series_key, number)
        logger.info(
            "Claimed sequence number",
            series_key=series_key,
            number=number,
            document_ref=document_ref,
        )

    async def peek_next(self, series_key: str) -> int:
        """Number the next allocation would get, without reserving it.

        Advisory only: a concurrent allocation may take it first.
        """
        validate_series_key(series_key)
        return find_first_available(await self.store.list_reserved(series_key))

    async def list_reserved(self, series_key: str) -> list[int]:
        """Reserved numbers of the series in ascending order."""
        validate_series_key(series_key)
        return sorted(await self.store.list_reserved(series_key))

    async def document_ref(self, series_key: str, number: int) -> str | None:
        """Document holding ``number``, None if the number is free or unattributed."""
        validate_series_key(series_key)
        validate_sequence_number(number)
        return await self.store.document_ref(series_key, number)

    async def _attempt(self, series_key: str, document_ref: str | None, attempt_number: int) -> int:
        if self._locks is None:
            return await self._read_compute_reserve(series_key, document_ref, attempt_number)
        async with self._locks.hold(series_key):
            return await self._read_compute_reserve(series_key, document_ref, attempt_number)

    async def _read_compute_reserve(self, series_key: str, document_ref: str | None, attempt_number: int) -> int:
        reserved = await self.store.list_reserved(series_key)
        candidate = find_first_available(reserved)
        logger.debug(
            "Computed sequence candidate",
            series_key=series_key,
            candidate=candidate,
            reserved_count=len(reserved),
            attempt=attempt_number,
        )

        result = await self.store.try_reserve(series_key, candidate, document_ref)
        if result == ReserveResult.ALREADY_RESERVED:
            logger.warning(
                "Sequence candidate reserved concurrently, retrying",
                series_key=series_key,
                candidate=candidate,
                attempt=attempt_number,
                max_attempts=self.max_attempts,
            )
            raise LostReservationRace(series_key, candidate)
        return candidate
