"""In-process sequence store."""

import asyncio
from collections import defaultdict

from billing.services.numbering.store import ReserveResult


class InMemorySequenceStore:
    """Sequence store kept in a dict, guarded by one asyncio lock.

    Each operation is atomic with respect to other coroutines on the same
    event loop, which gives ``try_reserve`` the same single-writer-wins
    semantics as a unique constraint. Not shared across processes.
    """

    atomic_reserve = True

    def __init__(self) -> None:
        self._series: defaultdict[str, dict[int, str | None]] = defaultdict(dict)
        self._lock = asyncio.Lock()

    async def list_reserved(self, series_key: str) -> set[int]:
        async with self._lock:
            return set(self._series.get(series_key, {}))

    async def try_reserve(self, series_key: str, number: int, document_ref: str | None = None) -> ReserveResult:
        async with self._lock:
            reservations = self._series[series_key]
            if number in reservations:
                return ReserveResult.ALREADY_RESERVED
            reservations[number] = document_ref
            return ReserveResult.RESERVED

    async def release(self, series_key: str, number: int) -> None:
        async with self._lock:
            reservations = self._series.get(series_key)
            if reservations is not None:
                reservations.pop(number, None)
                if not reservations:
                    del self._series[series_key]

    async def document_ref(self, series_key: str, number: int) -> str | None:
        """Document holding the reservation, None if free or unattributed."""
        async with self._lock:
            return self._series.get(series_key, {}).get(number)
