"""Storage boundary of the sequence allocator."""

from enum import StrEnum
from typing import Protocol


class ReserveResult(StrEnum):
    """Outcome of a conditional reservation write."""

    RESERVED = "reserved"
    ALREADY_RESERVED = "already_reserved"


class SequenceStore(Protocol):
    """Durable record of consumed numbers per series.

    Implementations must make ``try_reserve`` an atomic conditional insert:
    of two writers racing for the same (series_key, number) exactly one gets
    RESERVED. Stores that cannot guarantee this set ``atomic_reserve`` to
    False and the allocator serializes allocations per series instead.

    Infrastructure failures are raised as StoreUnavailable.
    """

    atomic_reserve: bool

    async def list_reserved(self, series_key: str) -> set[int]:
        """All numbers currently reserved in the series, from one consistent snapshot."""
        ...

    async def try_reserve(self, series_key: str, number: int, document_ref: str | None = None) -> ReserveResult:
        """Record ``number`` as consumed. Returns ALREADY_RESERVED instead of raising on conflict."""
        ...

    async def release(self, series_key: str, number: int) -> None:
        """Remove the reservation. Releasing a free number is a no-op."""
        ...

    async def document_ref(self, series_key: str, number: int) -> str | None:
        """Document holding the reservation, None if free or unattributed."""
        ...
