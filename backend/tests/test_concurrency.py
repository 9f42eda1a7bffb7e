"""Concurrent callers contending for the same series."""

import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from billing.services.numbering import InMemorySequenceStore, ReserveResult, SequenceAllocator, SqlSequenceStore

SERIES = "org_01:invoice:24-25"


class InterleavingStore(InMemorySequenceStore):
    """Yields to the event loop between the snapshot and the caller's next step.

    Every concurrent caller therefore reads the same snapshot and computes the
    same candidate, maximising lost races.
    """

    async def list_reserved(self, series_key: str) -> set[int]:
        snapshot = await super().list_reserved(series_key)
        await asyncio.sleep(0)
        return snapshot


class SlowAckStore(InMemorySequenceStore):
    """Reservation is written, but the acknowledgement takes a long time."""

    async def try_reserve(self, series_key: str, number: int, document_ref: str | None = None) -> ReserveResult:
        result = await super().try_reserve(series_key, number, document_ref)
        await asyncio.sleep(10)
        return result


@pytest.mark.parametrize("callers", [2, 8, 20])
async def test_concurrent_allocations_on_empty_series_are_one_to_n(callers: int) -> None:
    store = InterleavingStore()
    allocator = SequenceAllocator(store, max_attempts=callers + 1, retry_jitter=0)

    numbers = await asyncio.gather(*(allocator.allocate_next(SERIES, document_ref=f"doc_{i}") for i in range(callers)))

    assert sorted(numbers) == list(range(1, callers + 1))
    assert await store.list_reserved(SERIES) == set(range(1, callers + 1))


async def test_concurrent_allocations_fill_gaps_before_extending() -> None:
    store = InterleavingStore()
    for number in (1, 3, 6):
        await store.try_reserve(SERIES, number)
    allocator = SequenceAllocator(store, max_attempts=10, retry_jitter=0)

    numbers = await asyncio.gather(*(allocator.allocate_next(SERIES) for _ in range(5)))

    assert sorted(numbers) == [2, 4, 5, 7, 8]


async def test_concurrent_series_do_not_interfere() -> None:
    store = InterleavingStore()
    allocator = SequenceAllocator(store, max_attempts=10, retry_jitter=0)
    series = [f"org_{i}:invoice" for i in range(3)]

    numbers = await asyncio.gather(*(allocator.allocate_next(key) for key in series for _ in range(4)))

    assert sorted(numbers) == sorted(list(range(1, 5)) * 3)
    for key in series:
        assert await store.list_reserved(key) == {1, 2, 3, 4}


async def test_abandoned_call_keeps_reservation() -> None:
    store = SlowAckStore()
    allocator = SequenceAllocator(store, retry_jitter=0)

    with pytest.raises(TimeoutError):
        await asyncio.wait_for(allocator.allocate_next(SERIES, document_ref="inv_9"), timeout=0.05)

    assert await store.list_reserved(SERIES) == {1}
    assert await store.document_ref(SERIES, 1) == "inv_9"


async def test_concurrent_allocations_against_database(
    session_maker: async_sessionmaker[AsyncSession],
) -> None:
    callers = 6
    allocator = SequenceAllocator(SqlSequenceStore(session_maker), max_attempts=callers + 2, retry_jitter=0.01)

    numbers = await asyncio.gather(*(allocator.allocate_next(SERIES) for _ in range(callers)))

    assert sorted(numbers) == list(range(1, callers + 1))
