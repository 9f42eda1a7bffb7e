"""In-process mutual exclusion per series key."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class SeriesLocks:
    """One asyncio.Lock per series key, dropped once nobody holds or waits on it.

    Used when the store cannot decide reservation races itself. Only
    serializes callers within this process.

    Usage:
        async with locks.hold("org_01:invoice:24-25"):
            ...
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, series_key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(series_key, asyncio.Lock())
        self._users[series_key] = self._users.get(series_key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[series_key] -= 1
            if self._users[series_key] == 0:
                del self._users[series_key]
                del self._locks[series_key]

    def __len__(self) -> int:
        return len(self._locks)
