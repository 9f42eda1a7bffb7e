"""Sequence store on the relational database."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select

from billing.models.sequence_reservation import SequenceReservation
from billing.services.numbering.exceptions import StoreUnavailable
from billing.services.numbering.store import ReserveResult

logger = structlog.get_logger(__name__)


class SqlSequenceStore:
    """Sequence store backed by the ``sequence_reservations`` table.

    Every operation runs in its own short session, so a reservation is
    committed before ``try_reserve`` returns. The unique constraint on
    (series_key, number) decides races between concurrent inserts.

    Usage:
        store = SqlSequenceStore(async_session_maker)
        allocator = SequenceAllocator(store)
    """

    atomic_reserve = True

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    @asynccontextmanager
    async def _session(self, operation: str, series_key: str) -> AsyncIterator[AsyncSession]:
        """Open a session, mapping driver/connection failures to StoreUnavailable."""
        try:
            async with self.session_maker() as session:
                yield session
        except (OperationalError, InterfaceError, OSError) as e:
            logger.error(
                "Sequence store unavailable",
                operation=operation,
                series_key=series_key,
                error=str(e),
            )
            raise StoreUnavailable(f"Sequence store unavailable during {operation}") from e

    async def list_reserved(self, series_key: str) -> set[int]:
        async with self._session("list_reserved", series_key) as session:
            result = await session.execute(
                select(SequenceReservation.number).where(SequenceReservation.series_key == series_key)
            )
            return set(result.scalars().all())

    async def try_reserve(self, series_key: str, number: int, document_ref: str | None = None) -> ReserveResult:
        async with self._session("try_reserve", series_key) as session:
            session.add(SequenceReservation(series_key=series_key, number=number, document_ref=document_ref))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                # Only a row for the same (series_key, number) counts as a lost race
                if await self._is_reserved(session, series_key, number):
                    logger.debug("Number already reserved", series_key=series_key, number=number)
                    return ReserveResult.ALREADY_RESERVED
                raise
            return ReserveResult.RESERVED

    async def release(self, series_key: str, number: int) -> None:
        async with self._session("release", series_key) as session:
            await session.execute(
                delete(SequenceReservation).where(
                    SequenceReservation.series_key == series_key,  # type: ignore[arg-type]
                    SequenceReservation.number == number,  # type: ignore[arg-type]
                )
            )
            await session.commit()

    async def document_ref(self, series_key: str, number: int) -> str | None:
        """Document holding the reservation, None if free or unattributed."""
        async with self._session("document_ref", series_key) as session:
            result = await session.execute(
                select(SequenceReservation.document_ref).where(
                    SequenceReservation.series_key == series_key,
                    SequenceReservation.number == number,
                )
            )
            return result.scalars().first()

    @staticmethod
    async def _is_reserved(session: AsyncSession, series_key: str, number: int) -> bool:
        result = await session.execute(
            select(SequenceReservation.id).where(
                SequenceReservation.series_key == series_key,
                SequenceReservation.number == number,
            )
        )
        return result.first() is not None
