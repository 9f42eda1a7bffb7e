"""Shared fixtures for numbering tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

import billing.models  # noqa: F401
from billing.logging import setup_logging
from billing.services.numbering import InMemorySequenceStore, SequenceAllocator

# Route structlog through stdlib before any CLI test swaps sys.stdout
setup_logging()


@pytest.fixture
def memory_store() -> InMemorySequenceStore:
    return InMemorySequenceStore()


@pytest.fixture
def allocator(memory_store: InMemorySequenceStore) -> SequenceAllocator:
    return SequenceAllocator(memory_store, retry_jitter=0)


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'billing.db'}"


@pytest.fixture
async def session_maker(sqlite_url: str) -> AsyncGenerator[async_sessionmaker[AsyncSession]]:
    """Session maker on a fresh SQLite database with all tables created."""
    engine = create_async_engine(sqlite_url, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    async with session_maker() as session:
        yield session
