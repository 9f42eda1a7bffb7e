"""Operator CLI for sequence numbering.

Usage:
    python -m billing.scripts.numbering_cli allocate "org_01:invoice:24-25" --document-ref inv_123
    python -m billing.scripts.numbering_cli release "org_01:invoice:24-25" 7
    python -m billing.scripts.numbering_cli claim "org_01:invoice:24-25" 42 --document-ref imported_42
    python -m billing.scripts.numbering_cli reserved "org_01:invoice:24-25" --refs
"""

import asyncio
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import TypeVar

import click
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

import billing.models  # noqa: F401
from billing.config import settings
from billing.logging import setup_logging
from billing.services.exceptions import ServiceError
from billing.services.numbering.allocator import SequenceAllocator
from billing.services.numbering.sql_store import SqlSequenceStore

T = TypeVar("T")


@asynccontextmanager
async def cli_session_maker(database_url: str) -> AsyncGenerator[async_sessionmaker[AsyncSession]]:
    """Session maker bound to a fresh engine for the current event loop.

    Each asyncio.run() call creates a new event loop, so the engine is created
    and disposed inside it.
    """
    engine = create_async_engine(database_url, echo=False, future=True)
    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()


def _run(database_url: str, fn: Callable[[SequenceAllocator], Awaitable[T]]) -> T:
    async def runner() -> T:
        async with cli_session_maker(database_url) as session_maker:
            return await fn(SequenceAllocator(SqlSequenceStore(session_maker)))

    try:
        return asyncio.run(runner())
    except ServiceError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--database-url", default=lambda: settings.database_url, show_default="from settings")
@click.pass_context
def cli(ctx: click.Context, database_url: str) -> None:
    """Sequence numbering administration."""
    setup_logging()
    ctx.obj = database_url


@cli.command("init-db")
@click.pass_obj
def init_db(database_url: str) -> None:
    """Create missing tables (development databases without migrations)."""

    async def create() -> None:
        engine = create_async_engine(database_url, echo=False, future=True)
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        await engine.dispose()

    asyncio.run(create())
    click.echo("Tables created")


@cli.command()
@click.argument("series_key")
@click.option("--document-ref", default=None, help="Document the number is reserved for.")
@click.pass_obj
def allocate(database_url: str, series_key: str, document_ref: str | None) -> None:
    """Reserve the lowest free number of SERIES_KEY."""
    number = _run(database_url, lambda allocator: allocator.allocate_next(series_key, document_ref=document_ref))
    click.echo(number)


@cli.command()
@click.argument("series_key")
@click.argument("number", type=click.IntRange(min=1))
@click.pass_obj
def release(database_url: str, series_key: str, number: int) -> None:
    """Release NUMBER in SERIES_KEY."""
    _run(database_url, lambda allocator: allocator.release(series_key, number))
    click.echo(f"Released {number} in {series_key}")


@cli.command()
@click.argument("series_key")
@click.argument("number", type=click.IntRange(min=1))
@click.option("--document-ref", default=None, help="Document the number is reserved for.")
@click.pass_obj
def claim(database_url: str, series_key: str, number: int, document_ref: str | None) -> None:
    """Reserve a specific NUMBER in SERIES_KEY (imported or manually numbered documents)."""
    _run(database_url, lambda allocator: allocator.claim(series_key, number, document_ref=document_ref))
    click.echo(f"Claimed {number} in {series_key}")


@cli.command()
@click.argument("series_key")
@click.option("--refs", is_flag=True, help="Also show the document holding each number.")
@click.pass_obj
def reserved(database_url: str, series_key: str, refs: bool) -> None:
    """List reserved numbers of SERIES_KEY."""

    async def fetch(allocator: SequenceAllocator) -> list[tuple[int, str | None]]:
        numbers = await allocator.list_reserved(series_key)
        if not refs:
            return [(number, None) for number in numbers]
        return [(number, await allocator.document_ref(series_key, number)) for number in numbers]

    for number, document_ref in _run(database_url, fetch):
        click.echo(f"{number}\t{document_ref or '-'}" if refs else number)


@cli.command()
@click.argument("series_key")
@click.pass_obj
def preview(database_url: str, series_key: str) -> None:
    """Show the number the next allocation in SERIES_KEY would get."""
    click.echo(_run(database_url, lambda allocator: allocator.peek_next(series_key)))


if __name__ == "__main__":
    cli()
