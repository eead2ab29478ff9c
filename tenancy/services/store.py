"""Helpers for running ordered write steps against the store."""

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.core.errors import ServiceError, StoreFailure


@asynccontextmanager
async def store_step(
    session: AsyncSession,
    step: str,
    on_conflict: Callable[[], ServiceError] | None = None,
) -> AsyncIterator[None]:
    """Run one named step and flush it, tagging store errors with ``step``.

    ``on_conflict`` turns a unique-constraint violation into a domain error,
    for races the read-side pre-checks cannot rule out.
    """
    try:
        yield
        await session.flush()
    except IntegrityError as exc:
        if on_conflict is not None:
            raise on_conflict() from exc
        raise StoreFailure(step, exc) from exc
    except SQLAlchemyError as exc:
        raise StoreFailure(step, exc) from exc


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[None]:
    """Commit everything written inside the block, or nothing at all."""
    try:
        yield
    except BaseException:
        await session.rollback()
        raise
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise StoreFailure("commit", exc) from exc
