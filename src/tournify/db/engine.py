"""Async SQLAlchemy engine and session factory.

Usage:
    engine = create_engine(settings.database_url)
    async with get_session(engine) as session:
        ...
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tournify.db.models import Base
from tournify.errors import StorageUnavailable, ValidationError

logger = logging.getLogger(__name__)

# Driver-level failures that mean "the store is not reachable". Constraint
# violations surface as ValidationError; programming errors propagate unchanged.
STORAGE_ERRORS: tuple[type[Exception], ...] = (OperationalError, InterfaceError)


def create_engine(database_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    For SQLite, enables WAL journal mode, a busy timeout so concurrent score
    submissions don't fail with "database is locked", and foreign keys.
    """
    is_sqlite = database_url.startswith("sqlite")
    connect_args: dict[str, object] = {"timeout": 15} if is_sqlite else {}

    engine = create_async_engine(database_url, echo=False, connect_args=connect_args)

    if is_sqlite:

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragmas(dbapi_conn: object, connection_record: object) -> None:
            cursor = dbapi_conn.cursor()  # type: ignore[union-attr]
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=15000")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# One session factory per engine instance, keyed by the sync engine's identity
# so test engines stay isolated while production requests share one factory.
_session_factories: dict[int, async_sessionmaker[AsyncSession]] = {}


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return a cached session factory bound to *engine*."""
    key = id(engine.sync_engine)
    if key not in _session_factories:
        _session_factories[key] = async_sessionmaker(engine, expire_on_commit=False)
    return _session_factories[key]


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session that commits on success and rolls back on any error.

    Connection-level failures are re-raised as ``StorageUnavailable`` and
    constraint violations (unknown foreign ids, duplicates) as
    ``ValidationError``. The whole unit of work is discarded, so no partial
    result is ever committed.
    """
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except STORAGE_ERRORS as exc:
            await session.rollback()
            logger.error("storage_unavailable error=%s", exc)
            raise StorageUnavailable(str(exc)) from exc
        except IntegrityError as exc:
            await session.rollback()
            logger.warning("constraint_violation error=%s", exc.orig)
            raise ValidationError(f"Constraint violated: {exc.orig}") from exc
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session bound to *engine* (see ``session_scope``)."""
    async with session_scope(create_session_factory(engine)) as session:
        yield session
