"""FastAPI dependency injection for database sessions, repository and event bus."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from tournify.core.event_bus import EventBus
from tournify.db.engine import create_session_factory, session_scope
from tournify.db.repository import Repository


async def get_engine(request: Request) -> AsyncEngine:
    """Get the database engine from app state."""
    return request.app.state.engine


async def get_session(
    engine: Annotated[AsyncEngine, Depends(get_engine)],
) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session scoped to the request."""
    async with session_scope(create_session_factory(engine)) as session:
        yield session


async def get_repo(session: Annotated[AsyncSession, Depends(get_session)]) -> Repository:
    """Get a repository instance bound to the current session."""
    return Repository(session)


async def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus


RepoDep = Annotated[Repository, Depends(get_repo)]
EventBusDep = Annotated[EventBus, Depends(get_event_bus)]
