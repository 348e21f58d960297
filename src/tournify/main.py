"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tournify.api.brackets import router as brackets_router
from tournify.api.events import router as events_router
from tournify.api.matches import router as matches_router
from tournify.api.pools import router as pools_router
from tournify.api.tournaments import router as tournaments_router
from tournify.config import Settings
from tournify.core.event_bus import EventBus
from tournify.db.engine import create_engine, create_tables
from tournify.errors import (
    InsufficientTeams,
    NoFieldsConfigured,
    NotFound,
    StorageUnavailable,
    TournifyError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# First matching family wins; unknown TournifyError subclasses map to 500.
ERROR_STATUS: dict[type[TournifyError], int] = {
    ValidationError: 400,
    NotFound: 404,
    InsufficientTeams: 422,
    NoFieldsConfigured: 422,
    StorageUnavailable: 503,
}


def _status_for(exc: TournifyError) -> int:
    for exc_type, status in ERROR_STATUS.items():
        if isinstance(exc, exc_type):
            return status
    return 500


async def _tournify_error_handler(request: Request, exc: TournifyError) -> JSONResponse:
    status = _status_for(exc)
    if status >= 500:
        logger.error("request_failed path=%s error=%s", request.url.path, exc)
    return JSONResponse(
        status_code=status,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: create engine and tables. Shutdown: dispose the engine."""
    settings: Settings = app.state.settings
    engine = create_engine(settings.database_url)
    await create_tables(engine)
    app.state.engine = engine
    logger.info("database_ready env=%s", settings.tournify_env)

    yield

    await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the Tournify FastAPI application."""
    settings = settings or Settings()

    logging.basicConfig(
        level=getattr(logging, settings.tournify_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Tournify",
        version="0.1.0",
        description="Tournament pools, round-robin calendars and live standings",
        docs_url=None if settings.is_production else "/docs",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.event_bus = EventBus()
    app.state.sse_semaphore = asyncio.Semaphore(settings.tournify_sse_max_connections)

    app.add_exception_handler(TournifyError, _tournify_error_handler)

    app.include_router(tournaments_router)
    app.include_router(pools_router)
    app.include_router(brackets_router)
    app.include_router(matches_router)
    app.include_router(events_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "env": settings.tournify_env}

    return app


app = create_app()
