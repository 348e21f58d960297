"""Shared test fixtures."""

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from tournify.config import Settings
from tournify.db.engine import create_engine, create_tables, get_session
from tournify.db.repository import Repository


@pytest.fixture
def settings() -> Settings:
    """Test settings with defaults."""
    return Settings(tournify_env="development", database_url="sqlite+aiosqlite:///:memory:")


@pytest.fixture
async def engine() -> AsyncEngine:
    """Create an in-memory SQLite engine with all tables."""
    eng = create_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
async def repo(engine: AsyncEngine) -> Repository:
    """Yield a repository with a session bound to the in-memory database."""
    async with get_session(engine) as session:
        yield Repository(session)


@pytest.fixture
async def pool_setup(repo: Repository) -> dict:
    """A tournament with one pool phase, one pool of four teams and two fields."""
    tournament = await repo.create_tournament("Summer Cup", "pools_brackets", sport="Football")
    phase = await repo.create_phase(tournament.id, "Phase de poules", "pool", 1)
    pool = await repo.create_pool(phase.id, "Poule A")
    teams = [
        await repo.create_team(tournament.id, name) for name in ("Lyon", "Nice", "Brest", "Metz")
    ]
    for team in teams:
        await repo.assign_team_to_pool(pool.id, team.id)
    fields = [
        await repo.create_field(tournament.id, "Terrain 1", 1),
        await repo.create_field(tournament.id, "Terrain 2", 2),
    ]
    return {
        "tournament": tournament,
        "phase": phase,
        "pool": pool,
        "teams": teams,
        "fields": fields,
    }
