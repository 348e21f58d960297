"""Pool endpoints: creation, listing, team assignment and standings."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel, Field

from tournify.api.deps import RepoDep
from tournify.core.standings import get_standings
from tournify.errors import PoolNotFound, ValidationError

router = APIRouter(prefix="/api/pools", tags=["pools"])


class CreatePoolRequest(BaseModel):
    phase_id: int
    name: str = Field(min_length=1, max_length=50)
    emoji: str | None = Field(default=None, max_length=10)


class AssignTeamsRequest(BaseModel):
    team_ids: list[int]


@router.get("")
async def list_pools(phase_id: int, repo: RepoDep) -> dict:
    pools = await repo.list_pools(phase_id)
    return {"data": [{"id": p.id, "phase_id": p.phase_id, "name": p.name} for p in pools]}


@router.post("")
async def create_pool(body: CreatePoolRequest, repo: RepoDep) -> dict:
    if await repo.get_phase(body.phase_id) is None:
        raise ValidationError(f"Phase {body.phase_id} does not exist")
    row = await repo.create_pool(body.phase_id, body.name, emoji=body.emoji)
    return {"data": {"id": row.id, "phase_id": row.phase_id, "name": row.name}}


@router.post("/{pool_id}/teams")
async def assign_teams(pool_id: int, body: AssignTeamsRequest, repo: RepoDep) -> dict:
    """Assign teams to a pool.

    Fails as a whole if any team is unknown, registered to another
    tournament, or already placed.
    """
    if await repo.get_pool(pool_id) is None:
        raise PoolNotFound(pool_id)
    for team_id in body.team_ids:
        await repo.assign_team_to_pool(pool_id, team_id)
    return {"data": {"success": True}}


@router.get("/{pool_id}/teams")
async def list_pool_teams(pool_id: int, repo: RepoDep) -> dict:
    teams = await repo.list_teams_in_pool(pool_id)
    return {"data": [{"id": t.id, "name": t.name, "logo_url": t.logo_url} for t in teams]}


@router.get("/{pool_id}/standings")
async def pool_standings(pool_id: int, repo: RepoDep) -> dict:
    """Current ranking of a pool, recomputed from its completed matches."""
    standings = await get_standings(repo, pool_id)
    return {"data": [s.model_dump() for s in standings]}
