"""Tournament, team, field and phase endpoints.

Thin CRUD plumbing so the scheduling and standings engine can be driven
over HTTP. Teams and fields are scoped to their tournament.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel, Field

from tournify.api.deps import RepoDep
from tournify.errors import FieldNotFound, TournamentNotFound
from tournify.models.constants import PhaseType, TournamentFormat

router = APIRouter(prefix="/api/tournaments", tags=["tournaments"])


class CreateTournamentRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    format: TournamentFormat
    sport: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    points_win: int = Field(default=3, ge=0)
    points_draw: int = Field(default=1, ge=0)
    points_loss: int = Field(default=0, ge=0)


class CreateTeamRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    logo_url: str | None = None


class CreateFieldRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    order: int


class CreatePhaseRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: PhaseType
    order: int


async def _require_tournament(repo: RepoDep, tournament_id: int) -> None:
    if await repo.get_tournament(tournament_id) is None:
        raise TournamentNotFound(tournament_id)


@router.post("")
async def create_tournament(body: CreateTournamentRequest, repo: RepoDep) -> dict:
    row = await repo.create_tournament(**{**body.model_dump(), "format": body.format.value})
    return {"data": {"id": row.id, "name": row.name, "format": row.format}}


@router.get("/{tournament_id}")
async def get_tournament(tournament_id: int, repo: RepoDep) -> dict:
    """Get a tournament with its phases and scoring rule."""
    row = await repo.get_tournament(tournament_id)
    if not row:
        raise TournamentNotFound(tournament_id)
    phases = await repo.list_phases(tournament_id)
    return {
        "data": {
            "id": row.id,
            "name": row.name,
            "sport": row.sport,
            "format": row.format,
            "points": {"win": row.points_win, "draw": row.points_draw, "loss": row.points_loss},
            "phases": [
                {"id": p.id, "name": p.name, "type": p.type, "order": p.order} for p in phases
            ],
        },
    }


@router.post("/{tournament_id}/teams")
async def create_team(tournament_id: int, body: CreateTeamRequest, repo: RepoDep) -> dict:
    await _require_tournament(repo, tournament_id)
    row = await repo.create_team(tournament_id, body.name, logo_url=body.logo_url)
    return {"data": {"id": row.id, "name": row.name, "logo_url": row.logo_url}}


@router.get("/{tournament_id}/teams")
async def list_teams(tournament_id: int, repo: RepoDep) -> dict:
    teams = await repo.list_teams_in_tournament(tournament_id)
    return {"data": [{"id": t.id, "name": t.name, "logo_url": t.logo_url} for t in teams]}


@router.post("/{tournament_id}/fields")
async def create_field(tournament_id: int, body: CreateFieldRequest, repo: RepoDep) -> dict:
    await _require_tournament(repo, tournament_id)
    row = await repo.create_field(tournament_id, body.name, body.order)
    return {"data": {"id": row.id, "name": row.name, "order": row.order}}


@router.get("/{tournament_id}/fields")
async def list_fields(tournament_id: int, repo: RepoDep) -> dict:
    """List fields in scheduling order."""
    fields = await repo.list_fields(tournament_id)
    return {"data": [{"id": f.id, "name": f.name, "order": f.order} for f in fields]}


@router.post("/{tournament_id}/phases")
async def create_phase(tournament_id: int, body: CreatePhaseRequest, repo: RepoDep) -> dict:
    await _require_tournament(repo, tournament_id)
    row = await repo.create_phase(tournament_id, body.name, body.type.value, body.order)
    return {"data": {"id": row.id, "name": row.name, "type": row.type, "order": row.order}}


@router.delete("/{tournament_id}/fields/{field_id}")
async def delete_field(tournament_id: int, field_id: int, repo: RepoDep) -> dict:
    """Delete a field. Matches scheduled on it keep their time with no field."""
    field = await repo.get_field(field_id)
    if field is None or field.tournament_id != tournament_id:
        raise FieldNotFound(field_id)
    await repo.delete_field(field)
    return {"data": {"success": True}}
