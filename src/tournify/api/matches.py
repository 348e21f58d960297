"""Match endpoints: calendar generation, manual edits and score submission."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel, Field

from tournify.api.deps import EventBusDep, RepoDep
from tournify.core.matches import create_match, match_to_dict, submit_score, update_match
from tournify.core.scheduler import generate_matches
from tournify.models.match import MatchCreate, MatchUpdate

router = APIRouter(prefix="/api/matches", tags=["matches"])


class GenerateMatchesRequest(BaseModel):
    """Parameters for a round-robin calendar.

    ``field_ids`` order decides which field each pair lands on. Leaving
    ``pool_id`` out schedules every team of the tournament.
    """

    tournament_id: int
    pool_id: int | None = None
    start_time: datetime
    match_duration: int = Field(ge=0)
    break_duration: int = Field(ge=0)
    field_ids: list[int]


class SubmitScoreRequest(BaseModel):
    score1: int
    score2: int


@router.get("")
async def list_matches(tournament_id: int, repo: RepoDep) -> dict:
    """List a tournament's matches in calendar order."""
    matches = await repo.list_matches_in_tournament(tournament_id)
    return {"data": [match_to_dict(m) for m in matches]}


@router.post("/generate")
async def generate(body: GenerateMatchesRequest, repo: RepoDep, bus: EventBusDep) -> dict:
    count = await generate_matches(
        repo,
        tournament_id=body.tournament_id,
        pool_id=body.pool_id,
        start_time=body.start_time,
        match_duration_minutes=body.match_duration,
        break_duration_minutes=body.break_duration,
        field_ids=body.field_ids,
        event_bus=bus,
    )
    return {"data": {"count": count}}


@router.post("")
async def create(body: MatchCreate, repo: RepoDep, bus: EventBusDep) -> dict:
    match = await create_match(repo, body, event_bus=bus)
    return {"data": match_to_dict(match)}


@router.patch("/{match_id}")
async def update(match_id: int, body: MatchUpdate, repo: RepoDep, bus: EventBusDep) -> dict:
    match = await update_match(repo, match_id, body, event_bus=bus)
    return {"data": match_to_dict(match)}


@router.post("/{match_id}/score")
async def score(
    match_id: int,
    body: SubmitScoreRequest,
    repo: RepoDep,
    bus: EventBusDep,
) -> dict:
    """Record a final score (0-99 each side) and mark the match completed."""
    await submit_score(repo, match_id, body.score1, body.score2, event_bus=bus)
    return {"data": {"success": True}}
