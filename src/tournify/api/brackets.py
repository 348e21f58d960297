"""Bracket endpoints.

Brackets are stored containers for knockout matches. Nothing here builds a
knockout tree; matches are attached by hand through ``POST /api/matches``.
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel, Field

from tournify.api.deps import RepoDep
from tournify.db.models import BracketRow
from tournify.errors import ValidationError

router = APIRouter(prefix="/api/brackets", tags=["brackets"])


class QualificationEntry(BaseModel):
    pool_rank: int = Field(ge=1)
    pool_id: int | None = None


class CreateBracketRequest(BaseModel):
    phase_id: int
    name: str = Field(min_length=1, max_length=100)
    round: Literal["quarters", "semis", "final", "third_place"] | None = None
    qualification_rule: list[QualificationEntry] | None = None


def _bracket_to_dict(row: BracketRow) -> dict:
    return {
        "id": row.id,
        "phase_id": row.phase_id,
        "name": row.name,
        "round": row.round,
        "qualification_rule": row.qualification_rule,
    }


@router.get("")
async def list_brackets(phase_id: int, repo: RepoDep) -> dict:
    brackets = await repo.list_brackets(phase_id)
    return {"data": [_bracket_to_dict(b) for b in brackets]}


@router.post("")
async def create_bracket(body: CreateBracketRequest, repo: RepoDep) -> dict:
    if await repo.get_phase(body.phase_id) is None:
        raise ValidationError(f"Phase {body.phase_id} does not exist")
    rule = None
    if body.qualification_rule is not None:
        rule = [entry.model_dump() for entry in body.qualification_rule]
    row = await repo.create_bracket(body.phase_id, body.name, body.round, rule)
    return {"data": _bracket_to_dict(row)}
