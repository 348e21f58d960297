"""Match lifecycle: score submission, manual creation and typed updates.

Score submission is the only path that completes a match. It sets both
scores and forces ``completed`` in one update; re-submitting overwrites the
previous result. Generic updates apply exactly the fields they carry and do
not touch ``status`` on their own.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tournify.errors import MatchNotFound, ValidationError
from tournify.models.constants import SCORE_MAX, SCORE_MIN, MatchStatus
from tournify.models.match import MatchCreate, MatchUpdate

if TYPE_CHECKING:
    from tournify.core.event_bus import EventBus
    from tournify.db.models import MatchRow
    from tournify.db.repository import Repository

logger = logging.getLogger(__name__)


def validate_score(value: object, side: str = "score") -> int:
    """Return *value* if it is an integer score in range, else raise ValidationError."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{side} must be an integer")
    if not SCORE_MIN <= value <= SCORE_MAX:
        raise ValidationError(f"{side} must be between {SCORE_MIN} and {SCORE_MAX}, got {value}")
    return value


def match_to_dict(match: MatchRow) -> dict:
    return {
        "id": match.id,
        "tournament_id": match.tournament_id,
        "phase_id": match.phase_id,
        "pool_id": match.pool_id,
        "bracket_id": match.bracket_id,
        "team1_id": match.team1_id,
        "team2_id": match.team2_id,
        "score1": match.score1,
        "score2": match.score2,
        "scheduled_time": match.scheduled_time.isoformat() if match.scheduled_time else None,
        "field_id": match.field_id,
        "status": match.status,
        "match_number": match.match_number,
    }


async def submit_score(
    repo: Repository,
    match_id: int,
    score1: int,
    score2: int,
    event_bus: EventBus | None = None,
) -> MatchRow:
    """Record a final score and complete the match.

    Raises:
        ValidationError: a score is not an integer in 0..99.
        MatchNotFound: no match with this id.
    """
    validate_score(score1, "score1")
    validate_score(score2, "score2")

    match = await repo.update_match(
        match_id,
        MatchUpdate(score1=score1, score2=score2, status=MatchStatus.COMPLETED),
    )
    if match is None:
        raise MatchNotFound(match_id)

    logger.info(
        "score_submitted match=%s pool=%s score=%d-%d", match_id, match.pool_id, score1, score2
    )
    if event_bus is not None:
        await event_bus.publish(
            "match.score_submitted",
            {
                "match_id": match.id,
                "pool_id": match.pool_id,
                "tournament_id": match.tournament_id,
                "score1": score1,
                "score2": score2,
            },
        )
    return match


async def create_match(
    repo: Repository,
    data: MatchCreate,
    event_bus: EventBus | None = None,
) -> MatchRow:
    """Create one match by hand. Pool and bracket matches are exclusive.

    Every referenced id must exist and belong to the match's tournament.
    """
    if data.pool_id is not None and data.bracket_id is not None:
        raise ValidationError("A match belongs to a pool or a bracket, not both")
    if await repo.get_tournament(data.tournament_id) is None:
        raise ValidationError(f"Tournament {data.tournament_id} does not exist")
    await repo.ensure_in_tournament(
        data.tournament_id,
        phase_id=data.phase_id,
        pool_id=data.pool_id,
        bracket_id=data.bracket_id,
        team_ids=(data.team1_id, data.team2_id),
        field_ids=(data.field_id,),
    )

    record = data.model_dump()
    if data.pool_id is not None and data.phase_id is None:
        record["phase_id"] = await repo.get_pool_phase_id(data.pool_id)
    record["status"] = MatchStatus.SCHEDULED.value

    match = await repo.insert_match(record)
    logger.info("match_created match=%s tournament=%s", match.id, match.tournament_id)
    if event_bus is not None:
        await event_bus.publish("match.updated", match_to_dict(match))
    return match


async def update_match(
    repo: Repository,
    match_id: int,
    update: MatchUpdate,
    event_bus: EventBus | None = None,
) -> MatchRow:
    """Apply a typed partial update.

    Scores passed here are range-checked like a submission, but the status
    is left as given: clearing a score does not reopen a completed match.
    """
    changes = update.changes()
    for side in ("score1", "score2"):
        if changes.get(side) is not None:
            validate_score(changes[side], side)

    existing = await repo.get_match(match_id)
    if existing is None:
        raise MatchNotFound(match_id)
    await repo.ensure_in_tournament(
        existing.tournament_id,
        team_ids=(changes.get("team1_id"), changes.get("team2_id")),
        field_ids=(changes.get("field_id"),),
    )

    match = await repo.update_match(match_id, update)
    if match is None:
        raise MatchNotFound(match_id)

    logger.info("match_updated match=%s fields=%s", match_id, ",".join(sorted(changes)))
    if event_bus is not None:
        await event_bus.publish("match.updated", match_to_dict(match))
    return match
