"""Round-robin calendar generation.

Builds a match calendar where every team plays every other team once,
spread across the tournament's fields.

Terminology:
  - **pair**: one unordered team pairing, in generation order.
  - **slot**: a fixed-width interval (match duration + break duration)
    during which at most one match per field is played. Slot ``s`` starts
    at ``start_time + s * stride``.

Pairs are enumerated with plain nested indices (team ``i`` vs every
``j > i``). This is deliberately not a rest-balancing scheduler: one team
may play back-to-back slots, and consumers rely on this exact order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from tournify.errors import InsufficientTeams, NoFieldsConfigured, ValidationError
from tournify.models.constants import MatchStatus
from tournify.models.match import to_utc_naive

if TYPE_CHECKING:
    from tournify.core.event_bus import EventBus
    from tournify.db.repository import Repository

logger = logging.getLogger(__name__)


@dataclass
class Matchup:
    """A single scheduled match between two teams."""

    pair_index: int
    slot_index: int
    team1_id: int
    team2_id: int
    field_id: int
    scheduled_time: datetime


def pair_round_robin(team_ids: Sequence[int]) -> list[tuple[int, int]]:
    """Return every unordered pair of *team_ids*, lower index as side 1.

    With 4 teams: (0,1) (0,2) (0,3) (1,2) (1,3) (2,3), i.e. C(4,2)=6 pairs.
    """
    return [
        (team_ids[i], team_ids[j])
        for i in range(len(team_ids))
        for j in range(i + 1, len(team_ids))
    ]


def assign_slots(
    pairs: Sequence[tuple[int, int]],
    field_ids: Sequence[int],
    start_time: datetime,
    match_duration_minutes: int,
    break_duration_minutes: int,
) -> list[Matchup]:
    """Place pairs on fields and time slots.

    Pair ``k`` plays on ``field_ids[k % f]`` in slot ``k // f``: every field
    of a slot is filled before the next slot opens. Fields left over in the
    final slot stay empty.

    Raises:
        NoFieldsConfigured: ``field_ids`` is empty.
        ValidationError: a duration is negative.
    """
    if not field_ids:
        raise NoFieldsConfigured()
    if match_duration_minutes < 0 or break_duration_minutes < 0:
        raise ValidationError("Match and break durations must be non-negative")

    stride = timedelta(minutes=match_duration_minutes + break_duration_minutes)
    field_count = len(field_ids)
    matchups: list[Matchup] = []
    for k, (team1_id, team2_id) in enumerate(pairs):
        slot = k // field_count
        matchups.append(
            Matchup(
                pair_index=k,
                slot_index=slot,
                team1_id=team1_id,
                team2_id=team2_id,
                field_id=field_ids[k % field_count],
                scheduled_time=start_time + slot * stride,
            )
        )
    return matchups


async def generate_matches(
    repo: Repository,
    tournament_id: int,
    pool_id: int | None,
    start_time: datetime,
    match_duration_minutes: int,
    break_duration_minutes: int,
    field_ids: Sequence[int],
    event_bus: EventBus | None = None,
) -> int:
    """Generate and persist a round-robin calendar. Returns the match count.

    The team set is the pool's roster when ``pool_id`` is given, otherwise
    every team registered to the tournament. All rows go out in one flush
    inside the caller's session, so a failure leaves no partial calendar.
    Every field and the pool must belong to ``tournament_id``, otherwise
    ValidationError is raised. An aware ``start_time`` is stored in UTC.
    Calling this twice for the same pool creates a second calendar; callers
    must guard against double generation.
    """
    if not field_ids:
        raise NoFieldsConfigured()
    await repo.ensure_in_tournament(tournament_id, pool_id=pool_id, field_ids=field_ids)
    start_time = to_utc_naive(start_time)

    if pool_id is not None:
        teams = await repo.list_teams_in_pool(pool_id)
        phase_id = await repo.get_pool_phase_id(pool_id)
    else:
        teams = await repo.list_teams_in_tournament(tournament_id)
        phase_id = None

    if len(teams) < 2:
        raise InsufficientTeams(len(teams))

    matchups = assign_slots(
        pair_round_robin([t.id for t in teams]),
        field_ids,
        start_time,
        match_duration_minutes,
        break_duration_minutes,
    )
    await repo.insert_matches(
        {
            "tournament_id": tournament_id,
            "phase_id": phase_id,
            "pool_id": pool_id,
            "bracket_id": None,
            "team1_id": m.team1_id,
            "team2_id": m.team2_id,
            "score1": None,
            "score2": None,
            "scheduled_time": m.scheduled_time,
            "field_id": m.field_id,
            "status": MatchStatus.SCHEDULED.value,
        }
        for m in matchups
    )

    count = len(matchups)
    logger.info(
        "matches_generated tournament=%s pool=%s teams=%d fields=%d count=%d",
        tournament_id,
        pool_id,
        len(teams),
        len(field_ids),
        count,
    )
    if event_bus is not None:
        await event_bus.publish(
            "matches.generated",
            {"tournament_id": tournament_id, "pool_id": pool_id, "count": count},
        )
    return count
