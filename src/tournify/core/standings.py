"""Pool standings.

Standings are a pure function of the pool roster and its completed matches.
They are recomputed on every read; nothing here caches or mutates state.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

from tournify.models.constants import MatchStatus
from tournify.models.team import PointsRule, Standing, Team

if TYPE_CHECKING:
    from tournify.db.repository import Repository

logger = logging.getLogger(__name__)


class ScoredMatch(Protocol):
    team1_id: int | None
    team2_id: int | None
    score1: int | None
    score2: int | None
    status: str


def rank_key(standing: Standing) -> tuple[int, int, int]:
    """Sort key: points, then goal difference, then goals for (all descending)."""
    return (-standing.points, -standing.goal_difference, -standing.goals_for)


def compute_standings(
    teams: Sequence[Team],
    matches: Sequence[ScoredMatch],
    points: PointsRule | None = None,
) -> list[Standing]:
    """Compute and rank standings for *teams* from *matches*.

    Only ``completed`` matches count. A completed match still missing a
    score is skipped for that team. Teams tied on points, goal difference
    and goals for keep their roster order (the sort is stable); there is no
    head-to-head tie-break. *points* defaults to 3/1/0.
    """
    points = points or PointsRule()
    standings: list[Standing] = []

    for team in teams:
        standing = Standing(team=team)
        for match in matches:
            if match.status != MatchStatus.COMPLETED:
                continue
            if team.id not in (match.team1_id, match.team2_id):
                continue
            if match.score1 is None or match.score2 is None:
                continue

            if match.team1_id == team.id:
                team_score, opponent_score = match.score1, match.score2
            else:
                team_score, opponent_score = match.score2, match.score1

            standing.played += 1
            standing.goals_for += team_score
            standing.goals_against += opponent_score
            if team_score > opponent_score:
                standing.won += 1
                standing.points += points.win
            elif team_score == opponent_score:
                standing.drawn += 1
                standing.points += points.draw
            else:
                standing.lost += 1
                standing.points += points.loss
        standings.append(standing)

    return sorted(standings, key=rank_key)


async def get_standings(repo: Repository, pool_id: int) -> list[Standing]:
    """Read a pool's roster and matches and return its current ranking.

    Pool standings always award 3/1/0; the tournament's stored points
    columns are informational only.
    """
    team_rows = await repo.list_teams_in_pool(pool_id)
    if not team_rows:
        return []
    matches = await repo.list_matches_in_pool(pool_id)

    teams = [Team(id=t.id, name=t.name, logo_url=t.logo_url) for t in team_rows]
    standings = compute_standings(teams, matches)
    logger.debug(
        "standings_computed pool=%s teams=%d matches=%d", pool_id, len(teams), len(matches)
    )
    return standings
