"""Team and Standing models.

A Standing is a view: it is derived from completed matches on every read
and never persisted.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field


class Team(BaseModel):
    """A team as seen by the scheduler and the standings calculator."""

    id: int
    name: str
    logo_url: str | None = None


class PointsRule(BaseModel):
    """Points awarded per result. Defaults to the football 3/1/0 rule."""

    win: int = Field(default=3, ge=0)
    draw: int = Field(default=1, ge=0)
    loss: int = Field(default=0, ge=0)


class Standing(BaseModel):
    """One team's accumulated results within a pool."""

    team: Team
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against
