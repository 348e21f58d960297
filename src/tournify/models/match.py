"""Match input models: manual creation and typed partial updates.

``MatchUpdate`` replaces free-form partial dicts. Only fields explicitly set
by the caller are applied (``model_dump(exclude_unset=True)``), so passing
``score1=None`` clears a score while omitting it leaves the score alone.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from tournify.models.constants import SCORE_MAX, SCORE_MIN, MatchStatus


def to_utc_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC.

    SQLite stores datetimes without an offset, so every kick-off time is
    kept in UTC.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


UtcDatetime = Annotated[datetime, AfterValidator(to_utc_naive)]


class MatchCreate(BaseModel):
    """A single manually created match (pool, bracket or friendly)."""

    tournament_id: int
    phase_id: int | None = None
    pool_id: int | None = None
    bracket_id: int | None = None
    team1_id: int | None = None
    team2_id: int | None = None
    scheduled_time: UtcDatetime | None = None
    field_id: int | None = None
    match_number: str | None = Field(default=None, max_length=20)


class MatchUpdate(BaseModel):
    """The mutable attributes of a match. Unset fields are left untouched."""

    model_config = ConfigDict(use_enum_values=True)

    team1_id: int | None = None
    team2_id: int | None = None
    score1: int | None = Field(default=None, ge=SCORE_MIN, le=SCORE_MAX)
    score2: int | None = Field(default=None, ge=SCORE_MIN, le=SCORE_MAX)
    scheduled_time: UtcDatetime | None = None
    field_id: int | None = None
    status: MatchStatus | None = None

    def changes(self) -> dict[str, object]:
        """Return only the explicitly set attributes, ready for an ORM update."""
        return self.model_dump(exclude_unset=True)
