"""Shared constants for Tournify models.

Placed here so the API layer, the core services and the database layer can
import them without creating a layer violation.
"""

from __future__ import annotations

from enum import StrEnum

# Inclusive bounds for a reported score.
SCORE_MIN = 0
SCORE_MAX = 99


class MatchStatus(StrEnum):
    """Match lifecycle states.

    The str mixin allows direct comparison with the raw status strings
    stored in the database (``row.status == MatchStatus.COMPLETED``).
    """

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TournamentFormat(StrEnum):
    POOLS_BRACKETS = "pools_brackets"
    POOLS_ONLY = "pools_only"
    BRACKETS_ONLY = "brackets_only"
    PLATEAU = "plateau"
    FRIENDLY = "friendly"


class PhaseType(StrEnum):
    POOL = "pool"
    BRACKET = "bracket"
    FRIENDLY = "friendly"

