"""Error taxonomy for the scheduling and standings engine.

Core code raises these; the API layer maps each family to an HTTP status
(see ``tournify.main``). Messages are short and meant for the calling layer
to wrap, not for direct display.
"""

from __future__ import annotations


class TournifyError(Exception):
    """Base class for every error the engine raises on purpose."""


class ValidationError(TournifyError):
    """Malformed input at the engine boundary (score range, durations, ...)."""


class InsufficientTeams(TournifyError):
    """Fewer than two teams are available for scheduling."""

    def __init__(self, team_count: int) -> None:
        self.team_count = team_count
        super().__init__(f"At least 2 teams are required to schedule matches, got {team_count}")


class NoFieldsConfigured(TournifyError):
    """Scheduling was attempted without any field."""

    def __init__(self) -> None:
        super().__init__("At least one field is required to schedule matches")


class NotFound(TournifyError):
    """A referenced entity does not exist."""

    entity = "Entity"

    def __init__(self, entity_id: int) -> None:
        self.entity_id = entity_id
        super().__init__(f"{self.entity} {entity_id} not found")


class TournamentNotFound(NotFound):
    entity = "Tournament"


class PoolNotFound(NotFound):
    entity = "Pool"


class MatchNotFound(NotFound):
    entity = "Match"


class FieldNotFound(NotFound):
    entity = "Field"


class StorageUnavailable(TournifyError):
    """The underlying data store could not be reached. Never retried locally."""
