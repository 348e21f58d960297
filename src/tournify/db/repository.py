"""Repository pattern for database access.

Wraps SQLAlchemy async sessions. This is the storage collaborator the
scheduling and standings engine talks to; it never commits on its own.
The caller's session scope decides when a unit of work is durable.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tournify.db.models import (
    BracketRow,
    FieldRow,
    MatchRow,
    PhaseRow,
    PoolRow,
    PoolTeamRow,
    TeamRow,
    TournamentRow,
)
from tournify.errors import PoolNotFound, ValidationError
from tournify.models.match import MatchUpdate


class Repository:
    """Async repository for all database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # --- Tournaments / Phases ---

    async def create_tournament(
        self,
        name: str,
        format: str,
        sport: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        points_win: int = 3,
        points_draw: int = 1,
        points_loss: int = 0,
    ) -> TournamentRow:
        row = TournamentRow(
            name=name,
            format=format,
            sport=sport,
            start_date=start_date,
            end_date=end_date,
            points_win=points_win,
            points_draw=points_draw,
            points_loss=points_loss,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_tournament(self, tournament_id: int) -> TournamentRow | None:
        return await self.session.get(TournamentRow, tournament_id)

    async def create_phase(
        self,
        tournament_id: int,
        name: str,
        type: str,
        order: int,
    ) -> PhaseRow:
        row = PhaseRow(tournament_id=tournament_id, name=name, type=type, order=order)
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_phase(self, phase_id: int) -> PhaseRow | None:
        return await self.session.get(PhaseRow, phase_id)

    async def list_phases(self, tournament_id: int) -> list[PhaseRow]:
        stmt = (
            select(PhaseRow)
            .where(PhaseRow.tournament_id == tournament_id)
            .order_by(PhaseRow.order, PhaseRow.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # --- Teams ---

    async def create_team(
        self,
        tournament_id: int,
        name: str,
        logo_url: str | None = None,
    ) -> TeamRow:
        row = TeamRow(tournament_id=tournament_id, name=name, logo_url=logo_url)
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_team(self, team_id: int) -> TeamRow | None:
        return await self.session.get(TeamRow, team_id)

    async def list_teams_in_tournament(self, tournament_id: int) -> list[TeamRow]:
        """All teams registered to a tournament, in registration order."""
        stmt = select(TeamRow).where(TeamRow.tournament_id == tournament_id).order_by(TeamRow.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # --- Pools ---

    async def create_pool(self, phase_id: int, name: str, emoji: str | None = None) -> PoolRow:
        row = PoolRow(phase_id=phase_id, name=name, emoji=emoji)
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_pool(self, pool_id: int) -> PoolRow | None:
        return await self.session.get(PoolRow, pool_id)

    async def assign_team_to_pool(self, pool_id: int, team_id: int) -> PoolTeamRow:
        """Assign a team to a pool.

        Raises ValidationError if the team is unknown, belongs to another
        tournament, or already sits in a pool; the unique constraint on
        ``pool_teams.team_id`` backs the last rule up at the store level.
        """
        tournament_id = await self.get_pool_tournament_id(pool_id)
        if tournament_id is None:
            raise PoolNotFound(pool_id)
        await self.ensure_in_tournament(tournament_id, team_ids=[team_id])

        stmt = select(PoolTeamRow).where(PoolTeamRow.team_id == team_id)
        existing = (await self.session.execute(stmt)).scalar_one_or_none()
        if existing is not None:
            raise ValidationError(f"Team {team_id} is already assigned to pool {existing.pool_id}")
        row = PoolTeamRow(pool_id=pool_id, team_id=team_id)
        self.session.add(row)
        await self.session.flush()
        return row

    async def list_teams_in_pool(self, pool_id: int) -> list[TeamRow]:
        """Teams assigned to a pool, in assignment order."""
        stmt = (
            select(TeamRow)
            .join(PoolTeamRow, PoolTeamRow.team_id == TeamRow.id)
            .where(PoolTeamRow.pool_id == pool_id)
            .order_by(PoolTeamRow.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_pool_phase_id(self, pool_id: int) -> int | None:
        stmt = select(PoolRow.phase_id).where(PoolRow.id == pool_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_pool_tournament_id(self, pool_id: int) -> int | None:
        """Tournament owning a pool (through its phase), or None if unknown."""
        stmt = (
            select(PhaseRow.tournament_id)
            .join(PoolRow, PoolRow.phase_id == PhaseRow.id)
            .where(PoolRow.id == pool_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_pools(self, phase_id: int) -> list[PoolRow]:
        stmt = select(PoolRow).where(PoolRow.phase_id == phase_id).order_by(PoolRow.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # --- Fields / Brackets ---

    async def create_field(self, tournament_id: int, name: str, order: int) -> FieldRow:
        row = FieldRow(tournament_id=tournament_id, name=name, order=order)
        self.session.add(row)
        await self.session.flush()
        return row

    async def list_fields(self, tournament_id: int) -> list[FieldRow]:
        stmt = (
            select(FieldRow)
            .where(FieldRow.tournament_id == tournament_id)
            .order_by(FieldRow.order, FieldRow.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_field(self, field_id: int) -> FieldRow | None:
        return await self.session.get(FieldRow, field_id)

    async def delete_field(self, field: FieldRow) -> None:
        """Delete a field. Matches played on it keep their slot but lose the field."""
        await self.session.delete(field)
        await self.session.flush()

    async def create_bracket(
        self,
        phase_id: int,
        name: str,
        round: str | None = None,
        qualification_rule: list[dict] | None = None,
    ) -> BracketRow:
        row = BracketRow(
            phase_id=phase_id,
            name=name,
            round=round,
            qualification_rule=qualification_rule,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def list_brackets(self, phase_id: int) -> list[BracketRow]:
        stmt = select(BracketRow).where(BracketRow.phase_id == phase_id).order_by(BracketRow.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_bracket_tournament_id(self, bracket_id: int) -> int | None:
        """Tournament owning a bracket (through its phase), or None if unknown."""
        stmt = (
            select(PhaseRow.tournament_id)
            .join(BracketRow, BracketRow.phase_id == PhaseRow.id)
            .where(BracketRow.id == bracket_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    # --- Reference checks ---

    async def ensure_in_tournament(
        self,
        tournament_id: int,
        *,
        phase_id: int | None = None,
        pool_id: int | None = None,
        bracket_id: int | None = None,
        team_ids: Iterable[int | None] = (),
        field_ids: Iterable[int | None] = (),
    ) -> None:
        """Raise ValidationError unless every given id exists in *tournament_id*.

        ``None`` ids are skipped (TBD teams, unscheduled matches).
        """
        owners: list[tuple[str, int, int | None]] = []
        if phase_id is not None:
            phase = await self.get_phase(phase_id)
            owners.append(("Phase", phase_id, phase.tournament_id if phase else None))
        if pool_id is not None:
            owners.append(("Pool", pool_id, await self.get_pool_tournament_id(pool_id)))
        if bracket_id is not None:
            owner = await self.get_bracket_tournament_id(bracket_id)
            owners.append(("Bracket", bracket_id, owner))
        for team_id in team_ids:
            if team_id is not None:
                team = await self.get_team(team_id)
                owners.append(("Team", team_id, team.tournament_id if team else None))
        for field_id in field_ids:
            if field_id is not None:
                field = await self.get_field(field_id)
                owners.append(("Field", field_id, field.tournament_id if field else None))

        for label, ref_id, owner in owners:
            if owner != tournament_id:
                raise ValidationError(
                    f"{label} {ref_id} does not belong to tournament {tournament_id}"
                )

    # --- Matches ---

    async def insert_match(self, record: Mapping[str, object]) -> MatchRow:
        row = MatchRow(**record)
        self.session.add(row)
        await self.session.flush()
        return row

    async def insert_matches(self, records: Iterable[Mapping[str, object]]) -> list[MatchRow]:
        """Insert a batch of matches with a single flush."""
        rows = [MatchRow(**record) for record in records]
        self.session.add_all(rows)
        await self.session.flush()
        return rows

    async def get_match(self, match_id: int) -> MatchRow | None:
        return await self.session.get(MatchRow, match_id)

    async def update_match(self, match_id: int, update: MatchUpdate) -> MatchRow | None:
        """Apply the explicitly set fields of *update*. Returns None if missing."""
        match = await self.get_match(match_id)
        if match:
            for key, value in update.changes().items():
                setattr(match, key, value)
            await self.session.flush()
        return match

    async def list_matches_in_pool(self, pool_id: int) -> list[MatchRow]:
        stmt = select(MatchRow).where(MatchRow.pool_id == pool_id).order_by(MatchRow.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_matches_in_tournament(self, tournament_id: int) -> list[MatchRow]:
        """All matches of a tournament, unscheduled ones last."""
        stmt = (
            select(MatchRow)
            .where(MatchRow.tournament_id == tournament_id)
            .order_by(
                MatchRow.scheduled_time.is_(None),
                MatchRow.scheduled_time,
                MatchRow.id,
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
