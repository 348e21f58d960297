"""Tests for database layer: engine, ORM models, repository round-trips."""

from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine

from tournify.db.engine import create_session_factory, session_scope
from tournify.db.repository import Repository
from tournify.errors import PoolNotFound, StorageUnavailable, ValidationError
from tournify.models.match import MatchUpdate


class TestTableCreation:
    async def test_all_tables_created(self, engine: AsyncEngine):
        async with engine.connect() as conn:
            tables = await conn.run_sync(
                lambda sync_conn: sync_conn.dialect.get_table_names(sync_conn)
            )
        expected = {
            "tournaments",
            "phases",
            "teams",
            "pools",
            "pool_teams",
            "brackets",
            "fields",
            "matches",
        }
        assert expected.issubset(set(tables))


class TestTournament:
    async def test_create_and_get(self, repo: Repository):
        tournament = await repo.create_tournament("Summer Cup", "pools_brackets", sport="Football")
        retrieved = await repo.get_tournament(tournament.id)
        assert retrieved is not None
        assert retrieved.name == "Summer Cup"
        assert (retrieved.points_win, retrieved.points_draw, retrieved.points_loss) == (3, 1, 0)

    async def test_phases_in_order(self, repo: Repository):
        tournament = await repo.create_tournament("Cup", "pools_brackets")
        await repo.create_phase(tournament.id, "Finales", "bracket", 2)
        await repo.create_phase(tournament.id, "Poules", "pool", 1)
        phases = await repo.list_phases(tournament.id)
        assert [p.name for p in phases] == ["Poules", "Finales"]


class TestPools:
    async def test_roster_in_assignment_order(self, repo: Repository, pool_setup: dict):
        teams = await repo.list_teams_in_pool(pool_setup["pool"].id)
        assert [t.name for t in teams] == ["Lyon", "Nice", "Brest", "Metz"]

    async def test_team_in_one_pool_only(self, repo: Repository, pool_setup: dict):
        other = await repo.create_pool(pool_setup["phase"].id, "Poule B")
        with pytest.raises(ValidationError):
            await repo.assign_team_to_pool(other.id, pool_setup["teams"][0].id)

    async def test_pool_phase_id(self, repo: Repository, pool_setup: dict):
        assert await repo.get_pool_phase_id(pool_setup["pool"].id) == pool_setup["phase"].id
        assert await repo.get_pool_phase_id(9999) is None

    async def test_pool_tournament_id(self, repo: Repository, pool_setup: dict):
        pool_id = pool_setup["pool"].id
        assert await repo.get_pool_tournament_id(pool_id) == pool_setup["tournament"].id
        assert await repo.get_pool_tournament_id(9999) is None

    async def test_list_pools_of_phase(self, repo: Repository, pool_setup: dict):
        await repo.create_pool(pool_setup["phase"].id, "Poule B")
        pools = await repo.list_pools(pool_setup["phase"].id)
        assert [p.name for p in pools] == ["Poule A", "Poule B"]

    async def test_unknown_team_rejected(self, repo: Repository, pool_setup: dict):
        with pytest.raises(ValidationError):
            await repo.assign_team_to_pool(pool_setup["pool"].id, 777)

    async def test_team_from_other_tournament_rejected(self, repo: Repository, pool_setup: dict):
        other = await repo.create_tournament("Winter Cup", "pools_only")
        stranger = await repo.create_team(other.id, "Stranger FC")
        with pytest.raises(ValidationError):
            await repo.assign_team_to_pool(pool_setup["pool"].id, stranger.id)
        roster = await repo.list_teams_in_pool(pool_setup["pool"].id)
        assert "Stranger FC" not in [t.name for t in roster]

    async def test_unknown_pool_rejected(self, repo: Repository, pool_setup: dict):
        with pytest.raises(PoolNotFound):
            await repo.assign_team_to_pool(9999, pool_setup["teams"][0].id)


class TestFields:
    async def test_listed_by_order(self, repo: Repository):
        tournament = await repo.create_tournament("Cup", "plateau")
        await repo.create_field(tournament.id, "Terrain 2", 2)
        await repo.create_field(tournament.id, "Terrain 1", 1)
        fields = await repo.list_fields(tournament.id)
        assert [f.name for f in fields] == ["Terrain 1", "Terrain 2"]

    async def test_delete_unschedules_field(self, repo: Repository, pool_setup: dict):
        field = pool_setup["fields"][0]
        match = await repo.insert_match(
            {"tournament_id": pool_setup["tournament"].id, "field_id": field.id}
        )
        await repo.delete_field(field)
        assert await repo.get_field(field.id) is None

        await repo.session.refresh(match)
        assert match.field_id is None
        remaining = await repo.list_fields(pool_setup["tournament"].id)
        assert [f.name for f in remaining] == ["Terrain 2"]


class TestBrackets:
    async def test_create_and_list(self, repo: Repository, pool_setup: dict):
        phase_id = pool_setup["phase"].id
        rule = [{"pool_rank": 1, "pool_id": pool_setup["pool"].id}]
        final = await repo.create_bracket(phase_id, "Finale", "final", rule)
        await repo.create_bracket(phase_id, "Consolante")

        brackets = await repo.list_brackets(phase_id)
        assert [b.name for b in brackets] == ["Finale", "Consolante"]
        assert brackets[0].qualification_rule == rule
        assert await repo.get_bracket_tournament_id(final.id) == pool_setup["tournament"].id
        assert await repo.get_bracket_tournament_id(9999) is None


class TestReferenceChecks:
    async def test_accepts_own_ids(self, repo: Repository, pool_setup: dict):
        await repo.ensure_in_tournament(
            pool_setup["tournament"].id,
            phase_id=pool_setup["phase"].id,
            pool_id=pool_setup["pool"].id,
            team_ids=[t.id for t in pool_setup["teams"]] + [None],
            field_ids=[f.id for f in pool_setup["fields"]],
        )

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"phase_id": 9999},
            {"pool_id": 9999},
            {"bracket_id": 9999},
            {"team_ids": [9999]},
            {"field_ids": [9999]},
        ],
    )
    async def test_unknown_id(self, repo: Repository, pool_setup: dict, kwargs):
        with pytest.raises(ValidationError):
            await repo.ensure_in_tournament(pool_setup["tournament"].id, **kwargs)

    async def test_ids_of_another_tournament(self, repo: Repository, pool_setup: dict):
        other = await repo.create_tournament("Winter Cup", "pools_only")
        with pytest.raises(ValidationError, match="Pool"):
            await repo.ensure_in_tournament(other.id, pool_id=pool_setup["pool"].id)
        with pytest.raises(ValidationError, match="Field"):
            await repo.ensure_in_tournament(other.id, field_ids=[pool_setup["fields"][0].id])


class TestMatchRoundTrip:
    async def test_insert_batch_and_update(self, repo: Repository, pool_setup: dict):
        lyon, nice, brest, _ = pool_setup["teams"]
        base = {"tournament_id": pool_setup["tournament"].id, "pool_id": pool_setup["pool"].id}
        rows = await repo.insert_matches(
            [
                {**base, "team1_id": lyon.id, "team2_id": nice.id},
                {**base, "team1_id": lyon.id, "team2_id": brest.id},
            ]
        )
        assert all(r.id is not None for r in rows)
        assert all(r.status == "scheduled" for r in rows)

        updated = await repo.update_match(rows[0].id, MatchUpdate(score1=4, score2=0))
        assert updated is not None
        assert (updated.score1, updated.score2) == (4, 0)
        assert await repo.update_match(9999, MatchUpdate(score1=1)) is None

    async def test_tournament_matches_unscheduled_last(self, repo: Repository, pool_setup: dict):
        tid = pool_setup["tournament"].id
        late = await repo.insert_match(
            {"tournament_id": tid, "scheduled_time": datetime(2026, 6, 2)}
        )
        unscheduled = await repo.insert_match({"tournament_id": tid})
        early = await repo.insert_match(
            {"tournament_id": tid, "scheduled_time": datetime(2026, 6, 1)}
        )
        matches = await repo.list_matches_in_tournament(tid)
        assert [m.id for m in matches] == [early.id, late.id, unscheduled.id]


class TestSessionScope:
    async def test_operational_error_becomes_storage_unavailable(self, engine: AsyncEngine):
        factory = create_session_factory(engine)
        with pytest.raises(StorageUnavailable):
            async with session_scope(factory):
                raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    async def test_rollback_on_error(self, engine: AsyncEngine):
        factory = create_session_factory(engine)
        with pytest.raises(ValidationError):
            async with session_scope(factory) as session:
                await Repository(session).create_tournament("Doomed", "friendly")
                raise ValidationError("boom")

        async with session_scope(factory) as session:
            assert await Repository(session).get_tournament(1) is None

    async def test_integrity_error_becomes_validation_error(self, engine: AsyncEngine):
        factory = create_session_factory(engine)
        with pytest.raises(ValidationError):
            async with session_scope(factory) as session:
                await Repository(session).create_pool(9999, "Orphan")

        async with session_scope(factory) as session:
            assert await Repository(session).list_pools(9999) == []
