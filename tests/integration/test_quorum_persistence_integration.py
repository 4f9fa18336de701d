"""Integration tests for the PostgreSQL quorum adapters.

Runs the repositories and the full engine against a real PostgreSQL
container to verify compare-and-set updates, the unique vote constraint,
due-decision queries and JSONB governance parsing.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta
from uuid import UUID, uuid4

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quoroom.bootstrap.quorum_engine import build_quorum_engine
from quoroom.domain.errors import (
    DecisionNotFoundError,
    DuplicateVoteError,
    InvalidStateError,
)
from quoroom.domain.models.decision import (
    Decision,
    DecisionPathway,
    DecisionStatus,
    VoteChoice,
    utc_now,
)
from quoroom.domain.models.governance import (
    DecisionType,
    GovernanceSnapshot,
    RoomGovernanceConfig,
    Threshold,
    TieBreaker,
)
from quoroom.infrastructure.adapters.persistence import (
    PostgresActivityLog,
    PostgresDecisionRepository,
    PostgresRoomRegistry,
    PostgresVoterHealthRepository,
)
from tests.integration.sql_helpers import insert_room

pytestmark = pytest.mark.integration

Factory = async_sessionmaker[AsyncSession]


async def _create_voting(
    repo: PostgresDecisionRepository,
    room_id: UUID,
    minutes: int = 60,
    snapshot: GovernanceSnapshot | None = None,
) -> Decision:
    return await repo.create_decision(
        room_id=room_id,
        proposer_id="w1",
        proposal="Adopt plan",
        decision_type=DecisionType.STRATEGY,
        pathway=DecisionPathway.VOTING,
        snapshot=snapshot or GovernanceSnapshot(),
        status=DecisionStatus.VOTING,
        timeout_at=utc_now() + timedelta(minutes=minutes),
    )


class TestPostgresDecisionRepository:
    """Tests for PostgresDecisionRepository."""

    @pytest.mark.asyncio
    async def test_create_and_get_round_trip(self, session_factory: Factory) -> None:
        repo = PostgresDecisionRepository(session_factory)
        room_id = await insert_room(session_factory)
        snapshot = GovernanceSnapshot(
            threshold=Threshold.SUPERMAJORITY,
            tie_breaker=TieBreaker.NONE,
            min_voters=2,
        )

        created = await _create_voting(repo, room_id, snapshot=snapshot)
        fetched = await repo.get_decision(created.id)

        assert fetched is not None
        assert fetched.snapshot == snapshot
        assert fetched.status == DecisionStatus.VOTING
        assert fetched.resolved_at is None

    @pytest.mark.asyncio
    async def test_terminal_creation_sets_resolved_at(
        self, session_factory: Factory
    ) -> None:
        repo = PostgresDecisionRepository(session_factory)
        room_id = await insert_room(session_factory)

        decision = await repo.create_decision(
            room_id=room_id,
            proposer_id=None,
            proposal="Fix typo",
            decision_type=DecisionType.LOW_IMPACT,
            pathway=DecisionPathway.ANNOUNCEMENT,
            snapshot=GovernanceSnapshot(),
            status=DecisionStatus.APPROVED,
            result="Auto-approved",
        )

        assert decision.resolved_at is not None

    @pytest.mark.asyncio
    async def test_concurrent_cas_has_one_winner(self, session_factory: Factory) -> None:
        repo = PostgresDecisionRepository(session_factory)
        decision = await _create_voting(repo, await insert_room(session_factory))

        results = await asyncio.gather(
            *(
                repo.update_decision_status(
                    decision.id, DecisionStatus.VOTING, target, target.value
                )
                for target in (
                    DecisionStatus.APPROVED,
                    DecisionStatus.REJECTED,
                    DecisionStatus.APPROVED,
                    DecisionStatus.REJECTED,
                )
            )
        )

        assert results.count(True) == 1
        stored = await repo.get_decision(decision.id)
        assert stored is not None
        assert stored.result == stored.status.value
        assert stored.resolved_at is not None

    @pytest.mark.asyncio
    async def test_vote_count_guard(self, session_factory: Factory) -> None:
        repo = PostgresDecisionRepository(session_factory)
        decision = await _create_voting(repo, await insert_room(session_factory))
        await repo.create_vote(decision.id, "w1", VoteChoice.YES)

        stale = await repo.update_decision_status(
            decision.id,
            DecisionStatus.VOTING,
            DecisionStatus.REJECTED,
            "stale",
            expected_vote_count=0,
        )
        current = await repo.update_decision_status(
            decision.id,
            DecisionStatus.VOTING,
            DecisionStatus.APPROVED,
            "current",
            expected_vote_count=1,
        )

        assert (stale, current) == (False, True)
        stored = await repo.get_decision(decision.id)
        assert stored is not None
        assert stored.status == DecisionStatus.APPROVED
        assert stored.result == "current"

    @pytest.mark.asyncio
    async def test_duplicate_vote_rejected(self, session_factory: Factory) -> None:
        repo = PostgresDecisionRepository(session_factory)
        decision = await _create_voting(repo, await insert_room(session_factory))
        await repo.create_vote(decision.id, "w1", VoteChoice.YES, "ok")

        with pytest.raises(DuplicateVoteError):
            await repo.create_vote(decision.id, "w1", VoteChoice.NO)

        [vote] = await repo.get_votes(decision.id)
        assert vote.choice == VoteChoice.YES
        assert vote.reasoning == "ok"

    @pytest.mark.asyncio
    async def test_vote_on_resolved_decision_rejected(
        self, session_factory: Factory
    ) -> None:
        repo = PostgresDecisionRepository(session_factory)
        decision = await _create_voting(repo, await insert_room(session_factory))
        await repo.update_decision_status(
            decision.id, DecisionStatus.VOTING, DecisionStatus.REJECTED, None
        )

        with pytest.raises(InvalidStateError):
            await repo.create_vote(decision.id, "w1", VoteChoice.YES)
        assert await repo.get_votes(decision.id) == []

    @pytest.mark.asyncio
    async def test_vote_on_unknown_decision(self, session_factory: Factory) -> None:
        repo = PostgresDecisionRepository(session_factory)
        with pytest.raises(DecisionNotFoundError):
            await repo.create_vote(uuid4(), "w1", VoteChoice.YES)

    @pytest.mark.asyncio
    async def test_due_decisions_ordered_by_deadline(
        self, session_factory: Factory
    ) -> None:
        repo = PostgresDecisionRepository(session_factory)
        room_id = await insert_room(session_factory)
        later = await _create_voting(repo, room_id, minutes=30)
        sooner = await _create_voting(repo, room_id, minutes=10)
        await _create_voting(repo, room_id, minutes=180)

        due = await repo.list_due_decisions(
            DecisionStatus.VOTING, utc_now() + timedelta(hours=1)
        )

        assert [d.id for d in due] == [sooner.id, later.id]
        assert await repo.list_due_decisions(DecisionStatus.APPROVED, utc_now()) == []

    @pytest.mark.asyncio
    async def test_list_decisions_by_status(self, session_factory: Factory) -> None:
        repo = PostgresDecisionRepository(session_factory)
        room_id = await insert_room(session_factory)
        first = await _create_voting(repo, room_id)
        second = await _create_voting(repo, room_id)
        await repo.update_decision_status(
            first.id, DecisionStatus.VOTING, DecisionStatus.APPROVED, None
        )

        voting = await repo.list_decisions(room_id, DecisionStatus.VOTING)
        everything = await repo.list_decisions(room_id)

        assert [d.id for d in voting] == [second.id]
        assert {d.id for d in everything} == {first.id, second.id}


class TestPostgresRoomRegistry:
    """Tests for PostgresRoomRegistry."""

    @pytest.mark.asyncio
    async def test_stored_config_merged_over_defaults(
        self, session_factory: Factory
    ) -> None:
        registry = PostgresRoomRegistry(
            session_factory, defaults=RoomGovernanceConfig(timeout_minutes=15)
        )
        room_id = await insert_room(
            session_factory,
            governance={"threshold": "unanimous", "minVoters": 2, "sealedBallot": True},
        )

        config = await registry.get_room_governance_config(room_id)

        assert config is not None
        assert config.threshold == Threshold.UNANIMOUS
        assert config.min_voters == 2
        assert config.sealed_ballot is True
        assert config.timeout_minutes == 15

    @pytest.mark.asyncio
    async def test_roster_and_queen(self, session_factory: Factory) -> None:
        registry = PostgresRoomRegistry(session_factory)
        room_id = await insert_room(session_factory, voters=("w2", "queen", "w1"))

        voters = await registry.get_room_voters(room_id)

        assert [(v.voter_id, v.is_queen) for v in voters] == [
            ("queen", True),
            ("w1", False),
            ("w2", False),
        ]
        assert await registry.get_queen_id(room_id) == "queen"
        assert await registry.room_exists(room_id) is True

    @pytest.mark.asyncio
    async def test_unknown_room(self, session_factory: Factory) -> None:
        registry = PostgresRoomRegistry(session_factory)
        room_id = uuid4()

        assert await registry.room_exists(room_id) is False
        assert await registry.get_room_governance_config(room_id) is None
        assert await registry.get_room_voters(room_id) == []
        assert await registry.get_queen_id(room_id) is None


class TestPostgresVoterHealthRepository:
    """Tests for PostgresVoterHealthRepository."""

    @pytest.mark.asyncio
    async def test_concurrent_increments(self, session_factory: Factory) -> None:
        repo = PostgresVoterHealthRepository(session_factory)
        room_id = await insert_room(session_factory)

        await asyncio.gather(*(repo.increment_votes_missed(room_id, "w1") for _ in range(10)))
        cast = await repo.increment_votes_cast(room_id, "w1")

        [record] = await repo.get_records(room_id)
        assert cast == 1
        assert record.votes_missed == 10
        assert record.votes_cast == 1


class TestQuorumEngineOnPostgres:
    """End-to-end engine flows over the PostgreSQL adapters."""

    @pytest.mark.asyncio
    async def test_full_roster_vote_approves(self, session_factory: Factory) -> None:
        engine = build_quorum_engine(
            decisions=PostgresDecisionRepository(session_factory),
            rooms=PostgresRoomRegistry(session_factory),
            health_repository=PostgresVoterHealthRepository(session_factory),
            activity=PostgresActivityLog(session_factory),
        )
        room_id = await insert_room(session_factory, governance={"voterHealth": True})
        decision = await engine.submit(room_id, "w1", "Adopt plan", "strategy", "voting")

        await engine.cast_vote(decision.id, "queen", "yes")
        await engine.cast_vote(decision.id, "w1", "yes")
        await engine.cast_vote(decision.id, "w2", "no")

        resolved = await engine.get_decision(decision.id)
        assert resolved.status == DecisionStatus.APPROVED
        reports = await engine.get_voter_health(room_id)
        assert all(r.votes_cast == 1 for r in reports)

        async with session_factory() as session:
            activity = (
                await session.execute(
                    text("SELECT event_type FROM room_activity WHERE room_id = :room_id"),
                    {"room_id": room_id},
                )
            ).scalars().all()
        assert activity == ["decision"]

    @pytest.mark.asyncio
    async def test_sweep_makes_announcement_effective(
        self, session_factory: Factory
    ) -> None:
        engine = build_quorum_engine(
            decisions=PostgresDecisionRepository(session_factory),
            rooms=PostgresRoomRegistry(session_factory),
            health_repository=PostgresVoterHealthRepository(session_factory),
            activity=PostgresActivityLog(session_factory),
        )
        room_id = await insert_room(session_factory)
        decision = await engine.submit(
            room_id, "w1", "Adopt plan", "strategy", delay_minutes=0
        )

        sweeps = await asyncio.gather(
            engine.check_expired_decisions(now=utc_now() + timedelta(minutes=1)),
            engine.check_expired_decisions(now=utc_now() + timedelta(minutes=1)),
        )

        assert sum(sweeps) == 1
        assert (await engine.get_decision(decision.id)).status == DecisionStatus.EFFECTIVE
