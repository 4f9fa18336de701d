"""Unit tests for ObjectionWindowService (announcement pathway)."""

from __future__ import annotations

from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest

from quoroom.application.services.objection_window_service import (
    KEEPER_APPROVED_RESULT,
    KEEPER_OBJECTED_RESULT,
    ObjectionWindowService,
)
from quoroom.domain.errors import (
    DecisionNotFoundError,
    InvalidStateError,
    ValidationError,
)
from quoroom.domain.models.decision import (
    Decision,
    DecisionPathway,
    DecisionStatus,
)
from quoroom.domain.models.governance import DecisionType, GovernanceSnapshot
from quoroom.infrastructure.stubs import DecisionRepositoryStub


@pytest.fixture
def service(decision_repo: DecisionRepositoryStub) -> ObjectionWindowService:
    return ObjectionWindowService(decisions=decision_repo)


async def _announce(repo: DecisionRepositoryStub) -> UUID:
    decision = await repo.create_decision(
        room_id=uuid4(),
        proposer_id="w1",
        proposal="Move standup to 10am",
        decision_type=DecisionType.STRATEGY,
        pathway=DecisionPathway.ANNOUNCEMENT,
        snapshot=GovernanceSnapshot(),
        status=DecisionStatus.ANNOUNCED,
    )
    return decision.id


class TestObject:
    """Tests for object()."""

    @pytest.mark.asyncio
    async def test_object_marks_objected(
        self, service: ObjectionWindowService, decision_repo: DecisionRepositoryStub
    ) -> None:
        decision_id = await _announce(decision_repo)

        decision = await service.object(decision_id, "w2", "too risky")

        assert decision.status == DecisionStatus.OBJECTED
        assert decision.result == "Objected by w2: too risky"
        assert decision.resolved_at is not None

    @pytest.mark.asyncio
    async def test_first_objection_wins(
        self, service: ObjectionWindowService, decision_repo: DecisionRepositoryStub
    ) -> None:
        decision_id = await _announce(decision_repo)
        await service.object(decision_id, "w2", "too risky")

        with pytest.raises(InvalidStateError) as exc_info:
            await service.object(decision_id, "w3", "also risky")

        assert "is not open for objection" in str(exc_info.value)
        stored = await decision_repo.get_decision(decision_id)
        assert stored is not None
        assert stored.result == "Objected by w2: too risky"

    @pytest.mark.asyncio
    async def test_object_voting_decision(
        self, service: ObjectionWindowService, decision_repo: DecisionRepositoryStub
    ) -> None:
        decision = await decision_repo.create_decision(
            room_id=uuid4(),
            proposer_id="w1",
            proposal="Vote on it",
            decision_type=DecisionType.STRATEGY,
            pathway=DecisionPathway.VOTING,
            snapshot=GovernanceSnapshot(),
            status=DecisionStatus.VOTING,
        )
        with pytest.raises(InvalidStateError):
            await service.object(decision.id, "w2", "no")

    @pytest.mark.asyncio
    async def test_object_unknown_decision(self, service: ObjectionWindowService) -> None:
        with pytest.raises(DecisionNotFoundError):
            await service.object(uuid4(), "w2", "no")


class TestKeeperVote:
    """Tests for keeper_vote() on announcements."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("choice", ["yes", "abstain"])
    async def test_yes_or_abstain_makes_effective(
        self,
        service: ObjectionWindowService,
        decision_repo: DecisionRepositoryStub,
        choice: str,
    ) -> None:
        decision_id = await _announce(decision_repo)

        decision = await service.keeper_vote(decision_id, choice)

        assert decision.status == DecisionStatus.EFFECTIVE
        assert decision.result == KEEPER_APPROVED_RESULT

    @pytest.mark.asyncio
    async def test_no_objects(
        self, service: ObjectionWindowService, decision_repo: DecisionRepositoryStub
    ) -> None:
        decision_id = await _announce(decision_repo)

        decision = await service.keeper_vote(decision_id, "no")

        assert decision.status == DecisionStatus.OBJECTED
        assert decision.result == KEEPER_OBJECTED_RESULT

    @pytest.mark.asyncio
    async def test_resolved_announcement(
        self, service: ObjectionWindowService, decision_repo: DecisionRepositoryStub
    ) -> None:
        decision_id = await _announce(decision_repo)
        await service.keeper_vote(decision_id, "yes")

        with pytest.raises(InvalidStateError):
            await service.keeper_vote(decision_id, "no")

    @pytest.mark.asyncio
    async def test_invalid_choice(
        self, service: ObjectionWindowService, decision_repo: DecisionRepositoryStub
    ) -> None:
        decision_id = await _announce(decision_repo)
        with pytest.raises(ValidationError):
            await service.keeper_vote(decision_id, "maybe")


class TestCompareAndSetConflict:
    """Tests for losing the ANNOUNCED compare-and-set."""

    @pytest.mark.asyncio
    async def test_lost_race_raises_invalid_state(self) -> None:
        announced = Decision(
            id=uuid4(),
            room_id=uuid4(),
            proposer_id="w1",
            proposal="Adopt it",
            decision_type=DecisionType.STRATEGY,
            pathway=DecisionPathway.ANNOUNCEMENT,
            status=DecisionStatus.ANNOUNCED,
        )
        effective = replace(announced, status=DecisionStatus.EFFECTIVE)
        repo = MagicMock()
        repo.get_decision = AsyncMock(side_effect=[announced, effective])
        repo.update_decision_status = AsyncMock(return_value=False)
        service = ObjectionWindowService(decisions=repo)

        with pytest.raises(InvalidStateError) as exc_info:
            await service.object(announced.id, "w2", "late")

        assert exc_info.value.current_status == DecisionStatus.EFFECTIVE
        repo.update_decision_status.assert_awaited_once_with(
            announced.id,
            DecisionStatus.ANNOUNCED,
            DecisionStatus.OBJECTED,
            "Objected by w2: late",
        )
