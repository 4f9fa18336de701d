"""Decision repository stub implementation.

This module provides an in-memory stub implementation of
DecisionRepositoryProtocol for development and testing purposes.

Constraints:
- update_decision_status() is an atomic compare-and-set on status and,
  optionally, on the number of stored votes
- create_vote() checks VOTING status and the (decision, voter) slot in the
  same critical section that stores the vote
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from uuid import UUID, uuid4

from quoroom.application.ports.decision_repository import (
    DecisionRepositoryProtocol,
)
from quoroom.domain.errors.decision import (
    DecisionNotFoundError,
    DuplicateVoteError,
    InvalidStateError,
)
from quoroom.domain.models.decision import (
    Decision,
    DecisionPathway,
    DecisionStatus,
    Vote,
    VoteChoice,
    utc_now,
)
from quoroom.domain.models.governance import DecisionType, GovernanceSnapshot


class DecisionRepositoryStub(DecisionRepositoryProtocol):
    """In-memory stub implementation of DecisionRepositoryProtocol.

    This stub stores decisions and votes in memory for development and
    testing. It is NOT suitable for production use.

    Attributes:
        _decisions: Dictionary mapping decision id to Decision.
        _votes: Dictionary mapping decision id to its votes in cast order.
    """

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._decisions: dict[UUID, Decision] = {}
        self._votes: dict[UUID, list[Vote]] = {}
        # Lock for simulating atomic CAS and conditional vote inserts
        self._lock = asyncio.Lock()

    async def create_decision(
        self,
        room_id: UUID,
        proposer_id: str | None,
        proposal: str,
        decision_type: DecisionType,
        pathway: DecisionPathway,
        snapshot: GovernanceSnapshot,
        status: DecisionStatus,
        sealed: bool = False,
        effective_at: datetime | None = None,
        timeout_at: datetime | None = None,
        result: str | None = None,
    ) -> Decision:
        now = utc_now()
        decision = Decision(
            id=uuid4(),
            room_id=room_id,
            proposer_id=proposer_id,
            proposal=proposal,
            decision_type=decision_type,
            pathway=pathway,
            status=status,
            snapshot=snapshot,
            sealed=sealed,
            effective_at=effective_at,
            timeout_at=timeout_at,
            result=result,
            created_at=now,
            resolved_at=now if status.is_terminal() else None,
        )
        async with self._lock:
            self._decisions[decision.id] = decision
            self._votes[decision.id] = []
        return decision

    async def get_decision(self, decision_id: UUID) -> Decision | None:
        return self._decisions.get(decision_id)

    async def list_decisions(
        self,
        room_id: UUID,
        status: DecisionStatus | None = None,
    ) -> list[Decision]:
        matching = [
            d
            for d in reversed(list(self._decisions.values()))
            if d.room_id == room_id and (status is None or d.status == status)
        ]
        # Newest first; equal timestamps keep reverse insertion order
        matching.sort(key=lambda d: d.created_at, reverse=True)
        return matching

    async def list_due_decisions(
        self,
        status: DecisionStatus,
        now: datetime,
    ) -> list[Decision]:
        due = [
            d
            for d in self._decisions.values()
            if d.status == status and d.deadline is not None and d.deadline <= now
        ]
        due.sort(key=lambda d: d.deadline)  # type: ignore[arg-type, return-value]
        return due

    async def update_decision_status(
        self,
        decision_id: UUID,
        expected_status: DecisionStatus,
        new_status: DecisionStatus,
        result: str | None,
        expected_vote_count: int | None = None,
    ) -> bool:
        """Atomic status change using compare-and-set.

        This stub implementation simulates atomic CAS semantics using a lock.
        In production, PostgreSQL row locks on the decision provide true
        atomicity.
        """
        async with self._lock:
            decision = self._decisions.get(decision_id)
            if decision is None or decision.status != expected_status:
                return False
            if expected_vote_count is not None and (
                len(self._votes.get(decision_id, [])) != expected_vote_count
            ):
                return False
            self._decisions[decision_id] = decision.with_status(new_status, result)
            return True

    async def create_vote(
        self,
        decision_id: UUID,
        voter_id: str,
        choice: VoteChoice,
        reasoning: str | None = None,
    ) -> Vote:
        async with self._lock:
            decision = self._decisions.get(decision_id)
            if decision is None:
                raise DecisionNotFoundError(decision_id)
            if decision.status != DecisionStatus.VOTING:
                raise InvalidStateError(
                    decision_id=decision_id,
                    current_status=decision.status,
                    operation="cast_vote",
                )
            votes = self._votes.setdefault(decision_id, [])
            if any(v.voter_id == voter_id for v in votes):
                raise DuplicateVoteError(decision_id=decision_id, voter_id=voter_id)
            vote = Vote(
                id=uuid4(),
                decision_id=decision_id,
                voter_id=voter_id,
                choice=choice,
                reasoning=reasoning,
            )
            votes.append(vote)
            return vote

    async def get_votes(self, decision_id: UUID) -> list[Vote]:
        return list(self._votes.get(decision_id, []))

    # Test helpers

    def put_decision(self, decision: Decision) -> None:
        """Store a prebuilt decision as-is (for seeding legacy rows in tests)."""
        self._decisions[decision.id] = decision
        self._votes.setdefault(decision.id, [])

    def clear(self) -> None:
        """Clear all stored decisions and votes (for testing)."""
        self._decisions.clear()
        self._votes.clear()
