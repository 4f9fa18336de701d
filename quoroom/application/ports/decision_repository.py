"""Decision repository port.

This module defines the abstract interface for decision and vote storage.

Developer Golden Rules:
1. CAS FOR STATUS - All status changes go through update_decision_status()
2. FAIL LOUD - Repository raises domain errors on conflicts
3. VOTES ONLY WHILE VOTING - create_vote() checks the decision status in
   the same atomic step that inserts the vote
4. NEVER DELETE - Decisions are never physically removed
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from quoroom.domain.models.decision import (
    Decision,
    DecisionPathway,
    DecisionStatus,
    Vote,
    VoteChoice,
)
from quoroom.domain.models.governance import DecisionType, GovernanceSnapshot


class DecisionRepositoryProtocol(Protocol):
    """Protocol for decision and vote persistence.

    Implementations may use PostgreSQL, in-memory storage, or other
    backends, provided update_decision_status() and create_vote() are
    atomic with respect to concurrent callers.
    """

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
        """Store a new decision.

        Args:
            room_id: Owning room.
            proposer_id: Proposing agent, if any.
            proposal: Proposal text.
            decision_type: Classification.
            pathway: Voting or announcement.
            snapshot: Tally rules copied from the room config.
            status: Initial status (voting, announced, or approved for
                auto-approved proposals).
            sealed: Sealed-ballot flag copied from the room config.
            effective_at: Objection window end (announcement).
            timeout_at: Voting window end (voting).
            result: Initial result text (auto-approval).

        Returns:
            The stored decision with its assigned id.
        """
        ...

    async def get_decision(self, decision_id: UUID) -> Decision | None:
        """Retrieve a decision by id.

        Returns:
            The decision if found, None otherwise.
        """
        ...

    async def list_decisions(
        self,
        room_id: UUID,
        status: DecisionStatus | None = None,
    ) -> list[Decision]:
        """List a room's decisions, newest first.

        Args:
            room_id: Room to list.
            status: Optional status filter.

        Returns:
            Matching decisions ordered by created_at descending.
        """
        ...

    async def list_due_decisions(
        self,
        status: DecisionStatus,
        now: datetime,
    ) -> list[Decision]:
        """List open decisions across all rooms whose deadline has passed.

        Announced decisions are due when effective_at <= now; voting
        decisions when timeout_at <= now. Decisions without a deadline are
        never due.

        Args:
            status: ANNOUNCED or VOTING.
            now: Reference time.

        Returns:
            Due decisions ordered by deadline ascending.
        """
        ...

    async def update_decision_status(
        self,
        decision_id: UUID,
        expected_status: DecisionStatus,
        new_status: DecisionStatus,
        result: str | None,
        expected_vote_count: int | None = None,
    ) -> bool:
        """Atomic status change using compare-and-set.

        The status is only written if the current status still equals
        expected_status. Two racing callers can never both succeed.

        When expected_vote_count is given, the decision must also hold
        exactly that many votes, checked in the same atomic step. A tally
        passes the number of votes it counted, so a vote landing between
        its read and its write makes the update a no-op.

        Args:
            decision_id: Decision to update.
            expected_status: Status the decision must currently have.
            new_status: Status to write.
            result: Outcome text to write alongside the status.
            expected_vote_count: Vote count the decision must currently
                have, or None to skip the check.

        Returns:
            True if the update was applied, False on a status or vote count
            mismatch or if the decision does not exist.
        """
        ...

    async def create_vote(
        self,
        decision_id: UUID,
        voter_id: str,
        choice: VoteChoice,
        reasoning: str | None = None,
    ) -> Vote:
        """Record a vote while the decision is open for voting.

        Args:
            decision_id: Decision voted on.
            voter_id: Agent id or keeper slot.
            choice: Ballot choice.
            reasoning: Optional justification.

        Returns:
            The stored vote.

        Raises:
            DuplicateVoteError: If the voter already voted on the decision.
            InvalidStateError: If the decision is no longer voting.
            DecisionNotFoundError: If the decision does not exist.
        """
        ...

    async def get_votes(self, decision_id: UUID) -> list[Vote]:
        """Get all votes on a decision, oldest first."""
        ...
