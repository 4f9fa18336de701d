"""Decision and vote domain models.

A Decision is a tagged variant: ``pathway`` is the discriminant and the
legal transitions are a match over (pathway, status).

State Machine:
    Announcement pathway:
        ANNOUNCED -> EFFECTIVE (silence until effective_at, or keeper approval)
        ANNOUNCED -> OBJECTED  (first objection wins)
    Voting pathway:
        VOTING -> APPROVED | REJECTED (tally)
        VOTING -> EXPIRED (legacy timeout label, still accepted from storage)
    Auto-approval:
        created directly as APPROVED, never transitions.

Terminal States:
    APPROVED, REJECTED, EXPIRED, EFFECTIVE, OBJECTED.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from quoroom.domain.errors.decision import InvalidStateError
from quoroom.domain.models.governance import DecisionType, GovernanceSnapshot

# Distinguished voter slot for the human overseer
KEEPER_VOTER_ID = "keeper"


class DecisionPathway(Enum):
    """How a decision reaches its outcome."""

    VOTING = "voting"
    ANNOUNCEMENT = "announcement"


class DecisionStatus(Enum):
    """Status in the decision lifecycle."""

    VOTING = "voting"
    ANNOUNCED = "announced"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"
    EFFECTIVE = "effective"
    OBJECTED = "objected"

    def is_terminal(self) -> bool:
        """Check if no further transitions are permitted from this status."""
        return self in TERMINAL_STATUSES

    def valid_transitions(self) -> frozenset[DecisionStatus]:
        """Get valid target statuses from this status.

        Returns:
            Frozenset of reachable statuses; empty for terminal statuses.
        """
        return STATUS_TRANSITION_MATRIX.get(self, frozenset())


class VoteChoice(Enum):
    """A ballot choice. Abstain holds the slot without counting."""

    YES = "yes"
    NO = "no"
    ABSTAIN = "abstain"


TERMINAL_STATUSES: frozenset[DecisionStatus] = frozenset(
    {
        DecisionStatus.APPROVED,
        DecisionStatus.REJECTED,
        DecisionStatus.EXPIRED,
        DecisionStatus.EFFECTIVE,
        DecisionStatus.OBJECTED,
    }
)

STATUS_TRANSITION_MATRIX: dict[DecisionStatus, frozenset[DecisionStatus]] = {
    DecisionStatus.VOTING: frozenset(
        {
            DecisionStatus.APPROVED,
            DecisionStatus.REJECTED,
            DecisionStatus.EXPIRED,
        }
    ),
    DecisionStatus.ANNOUNCED: frozenset(
        {
            DecisionStatus.EFFECTIVE,
            DecisionStatus.OBJECTED,
        }
    ),
    DecisionStatus.APPROVED: frozenset(),
    DecisionStatus.REJECTED: frozenset(),
    DecisionStatus.EXPIRED: frozenset(),
    DecisionStatus.EFFECTIVE: frozenset(),
    DecisionStatus.OBJECTED: frozenset(),
}


def utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=True)
class Decision:
    """A proposal submitted for collective approval.

    Attributes:
        id: Unique identifier.
        room_id: Owning room.
        proposer_id: Agent that proposed it (None for system/keeper proposals).
        proposal: Proposal text.
        decision_type: Classification used for auto-approval.
        pathway: Voting or announcement.
        status: Current lifecycle status.
        snapshot: Tally rules copied from the room at creation.
        sealed: Hide vote content while the decision is open.
        effective_at: End of the objection window (announcement only).
        timeout_at: End of the voting window (voting only).
        result: Human-readable outcome.
        created_at: Creation timestamp (UTC).
        resolved_at: Timestamp of the terminal transition.
    """

    id: UUID
    room_id: UUID
    proposer_id: str | None
    proposal: str
    decision_type: DecisionType
    pathway: DecisionPathway
    status: DecisionStatus
    snapshot: GovernanceSnapshot = field(default_factory=GovernanceSnapshot)
    sealed: bool = False
    effective_at: datetime | None = None
    timeout_at: datetime | None = None
    result: str | None = None
    created_at: datetime = field(default_factory=utc_now)
    resolved_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        """Whether the decision still awaits resolution."""
        return not self.status.is_terminal()

    @property
    def deadline(self) -> datetime | None:
        """The pathway's deadline: effective_at or timeout_at."""
        if self.pathway == DecisionPathway.ANNOUNCEMENT:
            return self.effective_at
        return self.timeout_at

    def with_status(
        self,
        new_status: DecisionStatus,
        result: str | None,
        resolved_at: datetime | None = None,
    ) -> Decision:
        """Create a copy of this decision in new_status.

        Since Decision is frozen, returns a new instance.

        Args:
            new_status: Target status.
            result: Outcome text for the transition.
            resolved_at: Resolution time; defaults to now for terminal targets.

        Returns:
            The transitioned decision.

        Raises:
            InvalidStateError: If new_status is not reachable from the
                current status.
        """
        if new_status not in self.status.valid_transitions():
            raise InvalidStateError(
                decision_id=self.id,
                current_status=self.status,
                operation="transition",
                reason=f"cannot move to {new_status.value}",
            )
        if resolved_at is None and new_status.is_terminal():
            resolved_at = utc_now()
        return replace(self, status=new_status, result=result, resolved_at=resolved_at)


@dataclass(frozen=True, eq=True)
class Vote:
    """One voter's ballot on a voting decision.

    Attributes:
        id: Unique identifier.
        decision_id: Decision voted on.
        voter_id: Agent id, or KEEPER_VOTER_ID for the keeper slot.
        choice: yes, no or abstain.
        reasoning: Optional free-text justification.
        cast_at: Cast timestamp (UTC).
    """

    id: UUID
    decision_id: UUID
    voter_id: str
    choice: VoteChoice
    reasoning: str | None = None
    cast_at: datetime = field(default_factory=utc_now)

    @property
    def is_keeper(self) -> bool:
        """Whether this vote occupies the keeper slot."""
        return self.voter_id == KEEPER_VOTER_ID
