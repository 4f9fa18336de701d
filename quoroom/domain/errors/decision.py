"""Decision domain errors.

This module defines the exceptions raised by the quorum engine. Every
error is synchronous and local: it is surfaced to the immediate caller
with a distinguishable message and the engine never retries.

Taxonomy:
- NotFoundError: room or decision missing
- InvalidStateError: operation attempted on a decision that is not in the
  required source status (already resolved, not open for voting, not open
  for objection, lost compare-and-set race)
- DuplicateVoteError: voter already holds the vote slot on a decision
- ValidationError: malformed decision type, vote choice, text or config
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from quoroom.domain.exceptions import QuorumError

if TYPE_CHECKING:
    from quoroom.domain.models.decision import DecisionStatus


class DecisionError(QuorumError):
    """Base class for decision-related errors."""

    pass


class NotFoundError(DecisionError):
    """Raised when a room or decision does not exist."""

    pass


class RoomNotFoundError(NotFoundError):
    """Raised when a proposal or lookup targets an unknown room.

    Attributes:
        room_id: The room that was not found.
    """

    def __init__(self, room_id: UUID) -> None:
        """Initialize RoomNotFoundError.

        Args:
            room_id: The room that was not found.
        """
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found")


class DecisionNotFoundError(NotFoundError):
    """Raised when an operation targets an unknown decision.

    Attributes:
        decision_id: The decision that was not found.
    """

    def __init__(self, decision_id: UUID) -> None:
        """Initialize DecisionNotFoundError.

        Args:
            decision_id: The decision that was not found.
        """
        self.decision_id = decision_id
        super().__init__(f"Decision {decision_id} not found")


class InvalidStateError(DecisionError):
    """Raised when a decision is not in the status an operation requires.

    Covers operations on resolved decisions, votes on decisions that are
    not open for voting, objections to decisions that are not announced,
    and the losing side of a compare-and-set race.

    Attributes:
        decision_id: The decision that was targeted.
        current_status: Status observed when the operation was rejected.
        operation: Name of the rejected operation.
    """

    def __init__(
        self,
        decision_id: UUID,
        current_status: DecisionStatus,
        operation: str,
        reason: str | None = None,
    ) -> None:
        """Initialize InvalidStateError.

        Args:
            decision_id: The decision that was targeted.
            current_status: Status observed when the operation was rejected.
            operation: Name of the rejected operation (e.g. "cast_vote").
            reason: Phrase describing the rejection. Defaults to a
                message derived from the operation.
        """
        self.decision_id = decision_id
        self.current_status = current_status
        self.operation = operation
        self.reason = reason or _DEFAULT_REASONS.get(operation, "is not in a valid state")
        super().__init__(
            f"Decision {decision_id} {self.reason} "
            f"(status: {current_status.value}, operation: {operation})"
        )


_DEFAULT_REASONS: dict[str, str] = {
    "cast_vote": "is not open for voting",
    "vote": "is not open for voting",
    "object": "is not open for objection",
    "keeper_vote": "is not open for voting",
    "tally": "was already resolved",
    "expire": "was already resolved",
}


class DuplicateVoteError(DecisionError):
    """Raised when a voter casts a second vote on the same decision.

    Attributes:
        decision_id: The decision voted on.
        voter_id: The voter holding the existing vote.
    """

    def __init__(self, decision_id: UUID, voter_id: str) -> None:
        """Initialize DuplicateVoteError.

        Args:
            decision_id: The decision voted on.
            voter_id: The voter holding the existing vote.
        """
        self.decision_id = decision_id
        self.voter_id = voter_id
        super().__init__(f"Voter {voter_id} already voted on decision {decision_id}")


class ValidationError(DecisionError):
    """Raised on malformed decision types, vote choices, text or config.

    Attributes:
        field: Name of the offending field.
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize ValidationError.

        Args:
            field: Name of the offending field.
            message: Description of what is wrong with it.
        """
        self.field = field
        super().__init__(f"Invalid {field}: {message}")
