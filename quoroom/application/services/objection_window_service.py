"""Objection Window Service (announcement pathway).

Drives announced decisions to their outcome:

    ANNOUNCED -> OBJECTED   (a voter objects, or the keeper votes no)
    ANNOUNCED -> EFFECTIVE  (the keeper votes yes or abstain)

There is no explicit approve call: silence until effective_at is itself
the approval signal and is resolved by the expiry sweep.

Constraints:
- Both outcomes are terminal
- First objection wins: concurrent or repeated objections are rejected
  with InvalidStateError, never merged
- Keeper abstain on an announcement is a non-blocking approval, unlike
  on the voting pathway where it is excluded from quorum
"""

from __future__ import annotations

from uuid import UUID

from structlog import get_logger

from quoroom.application.ports.decision_repository import DecisionRepositoryProtocol
from quoroom.domain.errors.decision import DecisionNotFoundError, InvalidStateError
from quoroom.domain.models.decision import Decision, DecisionStatus, VoteChoice
from quoroom.domain.models.governance import parse_enum

logger = get_logger()

KEEPER_APPROVED_RESULT = "Keeper approved"
KEEPER_OBJECTED_RESULT = "Keeper objected"


class ObjectionWindowService:
    """Service for objections and keeper shortcuts on announcements.

    Attributes:
        _decisions: Decision repository.
    """

    def __init__(self, decisions: DecisionRepositoryProtocol) -> None:
        """Initialize the Objection Window Service.

        Args:
            decisions: Decision repository.
        """
        self._decisions = decisions

    async def object(self, decision_id: UUID, voter_id: str, reason: str) -> Decision:
        """Object to an announced decision.

        Args:
            decision_id: The announced decision.
            voter_id: The objecting voter.
            reason: Why the voter objects.

        Returns:
            The decision in OBJECTED status.

        Raises:
            DecisionNotFoundError: If the decision does not exist.
            InvalidStateError: If the decision is not announced, including
                when another objection or resolution won the race.
        """
        log = logger.bind(
            operation="object",
            decision_id=str(decision_id),
            voter_id=voter_id,
        )
        result = f"Objected by {voter_id}: {reason}"
        decision = await self._resolve_announced(
            decision_id, DecisionStatus.OBJECTED, result, "object"
        )
        log.info("objection_recorded", reason=reason)
        return decision

    async def keeper_vote(
        self,
        decision_id: UUID,
        choice: VoteChoice | str,
    ) -> Decision:
        """Apply the keeper's vote to an announced decision.

        yes or abstain makes the decision EFFECTIVE; no makes it OBJECTED.

        Args:
            decision_id: The announced decision.
            choice: The keeper's vote.

        Returns:
            The resolved decision.

        Raises:
            DecisionNotFoundError: If the decision does not exist.
            InvalidStateError: If the decision is not announced.
            ValidationError: If choice is not a valid vote.
        """
        choice = parse_enum(VoteChoice, choice, "choice")
        if choice == VoteChoice.NO:
            new_status, result = DecisionStatus.OBJECTED, KEEPER_OBJECTED_RESULT
        else:
            new_status, result = DecisionStatus.EFFECTIVE, KEEPER_APPROVED_RESULT

        decision = await self._resolve_announced(
            decision_id, new_status, result, "keeper_vote"
        )
        logger.info(
            "keeper_vote_applied",
            decision_id=str(decision_id),
            choice=choice.value,
            status=new_status.value,
        )
        return decision

    async def _resolve_announced(
        self,
        decision_id: UUID,
        new_status: DecisionStatus,
        result: str,
        operation: str,
    ) -> Decision:
        decision = await self._decisions.get_decision(decision_id)
        if decision is None:
            raise DecisionNotFoundError(decision_id)
        if decision.status != DecisionStatus.ANNOUNCED:
            raise InvalidStateError(
                decision_id=decision_id,
                current_status=decision.status,
                operation=operation,
            )

        applied = await self._decisions.update_decision_status(
            decision_id, DecisionStatus.ANNOUNCED, new_status, result
        )
        updated = await self._decisions.get_decision(decision_id)
        if updated is None:
            raise DecisionNotFoundError(decision_id)
        if not applied:
            logger.warning(
                "cas_conflict",
                operation=operation,
                decision_id=str(decision_id),
                expected_status=DecisionStatus.ANNOUNCED.value,
                current_status=updated.status.value,
            )
            raise InvalidStateError(
                decision_id=decision_id,
                current_status=updated.status,
                operation=operation,
            )
        return updated
