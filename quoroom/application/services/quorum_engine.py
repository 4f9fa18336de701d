"""Quorum Engine facade.

The single in-process entry point used by the agent loop, the task
scheduler and the notification layer. It composes the admission, ledger,
objection window, voter health and expiry services and adds read
operations. Every mutating call returns the updated Decision, Vote or
status so callers emit their own activity and real-time events; the
engine never depends on those subsystems.

Pathway dispatch keys on (pathway, status) on the Decision's
discriminant:

    (VOTING, VOTING)           keeper_vote -> vote in the keeper slot
    (ANNOUNCEMENT, ANNOUNCED)  keeper_vote -> effective / objected
    anything else              keeper_vote -> InvalidStateError

Sealed ballots are a presentation concern handled in get_decision_detail():
while a sealed decision is open, vote choices and reasoning are redacted.
Storage and tally always see full votes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from structlog import get_logger

from quoroom.application.ports.decision_repository import DecisionRepositoryProtocol
from quoroom.application.ports.room_registry import RoomRegistryProtocol
from quoroom.application.services.expiry_sweep_service import ExpirySweepService
from quoroom.application.services.objection_window_service import (
    ObjectionWindowService,
)
from quoroom.application.services.proposal_admission_service import (
    ProposalAdmissionService,
)
from quoroom.application.services.vote_ledger_service import VoteLedgerService
from quoroom.application.services.voter_health_service import VoterHealthService
from quoroom.domain.errors.decision import DecisionNotFoundError, RoomNotFoundError
from quoroom.domain.models.decision import (
    KEEPER_VOTER_ID,
    Decision,
    DecisionPathway,
    DecisionStatus,
    Vote,
    VoteChoice,
)
from quoroom.domain.models.governance import DecisionType, RoomVoter, parse_enum
from quoroom.domain.models.voter_health import VoterHealthReport

logger = get_logger()


@dataclass(frozen=True)
class BallotView:
    """A vote as presented to callers.

    Attributes:
        voter_id: Who voted.
        choice: The choice, or None when sealed.
        reasoning: The reasoning, or None when sealed.
        cast_at: When the vote was cast.
        sealed: Whether choice and reasoning were redacted.
    """

    voter_id: str
    choice: VoteChoice | None
    reasoning: str | None
    cast_at: datetime
    sealed: bool = False


@dataclass(frozen=True)
class DecisionDetail:
    """A decision with its ballots for presentation.

    Attributes:
        decision: The decision.
        ballots: Votes, redacted while a sealed decision is open.
        vote_count: Number of votes cast, always accurate.
    """

    decision: Decision
    ballots: tuple[BallotView, ...]
    vote_count: int


class QuorumEngine:
    """Facade exposing the quorum engine operations.

    Attributes:
        _decisions: Decision repository.
        _rooms: Room registry.
        _admission: Proposal admission service.
        _ledger: Vote ledger service.
        _objections: Objection window service.
        _health: Voter health service.
        _sweep: Expiry sweep service.
    """

    def __init__(
        self,
        decisions: DecisionRepositoryProtocol,
        rooms: RoomRegistryProtocol,
        admission: ProposalAdmissionService,
        ledger: VoteLedgerService,
        objections: ObjectionWindowService,
        health: VoterHealthService,
        sweep: ExpirySweepService,
    ) -> None:
        """Initialize the Quorum Engine.

        Args:
            decisions: Decision repository.
            rooms: Room registry.
            admission: Proposal admission service.
            ledger: Vote ledger service.
            objections: Objection window service.
            health: Voter health service.
            sweep: Expiry sweep service.
        """
        self._decisions = decisions
        self._rooms = rooms
        self._admission = admission
        self._ledger = ledger
        self._objections = objections
        self._health = health
        self._sweep = sweep

    # Mutations

    async def submit(
        self,
        room_id: UUID,
        proposer_id: str | None,
        proposal: str,
        decision_type: DecisionType | str,
        pathway: DecisionPathway | str | None = None,
        delay_minutes: int | None = None,
    ) -> Decision:
        return await self._admission.submit(
            room_id, proposer_id, proposal, decision_type, pathway, delay_minutes
        )

    async def object(self, decision_id: UUID, voter_id: str, reason: str) -> Decision:
        return await self._objections.object(decision_id, voter_id, reason)

    async def keeper_vote(self, decision_id: UUID, choice: VoteChoice | str) -> Decision:
        """Apply the keeper's vote according to the decision's pathway.

        On a voting decision the keeper takes its own vote slot with equal
        weight; a keeper abstain holds the slot without counting toward
        quorum. On an announcement, yes/abstain approves and no objects.

        Returns:
            The decision after the vote (possibly resolved by auto-tally).

        Raises:
            DecisionNotFoundError: If the decision does not exist.
            InvalidStateError: If the decision is not open.
            DuplicateVoteError: If the keeper already voted on it.
            ValidationError: If choice is not a valid vote.
        """
        decision = await self._require_decision(decision_id)
        logger.debug(
            "keeper_vote_dispatched",
            decision_id=str(decision_id),
            pathway=decision.pathway.value,
            status=decision.status.value,
        )
        if (decision.pathway, decision.status) == (
            DecisionPathway.VOTING,
            DecisionStatus.VOTING,
        ):
            await self._ledger.cast_vote(decision_id, KEEPER_VOTER_ID, choice)
            return await self._require_decision(decision_id)
        return await self._objections.keeper_vote(decision_id, choice)

    async def cast_vote(
        self,
        decision_id: UUID,
        voter_id: str,
        choice: VoteChoice | str,
        reasoning: str | None = None,
    ) -> Vote:
        return await self._ledger.cast_vote(decision_id, voter_id, choice, reasoning)

    async def vote(
        self,
        decision_id: UUID,
        voter_id: str,
        choice: VoteChoice | str,
        reasoning: str | None = None,
    ) -> Vote:
        return await self._ledger.vote(decision_id, voter_id, choice, reasoning)

    async def tally(self, decision_id: UUID) -> DecisionStatus:
        return await self._ledger.tally(decision_id)

    async def check_expired_decisions(self, now: datetime | None = None) -> int:
        return await self._sweep.check_expired_decisions(now)

    # Reads

    async def get_decision(self, decision_id: UUID) -> Decision:
        return await self._require_decision(decision_id)

    async def list_decisions(
        self,
        room_id: UUID,
        status: DecisionStatus | str | None = None,
    ) -> list[Decision]:
        """List a room's decisions, newest first, optionally by status.

        Raises:
            RoomNotFoundError: If the room does not exist.
            ValidationError: If status is not a known status.
        """
        if not await self._rooms.room_exists(room_id):
            raise RoomNotFoundError(room_id)
        parsed = None if status is None else parse_enum(DecisionStatus, status, "status")
        return await self._decisions.list_decisions(room_id, parsed)

    async def get_decision_detail(self, decision_id: UUID) -> DecisionDetail:
        """Get a decision and its ballots, redacted while sealed and open."""
        decision = await self._require_decision(decision_id)
        votes = await self._decisions.get_votes(decision_id)
        redact = decision.sealed and decision.is_open
        ballots = tuple(
            BallotView(
                voter_id=v.voter_id,
                choice=None if redact else v.choice,
                reasoning=None if redact else v.reasoning,
                cast_at=v.cast_at,
                sealed=redact,
            )
            for v in votes
        )
        return DecisionDetail(decision=decision, ballots=ballots, vote_count=len(votes))

    async def get_room_voters(self, room_id: UUID) -> list[RoomVoter]:
        if not await self._rooms.room_exists(room_id):
            raise RoomNotFoundError(room_id)
        return await self._rooms.get_room_voters(room_id)

    async def get_voter_health(
        self,
        room_id: UUID,
        threshold: float | None = None,
    ) -> list[VoterHealthReport]:
        return await self._health.get_voter_health(room_id, threshold)

    async def get_eligible_voters(self, room_id: UUID) -> list[RoomVoter]:
        return await self._health.get_eligible_voters(room_id)

    async def _require_decision(self, decision_id: UUID) -> Decision:
        decision = await self._decisions.get_decision(decision_id)
        if decision is None:
            raise DecisionNotFoundError(decision_id)
        return decision
