"""Vote Ledger Service (voting pathway).

Records one vote per voter per decision and resolves voting decisions
with the snapshotted threshold, tie-break and quorum rules.

Constraints:
- Votes are accepted only while the decision is VOTING; the store checks
  this in the same atomic step that inserts the vote
- Exactly one vote per (decision, voter); the keeper holds its own slot
- Tally reads the decision's snapshot, never the live room config
- Auto-tally fires once every roster member has voted (full roster, never
  filtered by voter health)
- Tally writes its outcome only if the decision still holds the votes it
  counted; a vote accepted mid-tally forces a re-tally
- Missed-vote penalties are applied exactly once, by the caller that wins
  the VOTING -> APPROVED/REJECTED compare-and-set
- Both participation counters follow the room's live voter_health flag
  at the moment they fire: casts when a vote is recorded, misses at
  resolution. Toggling the flag mid-decision affects only later events.
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from structlog import get_logger

from quoroom.application.ports.decision_repository import DecisionRepositoryProtocol
from quoroom.application.ports.room_registry import RoomRegistryProtocol
from quoroom.application.services.voter_health_service import VoterHealthService
from quoroom.domain.errors.decision import (
    DecisionNotFoundError,
    InvalidStateError,
    ValidationError,
)
from quoroom.domain.models.decision import (
    KEEPER_VOTER_ID,
    Decision,
    DecisionPathway,
    DecisionStatus,
    Vote,
    VoteChoice,
)
from quoroom.domain.models.governance import parse_enum
from quoroom.domain.services.tally import TallyOutcome, tally_votes

logger = get_logger()

MAX_REASONING_LENGTH = 1000
TIMEOUT_RESULT_PREFIX = "Voting period expired: "


class VoteLedgerService:
    """Service for casting votes and tallying voting decisions.

    This service provides:
    1. cast_vote(): record a vote, auto-tally when the roster is complete
    2. vote(): legacy entry point with identical behavior
    3. tally(): resolve a voting decision, idempotent once resolved
    4. resolve_voting_decision(): shared resolution used by the expiry sweep

    Attributes:
        _decisions: Decision repository.
        _rooms: Room registry.
        _health: Voter health service.
    """

    def __init__(
        self,
        decisions: DecisionRepositoryProtocol,
        rooms: RoomRegistryProtocol,
        health: VoterHealthService,
    ) -> None:
        """Initialize the Vote Ledger Service.

        Args:
            decisions: Decision repository.
            rooms: Room registry for roster, queen and config lookups.
            health: Voter health service for participation counters.
        """
        self._decisions = decisions
        self._rooms = rooms
        self._health = health

    async def cast_vote(
        self,
        decision_id: UUID,
        voter_id: str,
        choice: VoteChoice | str,
        reasoning: str | None = None,
    ) -> Vote:
        """Cast a vote on a voting decision.

        Args:
            decision_id: The decision to vote on.
            voter_id: A roster member or KEEPER_VOTER_ID.
            choice: yes, no or abstain.
            reasoning: Optional justification (max 1000 characters).

        Returns:
            The recorded vote.

        Raises:
            DecisionNotFoundError: If the decision does not exist.
            InvalidStateError: If the decision is not open for voting.
            DuplicateVoteError: If the voter already voted.
            ValidationError: If choice, reasoning or voter is invalid.
        """
        return await self._record_vote(
            decision_id, voter_id, choice, reasoning, operation="cast_vote"
        )

    async def vote(
        self,
        decision_id: UUID,
        voter_id: str,
        choice: VoteChoice | str,
        reasoning: str | None = None,
    ) -> Vote:
        """Legacy vote entry point, behaviorally identical to cast_vote().

        Rejects every decision that is not VOTING with "is not open for
        voting".
        """
        return await self._record_vote(
            decision_id, voter_id, choice, reasoning, operation="vote"
        )

    async def tally(self, decision_id: UUID) -> DecisionStatus:
        """Resolve a voting decision from its recorded votes.

        Safe to call repeatedly: on an already resolved decision it returns
        the current status without touching result or health counters.

        Args:
            decision_id: The decision to tally.

        Returns:
            The decision's status after the call.

        Raises:
            DecisionNotFoundError: If the decision does not exist.
            InvalidStateError: If the decision is not on the voting pathway,
                or a concurrent resolver won the compare-and-set.
        """
        decision = await self._decisions.get_decision(decision_id)
        if decision is None:
            raise DecisionNotFoundError(decision_id)
        if decision.pathway != DecisionPathway.VOTING:
            raise InvalidStateError(
                decision_id=decision_id,
                current_status=decision.status,
                operation="tally",
                reason="is not a voting decision",
            )
        if decision.status != DecisionStatus.VOTING:
            logger.debug(
                "tally_noop",
                decision_id=str(decision_id),
                status=decision.status.value,
            )
            return decision.status

        outcome = await self.resolve_voting_decision(decision)
        return outcome.status

    async def resolve_voting_decision(
        self,
        decision: Decision,
        timed_out: bool = False,
    ) -> TallyOutcome:
        """Tally a VOTING decision and write the outcome through CAS.

        The write is conditioned on the number of votes the outcome was
        computed from. A vote accepted between the read and the write
        fails that check, and the decision is tallied again with it.

        Args:
            decision: The decision, as last read, in VOTING status.
            timed_out: Label the result as a timeout resolution.

        Returns:
            The applied tally outcome.

        Raises:
            InvalidStateError: If the decision left VOTING before the write.
        """
        operation = "expire" if timed_out else "tally"
        log = logger.bind(
            operation=operation,
            decision_id=str(decision.id),
            room_id=str(decision.room_id),
        )

        while True:
            votes = await self._decisions.get_votes(decision.id)
            queen_id = await self._rooms.get_queen_id(decision.room_id)
            outcome = tally_votes(decision.snapshot, votes, queen_id)

            result = outcome.result
            if timed_out and outcome.quorum_met:
                result = TIMEOUT_RESULT_PREFIX + result

            applied = await self._decisions.update_decision_status(
                decision.id,
                DecisionStatus.VOTING,
                outcome.status,
                result,
                expected_vote_count=len(votes),
            )
            if applied:
                break

            current = await self._decisions.get_decision(decision.id)
            if current is None:
                raise DecisionNotFoundError(decision.id)
            current_status = current.status
            if current_status == DecisionStatus.VOTING:
                # Still open, so a vote landed after the read.
                log.info("tally_retried", counted_votes=len(votes))
                continue
            log.warning(
                "cas_conflict",
                expected_status=DecisionStatus.VOTING.value,
                current_status=current_status.value,
            )
            raise InvalidStateError(
                decision_id=decision.id,
                current_status=current_status,
                operation=operation,
            )

        log.info(
            "decision_tallied",
            status=outcome.status.value,
            yes=outcome.yes,
            no=outcome.no,
            abstain=outcome.abstain,
            quorum_met=outcome.quorum_met,
            tie_broken_by_queen=outcome.tie_broken_by_queen,
        )
        # The CAS held the vote count, so these are exactly the counted votes.
        await self._penalize_missed_voters(decision, votes)
        return outcome

    async def _record_vote(
        self,
        decision_id: UUID,
        voter_id: str,
        choice: VoteChoice | str,
        reasoning: str | None,
        operation: str,
    ) -> Vote:
        log = logger.bind(
            operation=operation,
            decision_id=str(decision_id),
            voter_id=voter_id,
        )

        choice = parse_enum(VoteChoice, choice, "choice")
        if reasoning is not None and len(reasoning) > MAX_REASONING_LENGTH:
            raise ValidationError(
                "reasoning",
                f"exceeds maximum length of {MAX_REASONING_LENGTH} characters",
            )

        decision = await self._decisions.get_decision(decision_id)
        if decision is None:
            raise DecisionNotFoundError(decision_id)
        if decision.status != DecisionStatus.VOTING:
            log.warning("vote_rejected", status=decision.status.value)
            raise InvalidStateError(
                decision_id=decision_id,
                current_status=decision.status,
                operation=operation,
            )

        roster = await self._rooms.get_room_voters(decision.room_id)
        roster_ids = {v.voter_id for v in roster}
        if voter_id != KEEPER_VOTER_ID and voter_id not in roster_ids:
            raise ValidationError(
                "voter_id",
                f"{voter_id} is not a member of room {decision.room_id}",
            )

        vote = await self._decisions.create_vote(decision_id, voter_id, choice, reasoning)
        log.info("vote_cast", choice=choice.value, vote_id=str(vote.id))

        if voter_id != KEEPER_VOTER_ID:
            config = await self._rooms.get_room_governance_config(decision.room_id)
            if config is not None and config.voter_health:
                await self._health.increment_votes_cast(decision.room_id, voter_id)

        votes = await self._decisions.get_votes(decision_id)
        voted = {v.voter_id for v in votes}
        if roster_ids and roster_ids <= voted:
            try:
                status = await self.tally(decision_id)
                log.info("auto_tally_completed", status=status.value)
            except InvalidStateError as exc:
                # Vote stands; another resolver closed the decision first.
                log.info("auto_tally_lost_race", current_status=exc.current_status.value)

        return vote

    async def _penalize_missed_voters(
        self,
        decision: Decision,
        votes: Sequence[Vote],
    ) -> None:
        """Charge a miss to each roster member absent from votes.

        Gated on the live room config at resolution time, like the cast
        counter is at vote time; the flag is not part of the snapshot.
        """
        config = await self._rooms.get_room_governance_config(decision.room_id)
        if config is None or not config.voter_health:
            return
        voted = {v.voter_id for v in votes}
        roster = await self._rooms.get_room_voters(decision.room_id)
        for voter in roster:
            if voter.voter_id not in voted:
                await self._health.increment_votes_missed(decision.room_id, voter.voter_id)
