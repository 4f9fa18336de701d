"""Vote tally domain service.

Pure computation of a voting decision's outcome from its snapshotted
rules and recorded votes. Deterministic: the same snapshot, votes and
queen produce the same outcome. Integer arithmetic only, so ties and the
2/3 boundary are exact.

Rules, applied in order:
1. Quorum: non-abstain votes (agents plus the keeper when not abstaining)
   below min_voters -> rejected, "Quorum not met".
2. No yes/no votes at all -> rejected.
3. Threshold:
   - majority: yes * 2 > active
   - supermajority: yes * 3 >= active * 2
   - unanimous: no == 0 and yes == active
4. Exact majority tie (yes * 2 == active): tie_breaker queen follows the
   queen's own vote (yes approves; no, abstain or no vote rejects);
   tie_breaker none rejects.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from quoroom.domain.models.decision import DecisionStatus, Vote, VoteChoice
from quoroom.domain.models.governance import GovernanceSnapshot, Threshold, TieBreaker

QUORUM_NOT_MET = "Quorum not met"


@dataclass(frozen=True)
class TallyOutcome:
    """Result of a tally computation.

    Attributes:
        status: APPROVED or REJECTED.
        result: Human-readable outcome.
        yes: Yes votes.
        no: No votes.
        abstain: Abstentions.
        quorum_met: Whether min_voters was reached.
        tie_broken_by_queen: Whether the queen's vote decided a tie.
    """

    status: DecisionStatus
    result: str
    yes: int
    no: int
    abstain: int
    quorum_met: bool
    tie_broken_by_queen: bool = False

    @property
    def active_voters(self) -> int:
        return self.yes + self.no

    @property
    def approved(self) -> bool:
        return self.status == DecisionStatus.APPROVED


def _counts_label(yes: int, no: int, abstain: int) -> str:
    return f"{yes} yes, {no} no, {abstain} abstain"


def tally_votes(
    snapshot: GovernanceSnapshot,
    votes: Iterable[Vote],
    queen_id: str | None,
) -> TallyOutcome:
    """Compute the outcome of a voting decision.

    Args:
        snapshot: Rules copied onto the decision at creation.
        votes: All recorded votes, keeper slot included.
        queen_id: The room's queen, consulted only for majority ties.

    Returns:
        TallyOutcome with APPROVED or REJECTED status.
    """
    yes = no = abstain = 0
    queen_choice: VoteChoice | None = None
    for vote in votes:
        if vote.choice == VoteChoice.YES:
            yes += 1
        elif vote.choice == VoteChoice.NO:
            no += 1
        else:
            abstain += 1
        if queen_id is not None and vote.voter_id == queen_id:
            queen_choice = vote.choice

    active = yes + no
    counts = _counts_label(yes, no, abstain)

    if active < snapshot.min_voters:
        return TallyOutcome(
            status=DecisionStatus.REJECTED,
            result=QUORUM_NOT_MET,
            yes=yes,
            no=no,
            abstain=abstain,
            quorum_met=False,
        )

    if active == 0:
        return TallyOutcome(
            status=DecisionStatus.REJECTED,
            result=f"Rejected: no yes/no votes cast ({counts})",
            yes=yes,
            no=no,
            abstain=abstain,
            quorum_met=True,
        )

    threshold = snapshot.threshold
    if threshold == Threshold.MAJORITY and yes * 2 == active:
        if snapshot.tie_breaker == TieBreaker.QUEEN:
            approved = queen_choice == VoteChoice.YES
            status = DecisionStatus.APPROVED if approved else DecisionStatus.REJECTED
            return TallyOutcome(
                status=status,
                result=f"Tie broken by queen: {status.value} ({counts})",
                yes=yes,
                no=no,
                abstain=abstain,
                quorum_met=True,
                tie_broken_by_queen=True,
            )
        return TallyOutcome(
            status=DecisionStatus.REJECTED,
            result=f"Rejected: tie with no tie-breaker ({counts})",
            yes=yes,
            no=no,
            abstain=abstain,
            quorum_met=True,
        )

    if threshold == Threshold.MAJORITY:
        approved = yes * 2 > active
    elif threshold == Threshold.SUPERMAJORITY:
        approved = yes * 3 >= active * 2
    else:
        approved = no == 0 and yes == active

    status = DecisionStatus.APPROVED if approved else DecisionStatus.REJECTED
    label = "Approved" if approved else "Rejected"
    return TallyOutcome(
        status=status,
        result=f"{label}: {counts} ({threshold.value})",
        yes=yes,
        no=no,
        abstain=abstain,
        quorum_met=True,
    )
