"""Voter participation models.

Participation is tracked per (room, voter). A voter with no history has a
participation rate of 1.0: cold start is never penalized.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class VoterHealthRecord:
    """Persisted participation counters for one voter in one room.

    Attributes:
        room_id: Room the counters belong to.
        voter_id: Agent identifier.
        votes_cast: Votes the voter cast on voting decisions.
        votes_missed: Voting decisions tallied without the voter's vote.
    """

    room_id: UUID
    voter_id: str
    votes_cast: int = 0
    votes_missed: int = 0

    @property
    def total_decisions(self) -> int:
        return self.votes_cast + self.votes_missed

    @property
    def participation_rate(self) -> float:
        """cast / (cast + missed), or 1.0 without history."""
        total = self.total_decisions
        if total == 0:
            return 1.0
        return self.votes_cast / total

    def is_healthy(self, threshold: float) -> bool:
        return self.participation_rate >= threshold


@dataclass(frozen=True)
class VoterHealthReport:
    """Participation summary for a roster member.

    Attributes:
        voter_id: Agent identifier.
        voter_name: Display name.
        votes_cast: Votes cast.
        votes_missed: Votes missed.
        total_decisions: votes_cast + votes_missed.
        participation_rate: Rate in [0.0, 1.0].
        is_healthy: participation_rate >= threshold.
    """

    voter_id: str
    voter_name: str
    votes_cast: int
    votes_missed: int
    total_decisions: int
    participation_rate: float
    is_healthy: bool
