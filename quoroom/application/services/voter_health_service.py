"""Voter Health Service.

Maintains vote participation counters per (room, voter) and derives
participation rate and eligibility from them.

Constraints:
- Counters are monotonic and persisted through the repository
- A voter with no history is healthy (cold start is never penalized)
- Eligibility is informational: tally completion and quorum always use
  the full roster, unhealthy voters are never excluded from a vote
"""

from __future__ import annotations

from uuid import UUID

from structlog import get_logger

from quoroom.application.ports.room_registry import RoomRegistryProtocol
from quoroom.application.ports.voter_health_repository import (
    VoterHealthRepositoryProtocol,
)
from quoroom.domain.errors.decision import RoomNotFoundError, ValidationError
from quoroom.domain.models.governance import RoomGovernanceConfig, RoomVoter
from quoroom.domain.models.voter_health import VoterHealthRecord, VoterHealthReport

logger = get_logger()


class VoterHealthService:
    """Service for voter participation tracking.

    This service provides:
    1. increment_votes_cast() / increment_votes_missed(): counter updates
    2. get_voter_health(): participation report for a room's roster
    3. get_eligible_voters(): roster filtered to healthy voters when enabled

    Attributes:
        _health: Voter health repository.
        _rooms: Room registry.
    """

    def __init__(
        self,
        health: VoterHealthRepositoryProtocol,
        rooms: RoomRegistryProtocol,
    ) -> None:
        """Initialize the Voter Health Service.

        Args:
            health: Voter health repository.
            rooms: Room registry for roster and config lookups.
        """
        self._health = health
        self._rooms = rooms

    async def increment_votes_cast(self, room_id: UUID, voter_id: str) -> int:
        votes_cast = await self._health.increment_votes_cast(room_id, voter_id)
        logger.debug(
            "votes_cast_incremented",
            room_id=str(room_id),
            voter_id=voter_id,
            votes_cast=votes_cast,
        )
        return votes_cast

    async def increment_votes_missed(self, room_id: UUID, voter_id: str) -> int:
        votes_missed = await self._health.increment_votes_missed(room_id, voter_id)
        logger.info(
            "vote_missed",
            room_id=str(room_id),
            voter_id=voter_id,
            votes_missed=votes_missed,
        )
        return votes_missed

    async def get_voter_health(
        self,
        room_id: UUID,
        threshold: float | None = None,
    ) -> list[VoterHealthReport]:
        """Report participation for every roster member of a room.

        Args:
            room_id: Room to report on.
            threshold: Minimum participation rate to count as healthy.
                Defaults to the room's configured voter_health_threshold.

        Returns:
            One report per roster member, in roster order.

        Raises:
            RoomNotFoundError: If the room does not exist.
            ValidationError: If threshold is outside [0.0, 1.0].
        """
        config = await self._require_config(room_id)
        if threshold is None:
            threshold = config.voter_health_threshold
        elif not 0.0 <= threshold <= 1.0:
            raise ValidationError(
                "threshold", f"must be between 0.0 and 1.0, got {threshold}"
            )

        roster = await self._rooms.get_room_voters(room_id)
        records = {r.voter_id: r for r in await self._health.get_records(room_id)}

        reports: list[VoterHealthReport] = []
        for voter in roster:
            record = records.get(voter.voter_id) or VoterHealthRecord(
                room_id=room_id, voter_id=voter.voter_id
            )
            reports.append(
                VoterHealthReport(
                    voter_id=voter.voter_id,
                    voter_name=voter.name,
                    votes_cast=record.votes_cast,
                    votes_missed=record.votes_missed,
                    total_decisions=record.total_decisions,
                    participation_rate=record.participation_rate,
                    is_healthy=record.is_healthy(threshold),
                )
            )
        return reports

    async def get_eligible_voters(self, room_id: UUID) -> list[RoomVoter]:
        """Get the roster filtered to healthy voters when tracking is enabled.

        Raises:
            RoomNotFoundError: If the room does not exist.
        """
        config = await self._require_config(room_id)
        roster = await self._rooms.get_room_voters(room_id)
        if not config.voter_health:
            return roster

        reports = await self.get_voter_health(room_id, config.voter_health_threshold)
        healthy = {r.voter_id for r in reports if r.is_healthy}
        eligible = [v for v in roster if v.voter_id in healthy]

        if len(eligible) < len(roster):
            logger.info(
                "unhealthy_voters_filtered",
                room_id=str(room_id),
                roster_size=len(roster),
                eligible=len(eligible),
            )
        return eligible

    async def _require_config(self, room_id: UUID) -> RoomGovernanceConfig:
        config = await self._rooms.get_room_governance_config(room_id)
        if config is None:
            raise RoomNotFoundError(room_id)
        return config
