"""Voter health repository port.

Participation counters are explicit per-(room, voter) records persisted
through the store so the engine stays safe across concurrent handlers and
replicas. Counters only ever grow.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from quoroom.domain.models.voter_health import VoterHealthRecord


class VoterHealthRepositoryProtocol(Protocol):
    """Protocol for voter participation counters."""

    async def increment_votes_cast(self, room_id: UUID, voter_id: str) -> int:
        """Atomically add one to votes_cast.

        Returns:
            The new votes_cast value.
        """
        ...

    async def increment_votes_missed(self, room_id: UUID, voter_id: str) -> int:
        """Atomically add one to votes_missed.

        Returns:
            The new votes_missed value.
        """
        ...

    async def get_records(self, room_id: UUID) -> list[VoterHealthRecord]:
        """Get all counters recorded for a room.

        Voters without any recorded activity may be absent.
        """
        ...
