"""Voter health repository stub implementation."""

from __future__ import annotations

import asyncio
from uuid import UUID

from quoroom.application.ports.voter_health_repository import (
    VoterHealthRepositoryProtocol,
)
from quoroom.domain.models.voter_health import VoterHealthRecord


class VoterHealthRepositoryStub(VoterHealthRepositoryProtocol):
    """In-memory participation counters keyed by (room, voter).

    Attributes:
        _records: Dictionary mapping (room_id, voter_id) to the record.
    """

    def __init__(self) -> None:
        """Initialize the stub with no counters."""
        self._records: dict[tuple[UUID, str], VoterHealthRecord] = {}
        self._lock = asyncio.Lock()

    async def increment_votes_cast(self, room_id: UUID, voter_id: str) -> int:
        async with self._lock:
            record = self._get(room_id, voter_id)
            updated = VoterHealthRecord(
                room_id=room_id,
                voter_id=voter_id,
                votes_cast=record.votes_cast + 1,
                votes_missed=record.votes_missed,
            )
            self._records[(room_id, voter_id)] = updated
            return updated.votes_cast

    async def increment_votes_missed(self, room_id: UUID, voter_id: str) -> int:
        async with self._lock:
            record = self._get(room_id, voter_id)
            updated = VoterHealthRecord(
                room_id=room_id,
                voter_id=voter_id,
                votes_cast=record.votes_cast,
                votes_missed=record.votes_missed + 1,
            )
            self._records[(room_id, voter_id)] = updated
            return updated.votes_missed

    async def get_records(self, room_id: UUID) -> list[VoterHealthRecord]:
        return sorted(
            (r for (rid, _), r in self._records.items() if rid == room_id),
            key=lambda r: r.voter_id,
        )

    def _get(self, room_id: UUID, voter_id: str) -> VoterHealthRecord:
        return self._records.get(
            (room_id, voter_id),
            VoterHealthRecord(room_id=room_id, voter_id=voter_id),
        )

    def clear(self) -> None:
        """Clear all counters (for testing)."""
        self._records.clear()
