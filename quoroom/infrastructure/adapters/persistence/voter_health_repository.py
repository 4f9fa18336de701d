"""PostgreSQL voter health repository.

Counters are upserted with INSERT ... ON CONFLICT DO UPDATE so concurrent
increments from separate handlers or replicas never lose a count.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quoroom.application.ports.voter_health_repository import (
    VoterHealthRepositoryProtocol,
)
from quoroom.domain.models.voter_health import VoterHealthRecord

# Only these two column names are ever interpolated
_COUNTER_COLUMNS = frozenset({"votes_cast", "votes_missed"})


class PostgresVoterHealthRepository(VoterHealthRepositoryProtocol):
    """PostgreSQL implementation of VoterHealthRepositoryProtocol.

    Attributes:
        _session_factory: SQLAlchemy async session factory.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def increment_votes_cast(self, room_id: UUID, voter_id: str) -> int:
        return await self._increment(room_id, voter_id, "votes_cast")

    async def increment_votes_missed(self, room_id: UUID, voter_id: str) -> int:
        return await self._increment(room_id, voter_id, "votes_missed")

    async def get_records(self, room_id: UUID) -> list[VoterHealthRecord]:
        async with self._session_factory() as session:
            rows = (
                await session.execute(
                    text("""
                        SELECT room_id, voter_id, votes_cast, votes_missed
                        FROM voter_health
                        WHERE room_id = :room_id
                        ORDER BY voter_id
                    """),
                    {"room_id": room_id},
                )
            ).mappings().all()
        return [
            VoterHealthRecord(
                room_id=row["room_id"],
                voter_id=row["voter_id"],
                votes_cast=row["votes_cast"],
                votes_missed=row["votes_missed"],
            )
            for row in rows
        ]

    async def _increment(self, room_id: UUID, voter_id: str, column: str) -> int:
        if column not in _COUNTER_COLUMNS:
            raise ValueError(f"Unknown counter column: {column}")
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                text(f"""
                    INSERT INTO voter_health (room_id, voter_id, {column})
                    VALUES (:room_id, :voter_id, 1)
                    ON CONFLICT (room_id, voter_id) DO UPDATE
                    SET {column} = voter_health.{column} + 1,
                        updated_at = now()
                    RETURNING {column}
                """),
                {"room_id": room_id, "voter_id": voter_id},
            )
            return int(result.scalar_one())
