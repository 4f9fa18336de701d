"""PostgreSQL room registry.

Read-only view over rooms and room_voters. The governance config is stored
as JSONB in the room subsystem's camelCase layout and parsed through
RoomGovernanceConfig.from_dict(); absent keys take engine defaults.
"""

from __future__ import annotations

import json
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from quoroom.application.ports.room_registry import RoomRegistryProtocol
from quoroom.domain.models.governance import RoomGovernanceConfig, RoomVoter

logger = get_logger()


class PostgresRoomRegistry(RoomRegistryProtocol):
    """PostgreSQL implementation of RoomRegistryProtocol.

    Attributes:
        _session_factory: SQLAlchemy async session factory.
        _defaults: Config supplying values the stored JSON omits.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        defaults: RoomGovernanceConfig | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            session_factory: SQLAlchemy async session factory.
            defaults: Engine-wide defaults merged under stored settings.
        """
        self._session_factory = session_factory
        self._defaults = defaults or RoomGovernanceConfig()

    async def room_exists(self, room_id: UUID) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                text("SELECT EXISTS (SELECT 1 FROM rooms WHERE id = :room_id)"),
                {"room_id": room_id},
            )
            return bool(result.scalar())

    async def get_room_governance_config(
        self, room_id: UUID
    ) -> RoomGovernanceConfig | None:
        async with self._session_factory() as session:
            row = (
                await session.execute(
                    text("SELECT governance_config FROM rooms WHERE id = :room_id"),
                    {"room_id": room_id},
                )
            ).fetchone()
        if row is None:
            return None

        raw = row[0]
        # asyncpg hands untyped JSONB back as text
        stored = json.loads(raw) if isinstance(raw, str) else dict(raw or {})
        merged = {**self._defaults.to_dict(), **stored}
        return RoomGovernanceConfig.from_dict(merged)

    async def get_room_voters(self, room_id: UUID) -> list[RoomVoter]:
        async with self._session_factory() as session:
            rows = (
                await session.execute(
                    text("""
                        SELECT v.voter_id, v.name, (v.voter_id = r.queen_id) AS is_queen
                        FROM room_voters v
                        JOIN rooms r ON r.id = v.room_id
                        WHERE v.room_id = :room_id
                        ORDER BY v.voter_id
                    """),
                    {"room_id": room_id},
                )
            ).mappings().all()
        return [
            RoomVoter(
                voter_id=row["voter_id"],
                name=row["name"],
                is_queen=bool(row["is_queen"]),
            )
            for row in rows
        ]

    async def get_queen_id(self, room_id: UUID) -> str | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text("SELECT queen_id FROM rooms WHERE id = :room_id"),
                {"room_id": room_id},
            )
            return result.scalar()
