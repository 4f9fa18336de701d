"""PostgreSQL room activity log."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quoroom.application.ports.activity_log import ActivityLogProtocol
from quoroom.domain.models.activity import ActivityEventType


class PostgresActivityLog(ActivityLogProtocol):
    """Appends entries to room_activity.

    Attributes:
        _session_factory: SQLAlchemy async session factory.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def log_room_activity(
        self,
        room_id: UUID,
        event_type: ActivityEventType,
        summary: str,
        actor_id: str | None = None,
    ) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO room_activity (room_id, event_type, summary, actor_id)
                    VALUES (:room_id, :event_type, :summary, :actor_id)
                """),
                {
                    "room_id": room_id,
                    "event_type": event_type.value,
                    "summary": summary,
                    "actor_id": actor_id,
                },
            )
