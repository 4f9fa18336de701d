"""Room activity log stub implementation."""

from __future__ import annotations

from uuid import UUID

from quoroom.application.ports.activity_log import ActivityLogProtocol
from quoroom.domain.models.activity import ActivityEventType, RoomActivityEntry


class ActivityLogStub(ActivityLogProtocol):
    """In-memory room activity feed.

    Attributes:
        entries: All entries in append order.
    """

    def __init__(self) -> None:
        self.entries: list[RoomActivityEntry] = []

    async def log_room_activity(
        self,
        room_id: UUID,
        event_type: ActivityEventType,
        summary: str,
        actor_id: str | None = None,
    ) -> None:
        self.entries.append(
            RoomActivityEntry(
                room_id=room_id,
                event_type=event_type,
                summary=summary,
                actor_id=actor_id,
            )
        )

    def for_room(self, room_id: UUID) -> list[RoomActivityEntry]:
        """Get a room's entries in append order."""
        return [e for e in self.entries if e.room_id == room_id]

    def clear(self) -> None:
        """Clear all entries (for testing)."""
        self.entries.clear()
