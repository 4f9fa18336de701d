"""Room activity log port.

The activity feed belongs to the room subsystem; the engine appends
entries when proposals are admitted.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from quoroom.domain.models.activity import ActivityEventType


class ActivityLogProtocol(Protocol):
    """Protocol for appending room activity entries."""

    async def log_room_activity(
        self,
        room_id: UUID,
        event_type: ActivityEventType,
        summary: str,
        actor_id: str | None = None,
    ) -> None:
        """Append an entry to a room's activity feed.

        Args:
            room_id: Room the entry belongs to.
            event_type: Category tag.
            summary: One-line description.
            actor_id: Agent that caused it, if any.
        """
        ...
