"""Room activity log entry model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

from quoroom.domain.models.decision import utc_now


class ActivityEventType(Enum):
    """Category tag of a room activity entry."""

    DECISION = "decision"
    MILESTONE = "milestone"
    SYSTEM = "system"


@dataclass(frozen=True)
class RoomActivityEntry:
    """An entry in a room's activity feed.

    Attributes:
        room_id: Room the entry belongs to.
        event_type: Category tag.
        summary: One-line description.
        actor_id: Agent that caused it, if any.
        created_at: Timestamp (UTC).
    """

    room_id: UUID
    event_type: ActivityEventType
    summary: str
    actor_id: str | None = None
    created_at: datetime = field(default_factory=utc_now)
