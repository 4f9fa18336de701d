"""Room registry port.

Rooms, their rosters and their governance config are owned by the room
management subsystem. The quorum engine reads them through this port and
never writes them.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from quoroom.domain.models.governance import RoomGovernanceConfig, RoomVoter


class RoomRegistryProtocol(Protocol):
    """Protocol for read access to rooms."""

    async def room_exists(self, room_id: UUID) -> bool:
        """Check whether a room exists."""
        ...

    async def get_room_governance_config(
        self, room_id: UUID
    ) -> RoomGovernanceConfig | None:
        """Get a room's current governance config.

        Returns:
            The config, or None if the room does not exist.
        """
        ...

    async def get_room_voters(self, room_id: UUID) -> list[RoomVoter]:
        """Get the full agent roster of a room (queen included, keeper excluded).

        Returns:
            Roster ordered by voter id; empty if the room does not exist.
        """
        ...

    async def get_queen_id(self, room_id: UUID) -> str | None:
        """Get the voter id of the room's queen, if one is assigned."""
        ...
