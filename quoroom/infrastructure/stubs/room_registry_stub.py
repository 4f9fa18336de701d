"""Room registry stub implementation.

In-memory rooms with a governance config, an agent roster and an optional
queen. Tests mutate rooms through add_room() and update_config(); the
engine only ever reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID, uuid4

from quoroom.application.ports.room_registry import RoomRegistryProtocol
from quoroom.domain.models.governance import RoomGovernanceConfig, RoomVoter


@dataclass
class _Room:
    config: RoomGovernanceConfig
    voters: dict[str, RoomVoter] = field(default_factory=dict)
    queen_id: str | None = None


class RoomRegistryStub(RoomRegistryProtocol):
    """In-memory stub implementation of RoomRegistryProtocol.

    Attributes:
        _rooms: Dictionary mapping room id to its state.
        _default_config: Config used when add_room() gets none.
    """

    def __init__(self, default_config: RoomGovernanceConfig | None = None) -> None:
        """Initialize the stub with no rooms.

        Args:
            default_config: Config for rooms added without one.
        """
        self._rooms: dict[UUID, _Room] = {}
        self._default_config = default_config or RoomGovernanceConfig()

    def add_room(
        self,
        room_id: UUID | None = None,
        config: RoomGovernanceConfig | None = None,
        voters: list[RoomVoter] | None = None,
        queen_id: str | None = None,
    ) -> UUID:
        """Register a room.

        If queen_id is not given, the first voter flagged is_queen is used.

        Returns:
            The room id.
        """
        room_id = room_id or uuid4()
        roster = {v.voter_id: v for v in voters or []}
        if queen_id is None:
            queen_id = next((v.voter_id for v in roster.values() if v.is_queen), None)
        self._rooms[room_id] = _Room(
            config=config or self._default_config,
            voters=roster,
            queen_id=queen_id,
        )
        return room_id

    def update_config(self, room_id: UUID, config: RoomGovernanceConfig) -> None:
        """Replace a room's governance config.

        Raises:
            KeyError: If the room doesn't exist.
        """
        self._rooms[room_id].config = config

    def add_voter(self, room_id: UUID, voter: RoomVoter) -> None:
        """Add a roster member to a room.

        Raises:
            KeyError: If the room doesn't exist.
        """
        room = self._rooms[room_id]
        room.voters[voter.voter_id] = voter
        if voter.is_queen:
            room.queen_id = voter.voter_id

    def remove_voter(self, room_id: UUID, voter_id: str) -> None:
        """Remove a roster member from a room."""
        room = self._rooms[room_id]
        room.voters.pop(voter_id, None)
        if room.queen_id == voter_id:
            room.queen_id = None

    async def room_exists(self, room_id: UUID) -> bool:
        return room_id in self._rooms

    async def get_room_governance_config(
        self, room_id: UUID
    ) -> RoomGovernanceConfig | None:
        room = self._rooms.get(room_id)
        return room.config if room else None

    async def get_room_voters(self, room_id: UUID) -> list[RoomVoter]:
        room = self._rooms.get(room_id)
        if room is None:
            return []
        return sorted(room.voters.values(), key=lambda v: v.voter_id)

    async def get_queen_id(self, room_id: UUID) -> str | None:
        room = self._rooms.get(room_id)
        return room.queen_id if room else None

    def clear(self) -> None:
        """Remove all rooms (for testing)."""
        self._rooms.clear()
