"""Application ports - Abstract interfaces for infrastructure adapters.

This module defines the contracts that infrastructure adapters must implement.
Ports enable dependency inversion and make the application layer testable.

Available ports:
- DecisionRepositoryProtocol: Decisions and votes with compare-and-set status
- RoomRegistryProtocol: Room governance config, roster and queen
- VoterHealthRepositoryProtocol: Per-(room, voter) participation counters
- ActivityLogProtocol: Room activity feed
"""

from quoroom.application.ports.activity_log import ActivityLogProtocol
from quoroom.application.ports.decision_repository import DecisionRepositoryProtocol
from quoroom.application.ports.room_registry import RoomRegistryProtocol
from quoroom.application.ports.voter_health_repository import (
    VoterHealthRepositoryProtocol,
)

__all__: list[str] = [
    "ActivityLogProtocol",
    "DecisionRepositoryProtocol",
    "RoomRegistryProtocol",
    "VoterHealthRepositoryProtocol",
]
