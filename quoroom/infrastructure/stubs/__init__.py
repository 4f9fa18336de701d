"""Infrastructure stubs for development and testing.

This module provides stub implementations of infrastructure ports
for use in development and testing environments.

Available stubs:
- DecisionRepositoryStub: In-memory decisions and votes with lock-based CAS
- RoomRegistryStub: In-memory rooms, rosters and governance configs
- VoterHealthRepositoryStub: In-memory participation counters
- ActivityLogStub: In-memory room activity feed

WARNING: These stubs are NOT for production use.
Production implementations are in quoroom/infrastructure/adapters/.
"""

from quoroom.infrastructure.stubs.activity_log_stub import ActivityLogStub
from quoroom.infrastructure.stubs.decision_repository_stub import (
    DecisionRepositoryStub,
)
from quoroom.infrastructure.stubs.room_registry_stub import RoomRegistryStub
from quoroom.infrastructure.stubs.voter_health_repository_stub import (
    VoterHealthRepositoryStub,
)

__all__ = [
    "ActivityLogStub",
    "DecisionRepositoryStub",
    "RoomRegistryStub",
    "VoterHealthRepositoryStub",
]
