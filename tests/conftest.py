"""
Pytest configuration and shared fixtures for Quoroom tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async collaborator mocking
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from uuid import UUID

import pytest

from quoroom.application.services.quorum_engine import QuorumEngine
from quoroom.bootstrap.quorum_engine import build_quorum_engine
from quoroom.domain.models.governance import RoomGovernanceConfig, RoomVoter
from quoroom.infrastructure.stubs import (
    ActivityLogStub,
    DecisionRepositoryStub,
    RoomRegistryStub,
    VoterHealthRepositoryStub,
)

AddRoom = Callable[..., UUID]


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from quoroom import __version__

    return __version__


@pytest.fixture
def decision_repo() -> DecisionRepositoryStub:
    return DecisionRepositoryStub()


@pytest.fixture
def room_registry() -> RoomRegistryStub:
    return RoomRegistryStub()


@pytest.fixture
def health_repo() -> VoterHealthRepositoryStub:
    return VoterHealthRepositoryStub()


@pytest.fixture
def activity_log() -> ActivityLogStub:
    return ActivityLogStub()


@pytest.fixture
def engine(
    decision_repo: DecisionRepositoryStub,
    room_registry: RoomRegistryStub,
    health_repo: VoterHealthRepositoryStub,
    activity_log: ActivityLogStub,
) -> QuorumEngine:
    """Quorum engine wired over the in-memory stubs."""
    return build_quorum_engine(
        decisions=decision_repo,
        rooms=room_registry,
        health_repository=health_repo,
        activity=activity_log,
    )


@pytest.fixture
def add_room(room_registry: RoomRegistryStub) -> AddRoom:
    """Factory registering a room with a roster and governance settings.

    Example:
        room_id = add_room(voters=("queen", "w1"), min_voters=2)
    """

    def _add_room(
        voters: Iterable[str] = ("queen", "w1", "w2"),
        queen_id: str | None = "queen",
        **config_kwargs: object,
    ) -> UUID:
        roster = [
            RoomVoter(voter_id=v, name=v.title(), is_queen=v == queen_id)
            for v in voters
        ]
        config = RoomGovernanceConfig(**config_kwargs)  # type: ignore[arg-type]
        return room_registry.add_room(config=config, voters=roster, queen_id=queen_id)

    return _add_room
