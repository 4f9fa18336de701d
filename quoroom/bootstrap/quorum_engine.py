"""Bootstrap wiring for quorum engine dependencies.

Repositories are PostgreSQL-backed when DATABASE_URL is configured and
fall back to in-memory stubs otherwise. Every dependency is a lazy
singleton with a set_* override and a single reset for tests.
"""

from __future__ import annotations

import os

from structlog import get_logger

from quoroom.application.ports.activity_log import ActivityLogProtocol
from quoroom.application.ports.decision_repository import DecisionRepositoryProtocol
from quoroom.application.ports.room_registry import RoomRegistryProtocol
from quoroom.application.ports.voter_health_repository import (
    VoterHealthRepositoryProtocol,
)
from quoroom.application.services.expiry_sweep_service import ExpirySweepService
from quoroom.application.services.objection_window_service import (
    ObjectionWindowService,
)
from quoroom.application.services.proposal_admission_service import (
    ProposalAdmissionService,
)
from quoroom.application.services.quorum_engine import QuorumEngine
from quoroom.application.services.vote_ledger_service import VoteLedgerService
from quoroom.application.services.voter_health_service import VoterHealthService
from quoroom.config.quorum_config import QuorumEngineConfig
from quoroom.infrastructure.stubs.activity_log_stub import ActivityLogStub
from quoroom.infrastructure.stubs.decision_repository_stub import (
    DecisionRepositoryStub,
)
from quoroom.infrastructure.stubs.room_registry_stub import RoomRegistryStub
from quoroom.infrastructure.stubs.voter_health_repository_stub import (
    VoterHealthRepositoryStub,
)

logger = get_logger()

_config: QuorumEngineConfig | None = None
_decision_repository: DecisionRepositoryProtocol | None = None
_room_registry: RoomRegistryProtocol | None = None
_voter_health_repository: VoterHealthRepositoryProtocol | None = None
_activity_log: ActivityLogProtocol | None = None
_quorum_engine: QuorumEngine | None = None


def _use_postgres() -> bool:
    return bool(os.environ.get("DATABASE_URL"))


def get_quorum_engine_config() -> QuorumEngineConfig:
    """Get quorum engine configuration."""
    global _config
    if _config is None:
        _config = QuorumEngineConfig.from_environment()
    return _config


def get_decision_repository() -> DecisionRepositoryProtocol:
    """Get decision repository instance.

    Returns the PostgreSQL repository if DATABASE_URL is configured,
    otherwise falls back to the in-memory stub.
    """
    global _decision_repository
    if _decision_repository is None:
        if _use_postgres():
            try:
                from quoroom.bootstrap.database import get_session_factory
                from quoroom.infrastructure.adapters.persistence.decision_repository import (
                    PostgresDecisionRepository,
                )

                _decision_repository = PostgresDecisionRepository(
                    session_factory=get_session_factory()
                )
                logger.info(
                    "decision_repository_initialized",
                    repository_type="PostgreSQL",
                )
            except Exception as e:
                logger.error(
                    "postgres_repository_init_failed",
                    repository="decision",
                    error=str(e),
                    message="Falling back to in-memory stub",
                )
                _decision_repository = DecisionRepositoryStub()
        else:
            logger.warning(
                "decision_repository_initialized",
                repository_type="InMemoryStub",
                message="DATABASE_URL not set - using in-memory stub (data will not persist)",
            )
            _decision_repository = DecisionRepositoryStub()
    return _decision_repository


def get_room_registry() -> RoomRegistryProtocol:
    """Get room registry instance."""
    global _room_registry
    if _room_registry is None:
        defaults = get_quorum_engine_config().default_room_config()
        if _use_postgres():
            try:
                from quoroom.bootstrap.database import get_session_factory
                from quoroom.infrastructure.adapters.persistence.room_registry import (
                    PostgresRoomRegistry,
                )

                _room_registry = PostgresRoomRegistry(
                    session_factory=get_session_factory(),
                    defaults=defaults,
                )
            except Exception as e:
                logger.error(
                    "postgres_repository_init_failed",
                    repository="room_registry",
                    error=str(e),
                    message="Falling back to in-memory stub",
                )
                _room_registry = RoomRegistryStub(default_config=defaults)
        else:
            _room_registry = RoomRegistryStub(default_config=defaults)
    return _room_registry


def get_voter_health_repository() -> VoterHealthRepositoryProtocol:
    """Get voter health repository instance."""
    global _voter_health_repository
    if _voter_health_repository is None:
        if _use_postgres():
            try:
                from quoroom.bootstrap.database import get_session_factory
                from quoroom.infrastructure.adapters.persistence.voter_health_repository import (
                    PostgresVoterHealthRepository,
                )

                _voter_health_repository = PostgresVoterHealthRepository(
                    session_factory=get_session_factory()
                )
            except Exception as e:
                logger.error(
                    "postgres_repository_init_failed",
                    repository="voter_health",
                    error=str(e),
                    message="Falling back to in-memory stub",
                )
                _voter_health_repository = VoterHealthRepositoryStub()
        else:
            _voter_health_repository = VoterHealthRepositoryStub()
    return _voter_health_repository


def get_activity_log() -> ActivityLogProtocol:
    """Get room activity log instance."""
    global _activity_log
    if _activity_log is None:
        if _use_postgres():
            try:
                from quoroom.bootstrap.database import get_session_factory
                from quoroom.infrastructure.adapters.persistence.activity_log import (
                    PostgresActivityLog,
                )

                _activity_log = PostgresActivityLog(session_factory=get_session_factory())
            except Exception as e:
                logger.error(
                    "postgres_repository_init_failed",
                    repository="activity_log",
                    error=str(e),
                    message="Falling back to in-memory stub",
                )
                _activity_log = ActivityLogStub()
        else:
            _activity_log = ActivityLogStub()
    return _activity_log


def build_quorum_engine(
    decisions: DecisionRepositoryProtocol,
    rooms: RoomRegistryProtocol,
    health_repository: VoterHealthRepositoryProtocol,
    activity: ActivityLogProtocol,
) -> QuorumEngine:
    """Compose the engine services over the given ports."""
    health = VoterHealthService(health=health_repository, rooms=rooms)
    ledger = VoteLedgerService(decisions=decisions, rooms=rooms, health=health)
    return QuorumEngine(
        decisions=decisions,
        rooms=rooms,
        admission=ProposalAdmissionService(
            decisions=decisions, rooms=rooms, activity=activity
        ),
        ledger=ledger,
        objections=ObjectionWindowService(decisions=decisions),
        health=health,
        sweep=ExpirySweepService(decisions=decisions, ledger=ledger),
    )


def get_quorum_engine() -> QuorumEngine:
    """Get the quorum engine facade."""
    global _quorum_engine
    if _quorum_engine is None:
        _quorum_engine = build_quorum_engine(
            decisions=get_decision_repository(),
            rooms=get_room_registry(),
            health_repository=get_voter_health_repository(),
            activity=get_activity_log(),
        )
    return _quorum_engine


def reset_quorum_engine_dependencies() -> None:
    """Reset quorum engine dependency singletons."""
    global _config
    global _decision_repository
    global _room_registry
    global _voter_health_repository
    global _activity_log
    global _quorum_engine

    _config = None
    _decision_repository = None
    _room_registry = None
    _voter_health_repository = None
    _activity_log = None
    _quorum_engine = None


def set_quorum_engine_config(config: QuorumEngineConfig) -> None:
    """Set custom engine config for testing."""
    global _config
    _config = config


def set_decision_repository(repo: DecisionRepositoryProtocol) -> None:
    """Set custom decision repository for testing."""
    global _decision_repository
    _decision_repository = repo


def set_room_registry(registry: RoomRegistryProtocol) -> None:
    """Set custom room registry for testing."""
    global _room_registry
    _room_registry = registry


def set_voter_health_repository(repo: VoterHealthRepositoryProtocol) -> None:
    """Set custom voter health repository for testing."""
    global _voter_health_repository
    _voter_health_repository = repo


def set_activity_log(activity: ActivityLogProtocol) -> None:
    """Set custom activity log for testing."""
    global _activity_log
    _activity_log = activity


def set_quorum_engine(engine: QuorumEngine) -> None:
    """Set custom engine for testing."""
    global _quorum_engine
    _quorum_engine = engine
