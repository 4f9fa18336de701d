"""PostgreSQL persistence adapters.

All adapters take an async_sessionmaker (see quoroom.bootstrap.database)
and issue SQL through sqlalchemy.text against the schema in
migrations/001_create_quorum_tables.sql.
"""

from quoroom.infrastructure.adapters.persistence.activity_log import (
    PostgresActivityLog,
)
from quoroom.infrastructure.adapters.persistence.decision_repository import (
    PostgresDecisionRepository,
)
from quoroom.infrastructure.adapters.persistence.room_registry import (
    PostgresRoomRegistry,
)
from quoroom.infrastructure.adapters.persistence.voter_health_repository import (
    PostgresVoterHealthRepository,
)

__all__: list[str] = [
    "PostgresActivityLog",
    "PostgresDecisionRepository",
    "PostgresRoomRegistry",
    "PostgresVoterHealthRepository",
]
