"""
Domain layer - Pure decision logic for Quoroom.

This layer contains:
- Domain models (Decision, Vote, governance config, voter health)
- Domain services (tally computation)
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure, or bootstrap.
Only stdlib and typing imports are allowed.
"""

from quoroom.domain.errors import (
    DecisionNotFoundError,
    DuplicateVoteError,
    InvalidStateError,
    NotFoundError,
    RoomNotFoundError,
    ValidationError,
)
from quoroom.domain.exceptions import QuorumError

__all__: list[str] = [
    "QuorumError",
    "NotFoundError",
    "RoomNotFoundError",
    "DecisionNotFoundError",
    "InvalidStateError",
    "DuplicateVoteError",
    "ValidationError",
]
