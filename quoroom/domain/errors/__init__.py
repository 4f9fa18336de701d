"""Domain errors for Quoroom.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from QuorumError.
"""

from quoroom.domain.errors.decision import (
    DecisionError,
    DecisionNotFoundError,
    DuplicateVoteError,
    InvalidStateError,
    NotFoundError,
    RoomNotFoundError,
    ValidationError,
)

__all__: list[str] = [
    "DecisionError",
    "DecisionNotFoundError",
    "DuplicateVoteError",
    "InvalidStateError",
    "NotFoundError",
    "RoomNotFoundError",
    "ValidationError",
]
