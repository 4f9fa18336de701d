"""Domain models for Quoroom.

Contains value objects and domain models that represent
core business concepts. These models are immutable and
contain no infrastructure dependencies.
"""

from quoroom.domain.models.activity import ActivityEventType, RoomActivityEntry
from quoroom.domain.models.decision import (
    KEEPER_VOTER_ID,
    TERMINAL_STATUSES,
    Decision,
    DecisionPathway,
    DecisionStatus,
    Vote,
    VoteChoice,
)
from quoroom.domain.models.governance import (
    DecisionType,
    GovernanceSnapshot,
    RoomGovernanceConfig,
    RoomVoter,
    Threshold,
    TieBreaker,
)
from quoroom.domain.models.voter_health import VoterHealthRecord, VoterHealthReport

__all__: list[str] = [
    "KEEPER_VOTER_ID",
    "TERMINAL_STATUSES",
    "ActivityEventType",
    "Decision",
    "DecisionPathway",
    "DecisionStatus",
    "DecisionType",
    "GovernanceSnapshot",
    "RoomActivityEntry",
    "RoomGovernanceConfig",
    "RoomVoter",
    "Threshold",
    "TieBreaker",
    "Vote",
    "VoteChoice",
    "VoterHealthRecord",
    "VoterHealthReport",
]
