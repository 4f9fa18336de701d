"""Application services - Use case orchestration.

This module contains application services that orchestrate domain
operations and coordinate with infrastructure adapters.

Available services:
- ProposalAdmissionService: Validates, classifies and routes proposals
- VoteLedgerService: One vote per voter, tally with snapshotted rules
- ObjectionWindowService: Objections and keeper shortcuts on announcements
- VoterHealthService: Participation counters and eligibility
- ExpirySweepService: Idempotent resolution of decisions past their deadline
- QuorumEngine: Facade exposing all engine operations
"""

from quoroom.application.services.expiry_sweep_service import (
    NO_OBJECTIONS_RESULT,
    ExpirySweepService,
)
from quoroom.application.services.objection_window_service import (
    KEEPER_APPROVED_RESULT,
    KEEPER_OBJECTED_RESULT,
    ObjectionWindowService,
)
from quoroom.application.services.proposal_admission_service import (
    AUTO_APPROVED_RESULT,
    MAX_PROPOSAL_LENGTH,
    ProposalAdmissionService,
)
from quoroom.application.services.quorum_engine import (
    BallotView,
    DecisionDetail,
    QuorumEngine,
)
from quoroom.application.services.vote_ledger_service import (
    MAX_REASONING_LENGTH,
    TIMEOUT_RESULT_PREFIX,
    VoteLedgerService,
)
from quoroom.application.services.voter_health_service import VoterHealthService

__all__: list[str] = [
    "AUTO_APPROVED_RESULT",
    "KEEPER_APPROVED_RESULT",
    "KEEPER_OBJECTED_RESULT",
    "MAX_PROPOSAL_LENGTH",
    "MAX_REASONING_LENGTH",
    "NO_OBJECTIONS_RESULT",
    "TIMEOUT_RESULT_PREFIX",
    "BallotView",
    "DecisionDetail",
    "ExpirySweepService",
    "ObjectionWindowService",
    "ProposalAdmissionService",
    "QuorumEngine",
    "VoteLedgerService",
    "VoterHealthService",
]
