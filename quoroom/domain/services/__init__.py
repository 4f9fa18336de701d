"""Domain services for Quoroom.

Domain services contain business logic that doesn't naturally fit in entities
or value objects. They must NOT depend on infrastructure.

Available services:
- tally_votes: Threshold, tie-break and quorum computation for voting decisions
"""

from quoroom.domain.services.tally import QUORUM_NOT_MET, TallyOutcome, tally_votes

__all__: list[str] = ["QUORUM_NOT_MET", "TallyOutcome", "tally_votes"]
