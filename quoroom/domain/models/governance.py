"""Room governance configuration and roster models.

A room's governance config is mutable from the room owner's point of
view: every edit produces a new RoomGovernanceConfig. Decisions never hold
a reference to it; they copy a GovernanceSnapshot at creation so that
later edits cannot change an in-flight outcome.

Constraints:
- threshold is one of majority, supermajority, unanimous
- tie_breaker is one of queen, none
- min_voters >= 0
- 0.0 <= voter_health_threshold <= 1.0
- announcement delay and voting timeout are non-negative minutes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from quoroom.domain.errors.decision import ValidationError

DEFAULT_ANNOUNCEMENT_DELAY_MINUTES = 10
DEFAULT_VOTING_TIMEOUT_MINUTES = 60
DEFAULT_VOTER_HEALTH_THRESHOLD = 0.5


class Threshold(Enum):
    """Approval rule applied to the yes/no votes of a decision."""

    MAJORITY = "majority"
    SUPERMAJORITY = "supermajority"
    UNANIMOUS = "unanimous"


class TieBreaker(Enum):
    """How an exact majority tie is resolved."""

    QUEEN = "queen"
    NONE = "none"


class DecisionType(Enum):
    """Classification of a proposal.

    Types listed in a room's auto-approve list skip collective approval.
    """

    STRATEGY = "strategy"
    RESOURCE = "resource"
    PERSONNEL = "personnel"
    RULE_CHANGE = "rule_change"
    LOW_IMPACT = "low_impact"


def parse_enum(enum_cls: type[Enum], value: object, field_name: str) -> Enum:
    """Coerce a raw value into a member of enum_cls.

    Args:
        enum_cls: Target enum class.
        value: Member or raw value.
        field_name: Field name used in the error message.

    Returns:
        The matching enum member.

    Raises:
        ValidationError: If value is not a member or member value.
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(str(m.value) for m in enum_cls)
        raise ValidationError(
            field_name, f"{value!r} is not one of: {allowed}"
        ) from None


@dataclass(frozen=True)
class GovernanceSnapshot:
    """Tally rules copied onto a decision at creation.

    Attributes:
        threshold: Approval rule.
        tie_breaker: Majority tie resolution.
        min_voters: Minimum non-abstain votes for a decision on the merits.
    """

    threshold: Threshold = Threshold.MAJORITY
    tie_breaker: TieBreaker = TieBreaker.QUEEN
    min_voters: int = 0

    def __post_init__(self) -> None:
        """Validate snapshot values."""
        object.__setattr__(
            self, "threshold", parse_enum(Threshold, self.threshold, "threshold")
        )
        object.__setattr__(
            self,
            "tie_breaker",
            parse_enum(TieBreaker, self.tie_breaker, "tie_breaker"),
        )
        if self.min_voters < 0:
            raise ValidationError("min_voters", f"must be >= 0, got {self.min_voters}")


@dataclass(frozen=True)
class RoomGovernanceConfig:
    """Governance settings of a room.

    Attributes:
        threshold: Approval rule for voting decisions.
        tie_breaker: Majority tie resolution.
        min_voters: Quorum minimum of non-abstain votes.
        sealed_ballot: Hide vote content while a decision is open.
        voter_health: Track participation and report eligibility.
        voter_health_threshold: Minimum participation rate to be healthy.
        auto_approve: Decision types approved without a vote.
        announcement_delay_minutes: Objection window length.
        timeout_minutes: Voting window length.
    """

    threshold: Threshold = Threshold.MAJORITY
    tie_breaker: TieBreaker = TieBreaker.QUEEN
    min_voters: int = 0
    sealed_ballot: bool = False
    voter_health: bool = False
    voter_health_threshold: float = DEFAULT_VOTER_HEALTH_THRESHOLD
    auto_approve: frozenset[DecisionType] = field(
        default_factory=lambda: frozenset({DecisionType.LOW_IMPACT})
    )
    announcement_delay_minutes: int = DEFAULT_ANNOUNCEMENT_DELAY_MINUTES
    timeout_minutes: int = DEFAULT_VOTING_TIMEOUT_MINUTES

    def __post_init__(self) -> None:
        """Validate and normalize configuration values."""
        object.__setattr__(
            self, "threshold", parse_enum(Threshold, self.threshold, "threshold")
        )
        object.__setattr__(
            self,
            "tie_breaker",
            parse_enum(TieBreaker, self.tie_breaker, "tie_breaker"),
        )
        object.__setattr__(
            self,
            "auto_approve",
            frozenset(
                parse_enum(DecisionType, t, "auto_approve") for t in self.auto_approve
            ),
        )
        if self.min_voters < 0:
            raise ValidationError("min_voters", f"must be >= 0, got {self.min_voters}")
        if not 0.0 <= self.voter_health_threshold <= 1.0:
            raise ValidationError(
                "voter_health_threshold",
                f"must be between 0.0 and 1.0, got {self.voter_health_threshold}",
            )
        if self.announcement_delay_minutes < 0:
            raise ValidationError(
                "announcement_delay_minutes",
                f"must be >= 0, got {self.announcement_delay_minutes}",
            )
        if self.timeout_minutes < 0:
            raise ValidationError(
                "timeout_minutes", f"must be >= 0, got {self.timeout_minutes}"
            )

    def snapshot(self) -> GovernanceSnapshot:
        """Copy the tally rules into an immutable snapshot."""
        return GovernanceSnapshot(
            threshold=self.threshold,
            tie_breaker=self.tie_breaker,
            min_voters=self.min_voters,
        )

    def is_auto_approved(self, decision_type: DecisionType) -> bool:
        """Check whether decision_type skips collective approval."""
        return decision_type in self.auto_approve

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> RoomGovernanceConfig:
        """Build a config from a stored mapping (camelCase or snake_case keys).

        Unknown keys are ignored; missing keys take their defaults.

        Raises:
            ValidationError: If any present value is malformed.
        """
        aliases = {
            "threshold": "threshold",
            "tieBreaker": "tie_breaker",
            "tie_breaker": "tie_breaker",
            "minVoters": "min_voters",
            "min_voters": "min_voters",
            "sealedBallot": "sealed_ballot",
            "sealed_ballot": "sealed_ballot",
            "voterHealth": "voter_health",
            "voter_health": "voter_health",
            "voterHealthThreshold": "voter_health_threshold",
            "voter_health_threshold": "voter_health_threshold",
            "autoApprove": "auto_approve",
            "auto_approve": "auto_approve",
            "announcementDelayMinutes": "announcement_delay_minutes",
            "announcement_delay_minutes": "announcement_delay_minutes",
            "timeoutMinutes": "timeout_minutes",
            "timeout_minutes": "timeout_minutes",
        }
        kwargs: dict[str, object] = {}
        for key, value in data.items():
            name = aliases.get(key)
            if name is None:
                continue
            if name == "auto_approve":
                if not isinstance(value, (list, tuple, set, frozenset)):
                    raise ValidationError("auto_approve", "must be a list of decision types")
                value = frozenset(value)
            kwargs[name] = value
        return cls(**kwargs)  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-compatible mapping (camelCase keys)."""
        return {
            "threshold": self.threshold.value,
            "tieBreaker": self.tie_breaker.value,
            "minVoters": self.min_voters,
            "sealedBallot": self.sealed_ballot,
            "voterHealth": self.voter_health,
            "voterHealthThreshold": self.voter_health_threshold,
            "autoApprove": sorted(t.value for t in self.auto_approve),
            "announcementDelayMinutes": self.announcement_delay_minutes,
            "timeoutMinutes": self.timeout_minutes,
        }


@dataclass(frozen=True)
class RoomVoter:
    """A roster member of a room.

    Attributes:
        voter_id: Agent identifier.
        name: Display name.
        is_queen: Whether this agent is the room's queen.
    """

    voter_id: str
    name: str
    is_queen: bool = False
