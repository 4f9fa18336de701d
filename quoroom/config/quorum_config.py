"""Quorum engine configuration.

This module defines process-wide defaults for the quorum engine with
environment variable overrides for production tuning. Per-room governance
settings live on RoomGovernanceConfig; these values seed rooms created
without explicit settings and drive the expiry sweep cadence.

Environment Variables:
- QUORUM_ANNOUNCEMENT_DELAY_MINUTES: Objection window (default: 10, min: 0, max: 10080)
- QUORUM_VOTING_TIMEOUT_MINUTES: Voting window (default: 60, min: 1, max: 10080)
- QUORUM_SWEEP_INTERVAL_SECONDS: Expiry sweep cadence (default: 30, min: 1, max: 3600)
- QUORUM_VOTER_HEALTH_THRESHOLD: Healthy participation rate (default: 0.5, min: 0.0, max: 1.0)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta

from quoroom.domain.models.governance import (
    DEFAULT_ANNOUNCEMENT_DELAY_MINUTES,
    DEFAULT_VOTER_HEALTH_THRESHOLD,
    DEFAULT_VOTING_TIMEOUT_MINUTES,
    RoomGovernanceConfig,
)


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


# =============================================================================
# Announcement Window
# =============================================================================

MIN_ANNOUNCEMENT_DELAY_MINUTES = 0

# One week
MAX_ANNOUNCEMENT_DELAY_MINUTES = 10080

# =============================================================================
# Voting Window
# =============================================================================

MIN_VOTING_TIMEOUT_MINUTES = 1

MAX_VOTING_TIMEOUT_MINUTES = 10080

# =============================================================================
# Expiry Sweep
# =============================================================================

DEFAULT_SWEEP_INTERVAL_SECONDS = 30

MIN_SWEEP_INTERVAL_SECONDS = 1

MAX_SWEEP_INTERVAL_SECONDS = 3600


@dataclass(frozen=True)
class QuorumEngineConfig:
    """Process-wide quorum engine settings.

    Attributes:
        announcement_delay_minutes: Default objection window for new rooms.
        voting_timeout_minutes: Default voting window for new rooms.
        sweep_interval_seconds: Cadence of the expiry sweep worker.
        voter_health_threshold: Default healthy participation rate.
    """

    announcement_delay_minutes: int = DEFAULT_ANNOUNCEMENT_DELAY_MINUTES
    voting_timeout_minutes: int = DEFAULT_VOTING_TIMEOUT_MINUTES
    sweep_interval_seconds: int = DEFAULT_SWEEP_INTERVAL_SECONDS
    voter_health_threshold: float = DEFAULT_VOTER_HEALTH_THRESHOLD

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if (
            not MIN_ANNOUNCEMENT_DELAY_MINUTES
            <= self.announcement_delay_minutes
            <= MAX_ANNOUNCEMENT_DELAY_MINUTES
        ):
            raise ValueError(
                "announcement_delay_minutes must be between "
                f"{MIN_ANNOUNCEMENT_DELAY_MINUTES} and {MAX_ANNOUNCEMENT_DELAY_MINUTES}, "
                f"got {self.announcement_delay_minutes}"
            )
        if (
            not MIN_VOTING_TIMEOUT_MINUTES
            <= self.voting_timeout_minutes
            <= MAX_VOTING_TIMEOUT_MINUTES
        ):
            raise ValueError(
                f"voting_timeout_minutes must be between {MIN_VOTING_TIMEOUT_MINUTES} "
                f"and {MAX_VOTING_TIMEOUT_MINUTES}, got {self.voting_timeout_minutes}"
            )
        if (
            not MIN_SWEEP_INTERVAL_SECONDS
            <= self.sweep_interval_seconds
            <= MAX_SWEEP_INTERVAL_SECONDS
        ):
            raise ValueError(
                f"sweep_interval_seconds must be between {MIN_SWEEP_INTERVAL_SECONDS} "
                f"and {MAX_SWEEP_INTERVAL_SECONDS}, got {self.sweep_interval_seconds}"
            )
        if not 0.0 <= self.voter_health_threshold <= 1.0:
            raise ValueError(
                "voter_health_threshold must be between 0.0 and 1.0, "
                f"got {self.voter_health_threshold}"
            )

    @property
    def sweep_interval_timedelta(self) -> timedelta:
        return timedelta(seconds=self.sweep_interval_seconds)

    def default_room_config(self) -> RoomGovernanceConfig:
        """Build the governance config for rooms created without settings."""
        return RoomGovernanceConfig(
            voter_health_threshold=self.voter_health_threshold,
            announcement_delay_minutes=self.announcement_delay_minutes,
            timeout_minutes=self.voting_timeout_minutes,
        )

    @classmethod
    def from_environment(cls) -> QuorumEngineConfig:
        """Create config from environment variables with defaults.

        Out-of-range values are clamped; unparsable values fall back to
        the defaults.

        Returns:
            QuorumEngineConfig with values from environment or defaults.
        """
        delay = _get_int_env(
            "QUORUM_ANNOUNCEMENT_DELAY_MINUTES",
            DEFAULT_ANNOUNCEMENT_DELAY_MINUTES,
        )
        # Clamp to valid range
        delay = max(
            MIN_ANNOUNCEMENT_DELAY_MINUTES,
            min(delay, MAX_ANNOUNCEMENT_DELAY_MINUTES),
        )

        timeout = _get_int_env(
            "QUORUM_VOTING_TIMEOUT_MINUTES",
            DEFAULT_VOTING_TIMEOUT_MINUTES,
        )
        timeout = max(
            MIN_VOTING_TIMEOUT_MINUTES,
            min(timeout, MAX_VOTING_TIMEOUT_MINUTES),
        )

        interval = _get_int_env(
            "QUORUM_SWEEP_INTERVAL_SECONDS",
            DEFAULT_SWEEP_INTERVAL_SECONDS,
        )
        interval = max(
            MIN_SWEEP_INTERVAL_SECONDS,
            min(interval, MAX_SWEEP_INTERVAL_SECONDS),
        )

        threshold = _get_float_env(
            "QUORUM_VOTER_HEALTH_THRESHOLD",
            DEFAULT_VOTER_HEALTH_THRESHOLD,
        )
        threshold = max(0.0, min(threshold, 1.0))

        return cls(
            announcement_delay_minutes=delay,
            voting_timeout_minutes=timeout,
            sweep_interval_seconds=interval,
            voter_health_threshold=threshold,
        )


# Default configuration instance
DEFAULT_QUORUM_ENGINE_CONFIG = QuorumEngineConfig()

# Test configuration with a fast sweep cadence
TEST_QUORUM_ENGINE_CONFIG = QuorumEngineConfig(
    announcement_delay_minutes=1,
    voting_timeout_minutes=1,
    sweep_interval_seconds=1,
)
