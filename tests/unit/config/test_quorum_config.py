"""Unit tests for QuorumEngineConfig.

Tests defaults, bounds validation and environment overrides.
"""

from __future__ import annotations

import os
from datetime import timedelta
from unittest.mock import patch

import pytest

from quoroom.config.quorum_config import (
    DEFAULT_QUORUM_ENGINE_CONFIG,
    DEFAULT_SWEEP_INTERVAL_SECONDS,
    MAX_ANNOUNCEMENT_DELAY_MINUTES,
    MAX_SWEEP_INTERVAL_SECONDS,
    MAX_VOTING_TIMEOUT_MINUTES,
    MIN_VOTING_TIMEOUT_MINUTES,
    TEST_QUORUM_ENGINE_CONFIG,
    QuorumEngineConfig,
)
from quoroom.domain.models.governance import Threshold


class TestQuorumEngineConfig:
    """Tests for QuorumEngineConfig dataclass."""

    def test_defaults(self) -> None:
        config = QuorumEngineConfig()

        assert config.announcement_delay_minutes == 10
        assert config.voting_timeout_minutes == 60
        assert config.sweep_interval_seconds == DEFAULT_SWEEP_INTERVAL_SECONDS
        assert config.voter_health_threshold == 0.5
        assert config == DEFAULT_QUORUM_ENGINE_CONFIG

    def test_zero_announcement_delay_is_valid(self) -> None:
        assert QuorumEngineConfig(announcement_delay_minutes=0).announcement_delay_minutes == 0

    def test_announcement_delay_above_maximum_raises(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            QuorumEngineConfig(announcement_delay_minutes=MAX_ANNOUNCEMENT_DELAY_MINUTES + 1)
        assert "announcement_delay_minutes must be between" in str(exc_info.value)

    def test_voting_timeout_below_minimum_raises(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            QuorumEngineConfig(voting_timeout_minutes=0)
        assert "voting_timeout_minutes must be between" in str(exc_info.value)

    def test_sweep_interval_zero_raises(self) -> None:
        with pytest.raises(ValueError):
            QuorumEngineConfig(sweep_interval_seconds=0)

    def test_threshold_out_of_range_raises(self) -> None:
        with pytest.raises(ValueError):
            QuorumEngineConfig(voter_health_threshold=1.5)

    def test_config_is_frozen(self) -> None:
        config = QuorumEngineConfig()
        with pytest.raises(AttributeError):
            config.sweep_interval_seconds = 5  # type: ignore[misc]

    def test_sweep_interval_timedelta(self) -> None:
        assert QuorumEngineConfig(sweep_interval_seconds=45).sweep_interval_timedelta == (
            timedelta(seconds=45)
        )

    def test_test_config_is_fast(self) -> None:
        assert TEST_QUORUM_ENGINE_CONFIG.sweep_interval_seconds == 1
        assert TEST_QUORUM_ENGINE_CONFIG.voting_timeout_minutes == 1


class TestDefaultRoomConfig:
    """Tests for default_room_config()."""

    def test_seeds_room_windows(self) -> None:
        config = QuorumEngineConfig(
            announcement_delay_minutes=3,
            voting_timeout_minutes=15,
            voter_health_threshold=0.75,
        )

        room = config.default_room_config()

        assert room.announcement_delay_minutes == 3
        assert room.timeout_minutes == 15
        assert room.voter_health_threshold == 0.75
        assert room.threshold == Threshold.MAJORITY


class TestFromEnvironment:
    """Tests for QuorumEngineConfig.from_environment()."""

    def test_defaults_when_unset(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = QuorumEngineConfig.from_environment()
        assert config == QuorumEngineConfig()

    def test_reads_values(self) -> None:
        env = {
            "QUORUM_ANNOUNCEMENT_DELAY_MINUTES": "5",
            "QUORUM_VOTING_TIMEOUT_MINUTES": "120",
            "QUORUM_SWEEP_INTERVAL_SECONDS": "10",
            "QUORUM_VOTER_HEALTH_THRESHOLD": "0.8",
        }
        with patch.dict(os.environ, env, clear=True):
            config = QuorumEngineConfig.from_environment()

        assert config.announcement_delay_minutes == 5
        assert config.voting_timeout_minutes == 120
        assert config.sweep_interval_seconds == 10
        assert config.voter_health_threshold == 0.8

    def test_out_of_range_values_are_clamped(self) -> None:
        env = {
            "QUORUM_ANNOUNCEMENT_DELAY_MINUTES": "-5",
            "QUORUM_VOTING_TIMEOUT_MINUTES": "999999",
            "QUORUM_SWEEP_INTERVAL_SECONDS": "999999",
            "QUORUM_VOTER_HEALTH_THRESHOLD": "2",
        }
        with patch.dict(os.environ, env, clear=True):
            config = QuorumEngineConfig.from_environment()

        assert config.announcement_delay_minutes == 0
        assert config.voting_timeout_minutes == MAX_VOTING_TIMEOUT_MINUTES
        assert config.sweep_interval_seconds == MAX_SWEEP_INTERVAL_SECONDS
        assert config.voter_health_threshold == 1.0

    def test_invalid_values_use_defaults(self) -> None:
        env = {
            "QUORUM_VOTING_TIMEOUT_MINUTES": "soon",
            "QUORUM_VOTER_HEALTH_THRESHOLD": "half",
        }
        with patch.dict(os.environ, env, clear=True):
            config = QuorumEngineConfig.from_environment()

        assert config.voting_timeout_minutes == 60
        assert config.voter_health_threshold == 0.5

    def test_zero_timeout_clamped_to_minimum(self) -> None:
        with patch.dict(os.environ, {"QUORUM_VOTING_TIMEOUT_MINUTES": "0"}, clear=True):
            config = QuorumEngineConfig.from_environment()
        assert config.voting_timeout_minutes == MIN_VOTING_TIMEOUT_MINUTES
