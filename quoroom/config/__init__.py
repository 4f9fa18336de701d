"""Configuration module for Quoroom.

Available Configurations:
- QuorumEngineConfig: Engine defaults and expiry sweep cadence
"""

from quoroom.config.quorum_config import (
    DEFAULT_QUORUM_ENGINE_CONFIG,
    TEST_QUORUM_ENGINE_CONFIG,
    QuorumEngineConfig,
)

__all__ = [
    "QuorumEngineConfig",
    "DEFAULT_QUORUM_ENGINE_CONFIG",
    "TEST_QUORUM_ENGINE_CONFIG",
]
