"""
Quoroom - Quorum engine for agent rooms

Turns proposals from autonomous agents and their human keeper into
binding room decisions, either by synchronous voting or through an
announce-then-object window, under concurrent access.

Core rules:
- Every state change is a compare-and-set on the decision status
- Governance settings are snapshotted when a decision is created
- Silence until the effective time is approval on announcements
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
