"""Background workers.

Workers:
- run_expiry_sweep_loop: Periodic expiry sweep over all rooms
"""

from quoroom.workers.expiry_sweep_worker import (
    ExpirySweepProtocol,
    SweepWorkerMetrics,
    run_expiry_sweep_loop,
)

__all__ = [
    "ExpirySweepProtocol",
    "SweepWorkerMetrics",
    "run_expiry_sweep_loop",
]
