"""Expiry sweep worker.

Runs check_expired_decisions() on a fixed cadence so announced decisions
become effective and timed-out votes resolve without any caller action.

The sweep is idempotent and every resolution is a compare-and-set, so any
number of these workers may run against the same store. A failing sweep
run is logged and the loop continues on the next tick.

Usage:
    python -m quoroom.workers.expiry_sweep_worker
"""

from __future__ import annotations

import asyncio
import signal
from dataclasses import dataclass
from typing import Protocol

from structlog import get_logger

logger = get_logger()


class ExpirySweepProtocol(Protocol):
    """Anything exposing the expiry sweep operation."""

    async def check_expired_decisions(self) -> int: ...


@dataclass
class SweepWorkerMetrics:
    """Counters tracked by the sweep loop."""

    runs: int = 0
    failures: int = 0
    decisions_resolved: int = 0


async def run_expiry_sweep_loop(
    sweep: ExpirySweepProtocol,
    interval_seconds: float,
    stop_event: asyncio.Event | None = None,
    metrics: SweepWorkerMetrics | None = None,
) -> SweepWorkerMetrics:
    """Run the expiry sweep until stop_event is set.

    The first sweep runs immediately; later sweeps run interval_seconds
    after the previous one finished.

    Args:
        sweep: Service or facade exposing check_expired_decisions().
        interval_seconds: Delay between sweeps.
        stop_event: Set to stop the loop. Runs forever when None.
        metrics: Counters to update, created when None.

    Returns:
        The loop's counters once stopped.
    """
    if interval_seconds <= 0:
        raise ValueError(f"interval_seconds must be > 0, got {interval_seconds}")
    if stop_event is None:
        stop_event = asyncio.Event()
    if metrics is None:
        metrics = SweepWorkerMetrics()

    log = logger.bind(worker="expiry_sweep", interval_seconds=interval_seconds)
    log.info("expiry_sweep_worker_started")

    while not stop_event.is_set():
        metrics.runs += 1
        try:
            resolved = await sweep.check_expired_decisions()
            metrics.decisions_resolved += resolved
        except Exception as e:
            metrics.failures += 1
            log.error(
                "expiry_sweep_run_failed",
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            pass

    log.info(
        "expiry_sweep_worker_stopped",
        runs=metrics.runs,
        failures=metrics.failures,
        decisions_resolved=metrics.decisions_resolved,
    )
    return metrics


async def main() -> None:
    """Run the sweep worker with graceful shutdown on SIGINT/SIGTERM."""
    from quoroom.bootstrap.database import close_database_engine
    from quoroom.bootstrap.logging import configure_structlog
    from quoroom.bootstrap.quorum_engine import (
        get_quorum_engine,
        get_quorum_engine_config,
    )

    configure_structlog()
    config = get_quorum_engine_config()
    stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        await run_expiry_sweep_loop(
            get_quorum_engine(),
            interval_seconds=config.sweep_interval_seconds,
            stop_event=stop_event,
        )
    finally:
        await close_database_engine()


if __name__ == "__main__":
    asyncio.run(main())
