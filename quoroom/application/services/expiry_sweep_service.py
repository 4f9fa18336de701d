"""Expiry Sweep Service.

Periodic, stateless reconciliation of decisions whose deadline passed:

- ANNOUNCED with effective_at <= now -> EFFECTIVE,
  "No objections — auto-approved"
- VOTING with timeout_at <= now -> tally over the votes that exist; quorum
  unmet -> REJECTED "Quorum not met", otherwise APPROVED/REJECTED with the
  result labeled "Voting period expired: ..."

Constraints:
- Every resolution is a compare-and-set on the current status, so
  overlapping sweeps (other replicas, a slow previous run) are no-ops for
  decisions already resolved
- One malformed decision never aborts the sweep: it is logged, skipped,
  and the sweep continues
- The return value counts only decisions this call actually resolved
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime

from structlog import get_logger

from quoroom.application.ports.decision_repository import DecisionRepositoryProtocol
from quoroom.application.services.vote_ledger_service import VoteLedgerService
from quoroom.domain.errors.decision import InvalidStateError
from quoroom.domain.models.decision import Decision, DecisionStatus, utc_now

logger = get_logger()

NO_OBJECTIONS_RESULT = "No objections — auto-approved"


class ExpirySweepService:
    """Service resolving decisions past their deadline.

    Attributes:
        _decisions: Decision repository.
        _ledger: Vote ledger used to tally timed-out voting decisions.
    """

    def __init__(
        self,
        decisions: DecisionRepositoryProtocol,
        ledger: VoteLedgerService,
    ) -> None:
        """Initialize the Expiry Sweep Service.

        Args:
            decisions: Decision repository.
            ledger: Vote ledger for timeout tallies.
        """
        self._decisions = decisions
        self._ledger = ledger

    async def check_expired_decisions(self, now: datetime | None = None) -> int:
        """Resolve every open decision whose deadline is at or before now.

        Args:
            now: Reference time. Defaults to the current UTC time.

        Returns:
            Number of decisions resolved by this call.
        """
        if now is None:
            now = utc_now()
        log = logger.bind(operation="check_expired_decisions", now=now.isoformat())

        resolved = 0

        announced = await self._decisions.list_due_decisions(DecisionStatus.ANNOUNCED, now)
        for decision in announced:
            if await self._sweep_one(decision, self._make_effective):
                resolved += 1

        voting = await self._decisions.list_due_decisions(DecisionStatus.VOTING, now)
        for decision in voting:
            if await self._sweep_one(decision, self._expire_voting):
                resolved += 1

        if resolved:
            log.info(
                "sweep_completed",
                resolved=resolved,
                announced_due=len(announced),
                voting_due=len(voting),
            )
        else:
            log.debug("sweep_completed", resolved=0)
        return resolved

    async def _sweep_one(
        self,
        decision: Decision,
        resolve: Callable[[Decision], Awaitable[bool]],
    ) -> bool:
        decision_log = logger.bind(
            decision_id=str(decision.id),
            room_id=str(decision.room_id),
            status=decision.status.value,
        )
        try:
            return await resolve(decision)
        except InvalidStateError:
            decision_log.debug("sweep_decision_already_resolved")
            return False
        except Exception as exc:
            decision_log.error(
                "sweep_decision_failed",
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
            )
            return False

    async def _make_effective(self, decision: Decision) -> bool:
        applied = await self._decisions.update_decision_status(
            decision.id,
            DecisionStatus.ANNOUNCED,
            DecisionStatus.EFFECTIVE,
            NO_OBJECTIONS_RESULT,
        )
        if applied:
            logger.info(
                "announcement_effective",
                decision_id=str(decision.id),
                room_id=str(decision.room_id),
            )
        return applied

    async def _expire_voting(self, decision: Decision) -> bool:
        await self._ledger.resolve_voting_decision(decision, timed_out=True)
        return True
