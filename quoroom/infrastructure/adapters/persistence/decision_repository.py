"""PostgreSQL decision repository.

Production implementation of DecisionRepositoryProtocol over
quorum_decisions and quorum_votes.

Atomicity:
- update_decision_status() is a single
  UPDATE ... WHERE id = :id AND status = :expected RETURNING id,
  so two racing resolvers can never both succeed. With an expected vote
  count it first takes FOR UPDATE on the decision row and counts votes in
  the same transaction, so a tally never closes over a vote it did not see
- create_vote() inserts through INSERT ... SELECT ... WHERE EXISTS with a
  FOR SHARE lock on the decision row; a concurrent status change either
  waits for the vote to commit or makes the insert a no-op
- UNIQUE(decision_id, voter_id) turns a second vote into DuplicateVoteError
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from quoroom.application.ports.decision_repository import (
    DecisionRepositoryProtocol,
)
from quoroom.domain.errors.decision import (
    DecisionNotFoundError,
    DuplicateVoteError,
    InvalidStateError,
    ValidationError,
)
from quoroom.domain.models.decision import (
    Decision,
    DecisionPathway,
    DecisionStatus,
    Vote,
    VoteChoice,
)
from quoroom.domain.models.governance import DecisionType, GovernanceSnapshot

logger = get_logger()

_DECISION_COLUMNS = """
    id, room_id, proposer_id, proposal, decision_type, pathway, status,
    threshold, tie_breaker, min_voters, sealed, effective_at, timeout_at,
    result, created_at, resolved_at
"""

_VOTE_COLUMNS = "id, decision_id, voter_id, choice, reasoning, cast_at"

_UNIQUE_VOTE_CONSTRAINT = "uq_quorum_votes_decision_voter"

# Deadline column per open status
_DEADLINE_COLUMN: dict[DecisionStatus, str] = {
    DecisionStatus.ANNOUNCED: "effective_at",
    DecisionStatus.VOTING: "timeout_at",
}


def _row_to_decision(row: Mapping[str, Any]) -> Decision:
    """Map a quorum_decisions row to a Decision.

    Raises:
        ValueError: If an enum column holds an unknown value.
        ValidationError: If the snapshot columns are invalid.
    """
    return Decision(
        id=row["id"],
        room_id=row["room_id"],
        proposer_id=row["proposer_id"],
        proposal=row["proposal"],
        decision_type=DecisionType(row["decision_type"]),
        pathway=DecisionPathway(row["pathway"]),
        status=DecisionStatus(row["status"]),
        snapshot=GovernanceSnapshot(
            threshold=row["threshold"],
            tie_breaker=row["tie_breaker"],
            min_voters=row["min_voters"],
        ),
        sealed=row["sealed"],
        effective_at=row["effective_at"],
        timeout_at=row["timeout_at"],
        result=row["result"],
        created_at=row["created_at"],
        resolved_at=row["resolved_at"],
    )


def _row_to_vote(row: Mapping[str, Any]) -> Vote:
    return Vote(
        id=row["id"],
        decision_id=row["decision_id"],
        voter_id=row["voter_id"],
        choice=VoteChoice(row["choice"]),
        reasoning=row["reasoning"],
        cast_at=row["cast_at"],
    )


class PostgresDecisionRepository(DecisionRepositoryProtocol):
    """PostgreSQL implementation of DecisionRepositoryProtocol.

    Attributes:
        _session_factory: SQLAlchemy async session factory.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the repository.

        Args:
            session_factory: SQLAlchemy async session factory.
        """
        self._session_factory = session_factory

    async def create_decision(
        self,
        room_id: UUID,
        proposer_id: str | None,
        proposal: str,
        decision_type: DecisionType,
        pathway: DecisionPathway,
        snapshot: GovernanceSnapshot,
        status: DecisionStatus,
        sealed: bool = False,
        effective_at: datetime | None = None,
        timeout_at: datetime | None = None,
        result: str | None = None,
    ) -> Decision:
        async with self._session_factory() as session, session.begin():
            row = (
                await session.execute(
                    text(f"""
                        INSERT INTO quorum_decisions (
                            room_id, proposer_id, proposal, decision_type,
                            pathway, status, threshold, tie_breaker,
                            min_voters, sealed, effective_at, timeout_at,
                            result, resolved_at
                        )
                        VALUES (
                            :room_id, :proposer_id, :proposal, :decision_type,
                            :pathway, :status, :threshold, :tie_breaker,
                            :min_voters, :sealed, :effective_at, :timeout_at,
                            :result,
                            CASE WHEN :terminal THEN now() ELSE NULL END
                        )
                        RETURNING {_DECISION_COLUMNS}
                    """),
                    {
                        "room_id": room_id,
                        "proposer_id": proposer_id,
                        "proposal": proposal,
                        "decision_type": decision_type.value,
                        "pathway": pathway.value,
                        "status": status.value,
                        "threshold": snapshot.threshold.value,
                        "tie_breaker": snapshot.tie_breaker.value,
                        "min_voters": snapshot.min_voters,
                        "sealed": sealed,
                        "effective_at": effective_at,
                        "timeout_at": timeout_at,
                        "result": result,
                        "terminal": status.is_terminal(),
                    },
                )
            ).mappings().one()
        decision = _row_to_decision(row)
        logger.debug(
            "decision_row_created",
            decision_id=str(decision.id),
            status=decision.status.value,
        )
        return decision

    async def get_decision(self, decision_id: UUID) -> Decision | None:
        async with self._session_factory() as session:
            row = (
                await session.execute(
                    text(f"""
                        SELECT {_DECISION_COLUMNS}
                        FROM quorum_decisions
                        WHERE id = :decision_id
                    """),
                    {"decision_id": decision_id},
                )
            ).mappings().fetchone()
        return _row_to_decision(row) if row else None

    async def list_decisions(
        self,
        room_id: UUID,
        status: DecisionStatus | None = None,
    ) -> list[Decision]:
        query = f"SELECT {_DECISION_COLUMNS} FROM quorum_decisions WHERE room_id = :room_id"
        params: dict[str, Any] = {"room_id": room_id}
        if status is not None:
            query += " AND status = :status"
            params["status"] = status.value
        query += " ORDER BY created_at DESC"

        async with self._session_factory() as session:
            rows = (await session.execute(text(query), params)).mappings().all()
        return [_row_to_decision(row) for row in rows]

    async def list_due_decisions(
        self,
        status: DecisionStatus,
        now: datetime,
    ) -> list[Decision]:
        column = _DEADLINE_COLUMN.get(status)
        if column is None:
            return []

        async with self._session_factory() as session:
            rows = (
                await session.execute(
                    text(f"""
                        SELECT {_DECISION_COLUMNS}
                        FROM quorum_decisions
                        WHERE status = :status
                          AND {column} IS NOT NULL
                          AND {column} <= :now
                        ORDER BY {column} ASC
                    """),
                    {"status": status.value, "now": now},
                )
            ).mappings().all()

        decisions: list[Decision] = []
        for row in rows:
            try:
                decisions.append(_row_to_decision(row))
            except (ValueError, ValidationError) as exc:
                logger.error(
                    "malformed_decision_row_skipped",
                    decision_id=str(row.get("id")),
                    error=str(exc),
                )
        return decisions

    async def update_decision_status(
        self,
        decision_id: UUID,
        expected_status: DecisionStatus,
        new_status: DecisionStatus,
        result: str | None,
        expected_vote_count: int | None = None,
    ) -> bool:
        params = {
            "decision_id": decision_id,
            "expected_status": expected_status.value,
            "new_status": new_status.value,
            "result": result,
        }
        async with self._session_factory() as session, session.begin():
            if expected_vote_count is not None:
                # FOR UPDATE waits out in-flight vote inserts (they hold FOR
                # SHARE on this row), so the count below sees every vote.
                locked = (
                    await session.execute(
                        text("""
                            SELECT id
                            FROM quorum_decisions
                            WHERE id = :decision_id
                              AND status = :expected_status
                            FOR UPDATE
                        """),
                        {
                            "decision_id": decision_id,
                            "expected_status": expected_status.value,
                        },
                    )
                ).fetchone()
                if locked is None:
                    return False
                vote_count = (
                    await session.execute(
                        text("""
                            SELECT count(*)
                            FROM quorum_votes
                            WHERE decision_id = :decision_id
                        """),
                        {"decision_id": decision_id},
                    )
                ).scalar_one()
                if vote_count != expected_vote_count:
                    logger.debug(
                        "vote_count_mismatch",
                        decision_id=str(decision_id),
                        expected_vote_count=expected_vote_count,
                        vote_count=vote_count,
                    )
                    return False

            updated = (
                await session.execute(
                    text("""
                        UPDATE quorum_decisions
                        SET status = :new_status,
                            result = :result,
                            resolved_at = now()
                        WHERE id = :decision_id
                          AND status = :expected_status
                        RETURNING id
                    """),
                    params,
                )
            ).fetchone()
        return updated is not None

    async def create_vote(
        self,
        decision_id: UUID,
        voter_id: str,
        choice: VoteChoice,
        reasoning: str | None = None,
    ) -> Vote:
        try:
            async with self._session_factory() as session, session.begin():
                row = (
                    await session.execute(
                        text(f"""
                            INSERT INTO quorum_votes (decision_id, voter_id, choice, reasoning)
                            SELECT CAST(:decision_id AS uuid),
                                   CAST(:voter_id AS text),
                                   CAST(:choice AS text),
                                   CAST(:reasoning AS text)
                            WHERE EXISTS (
                                SELECT 1
                                FROM quorum_decisions
                                WHERE id = CAST(:decision_id AS uuid)
                                  AND status = 'voting'
                                FOR SHARE
                            )
                            RETURNING {_VOTE_COLUMNS}
                        """),
                        {
                            "decision_id": decision_id,
                            "voter_id": voter_id,
                            "choice": choice.value,
                            "reasoning": reasoning,
                        },
                    )
                ).mappings().fetchone()
        except IntegrityError as exc:
            if _UNIQUE_VOTE_CONSTRAINT not in str(exc.orig):
                raise
            raise DuplicateVoteError(decision_id=decision_id, voter_id=voter_id) from exc

        if row is not None:
            return _row_to_vote(row)

        decision = await self.get_decision(decision_id)
        if decision is None:
            raise DecisionNotFoundError(decision_id)
        raise InvalidStateError(
            decision_id=decision_id,
            current_status=decision.status,
            operation="cast_vote",
        )

    async def get_votes(self, decision_id: UUID) -> list[Vote]:
        async with self._session_factory() as session:
            rows = (
                await session.execute(
                    text(f"""
                        SELECT {_VOTE_COLUMNS}
                        FROM quorum_votes
                        WHERE decision_id = :decision_id
                        ORDER BY cast_at ASC, id ASC
                    """),
                    {"decision_id": decision_id},
                )
            ).mappings().all()
        return [_row_to_vote(row) for row in rows]
