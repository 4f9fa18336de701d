"""Proposal Admission Service.

Validates and classifies incoming proposals, snapshots the room's
governance config onto the new decision, and routes it to auto-approval,
voting, or the announcement pathway.

Routing:
- decision_type in the room's auto-approve list -> APPROVED immediately,
  result "Auto-approved", no votes are ever created
- pathway voting -> VOTING until timeout_at = now + timeout_minutes
- pathway announcement (default) -> ANNOUNCED until
  effective_at = now + delay (room default, overridable per call)

Every admitted proposal is appended to the room's activity feed under the
"decision" tag.
"""

from __future__ import annotations

from datetime import timedelta
from uuid import UUID

from structlog import get_logger

from quoroom.application.ports.activity_log import ActivityLogProtocol
from quoroom.application.ports.decision_repository import DecisionRepositoryProtocol
from quoroom.application.ports.room_registry import RoomRegistryProtocol
from quoroom.domain.errors.decision import RoomNotFoundError, ValidationError
from quoroom.domain.models.activity import ActivityEventType
from quoroom.domain.models.decision import (
    Decision,
    DecisionPathway,
    DecisionStatus,
    utc_now,
)
from quoroom.domain.models.governance import DecisionType, parse_enum

logger = get_logger()

MAX_PROPOSAL_LENGTH = 2000
AUTO_APPROVED_RESULT = "Auto-approved"


class ProposalAdmissionService:
    """Service admitting proposals as decisions.

    Attributes:
        _decisions: Decision repository.
        _rooms: Room registry.
        _activity: Room activity log.
    """

    def __init__(
        self,
        decisions: DecisionRepositoryProtocol,
        rooms: RoomRegistryProtocol,
        activity: ActivityLogProtocol,
    ) -> None:
        """Initialize the Proposal Admission Service.

        Args:
            decisions: Decision repository.
            rooms: Room registry for config lookups.
            activity: Room activity log.
        """
        self._decisions = decisions
        self._rooms = rooms
        self._activity = activity

    async def submit(
        self,
        room_id: UUID,
        proposer_id: str | None,
        proposal: str,
        decision_type: DecisionType | str,
        pathway: DecisionPathway | str | None = None,
        delay_minutes: int | None = None,
    ) -> Decision:
        """Admit a proposal and create its decision.

        Args:
            room_id: Room the proposal is for.
            proposer_id: Proposing agent, if any.
            proposal: Proposal text (1 to 2000 characters).
            decision_type: Classification of the proposal.
            pathway: Voting or announcement. Defaults to announcement.
            delay_minutes: Objection window override for announcements.

        Returns:
            The created decision.

        Raises:
            RoomNotFoundError: If the room does not exist.
            ValidationError: If type, pathway, text or delay is malformed.
        """
        log = logger.bind(
            operation="submit",
            room_id=str(room_id),
            proposer_id=proposer_id,
        )

        config = await self._rooms.get_room_governance_config(room_id)
        if config is None:
            log.warning("room_not_found")
            raise RoomNotFoundError(room_id)

        decision_type = parse_enum(DecisionType, decision_type, "decision_type")
        text = proposal.strip() if isinstance(proposal, str) else ""
        if not text:
            raise ValidationError("proposal", "must not be empty")
        if len(text) > MAX_PROPOSAL_LENGTH:
            raise ValidationError(
                "proposal",
                f"exceeds maximum length of {MAX_PROPOSAL_LENGTH} characters",
            )
        if delay_minutes is not None and delay_minutes < 0:
            raise ValidationError("delay_minutes", f"must be >= 0, got {delay_minutes}")

        resolved_pathway = (
            DecisionPathway.ANNOUNCEMENT
            if pathway is None
            else parse_enum(DecisionPathway, pathway, "pathway")
        )
        snapshot = config.snapshot()

        if config.is_auto_approved(decision_type):
            decision = await self._decisions.create_decision(
                room_id=room_id,
                proposer_id=proposer_id,
                proposal=text,
                decision_type=decision_type,
                pathway=DecisionPathway.ANNOUNCEMENT,
                snapshot=snapshot,
                status=DecisionStatus.APPROVED,
                sealed=config.sealed_ballot,
                result=AUTO_APPROVED_RESULT,
            )
            await self._activity.log_room_activity(
                room_id,
                ActivityEventType.DECISION,
                f"Auto-approved: {text}",
                actor_id=proposer_id,
            )
            log.info(
                "decision_auto_approved",
                decision_id=str(decision.id),
                decision_type=decision_type.value,
            )
            return decision

        now = utc_now()

        if resolved_pathway == DecisionPathway.VOTING:
            decision = await self._decisions.create_decision(
                room_id=room_id,
                proposer_id=proposer_id,
                proposal=text,
                decision_type=decision_type,
                pathway=DecisionPathway.VOTING,
                snapshot=snapshot,
                status=DecisionStatus.VOTING,
                sealed=config.sealed_ballot,
                timeout_at=now + timedelta(minutes=config.timeout_minutes),
            )
            summary = f"Voting opened: {text} (closes in {config.timeout_minutes} min)"
        else:
            delay = (
                delay_minutes
                if delay_minutes is not None
                else config.announcement_delay_minutes
            )
            decision = await self._decisions.create_decision(
                room_id=room_id,
                proposer_id=proposer_id,
                proposal=text,
                decision_type=decision_type,
                pathway=DecisionPathway.ANNOUNCEMENT,
                snapshot=snapshot,
                status=DecisionStatus.ANNOUNCED,
                sealed=config.sealed_ballot,
                effective_at=now + timedelta(minutes=delay),
            )
            summary = f"Announced: {text} (effective in {delay} min)"

        await self._activity.log_room_activity(
            room_id,
            ActivityEventType.DECISION,
            summary,
            actor_id=proposer_id,
        )
        log.info(
            "decision_submitted",
            decision_id=str(decision.id),
            decision_type=decision_type.value,
            pathway=decision.pathway.value,
            status=decision.status.value,
        )
        return decision
