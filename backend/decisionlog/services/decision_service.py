"""
Decision store: creation, status transitions, deletion and queries
"""
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from decisionlog.core.config import Settings, get_settings
from decisionlog.core.database import transaction
from decisionlog.core.exceptions import (ConflictError, NotFoundError,
                                         ValidationError)
from decisionlog.core.logging_config import LoggingConfig
from decisionlog.core.metrics import (decision_status_changes_total,
                                      decisions_created_total,
                                      decisions_deleted_total)
from decisionlog.models.channel import Channel
from decisionlog.models.decision import (MANUAL_CLOSURE_REASON,
                                         SUPERSEDED_CLOSURE_REASON, Decision,
                                         DecisionStatus)
from decisionlog.models.message import Message
from decisionlog.services.message_decision_linker import MessageDecisionLinker
from decisionlog.services.supersession_service import SupersessionCoordinator
from decisionlog.services.team_access_service import TeamAccessService
from decisionlog.utils.datetime_utils import utc_now

logger = LoggingConfig.get_logger(__name__)

MAX_TITLE_LENGTH = 255
MAX_CLOSURE_REASON_LENGTH = 255


def coerce_status(status: Union[DecisionStatus, str, None]) -> Optional[DecisionStatus]:
    """Normalize a status given as enum or string"""
    if status is None or isinstance(status, DecisionStatus):
        return status
    try:
        return DecisionStatus(str(status).upper())
    except ValueError:
        raise ValidationError(f"Invalid decision status: {status}")


class DecisionService:
    """Service for managing decisions"""

    def __init__(
        self,
        db: Session,
        settings: Optional[Settings] = None,
        access: Optional[TeamAccessService] = None
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.access = access or TeamAccessService(db, self.settings.privileged_team_roles_list)
        self.linker = MessageDecisionLinker(db)
        self.coordinator = SupersessionCoordinator(db, self.access)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def derive_title(self, content: str) -> str:
        """Title of a decision derived from message content"""
        max_length = self.settings.decision_title_max_length
        if len(content) > max_length:
            return content[:max_length] + "..."
        return content

    def create_from_message(
        self,
        message_id: UUID,
        actor_id: UUID,
        supersedes_decision_id: Optional[UUID] = None
    ) -> Decision:
        """Promote a message to a decision, optionally superseding an OPEN one"""
        message = self.db.get(Message, message_id)
        if message is None:
            raise NotFoundError("Message not found")

        if message.has_decision:
            logger.warning("Message already marked as a decision", extra={"message_id": str(message_id)})
            raise ConflictError("This message is already marked as a decision")

        if supersedes_decision_id:
            self.coordinator.prepare(actor_id, message.channel.team_id, supersedes_decision_id)

        draft = Decision(
            title=self.derive_title(message.content),
            description=message.content,
            status=DecisionStatus.OPEN.value,
            owner_id=message.author_id,
            channel_id=message.channel_id,
            message_id=message.id,
        )

        with transaction(self.db):
            self.linker.mark_message(message.id)
            self._insert(draft, supersedes_decision_id)

        self.db.refresh(draft)
        decisions_created_total.labels(source="message", superseding=str(bool(supersedes_decision_id)).lower()).inc()
        logger.info(
            "Decision created from message",
            extra={
                "decision_id": str(draft.id),
                "message_id": str(message_id),
                "actor_id": str(actor_id),
                "supersedes_decision_id": str(supersedes_decision_id) if supersedes_decision_id else None,
            }
        )
        return draft

    def create_manual(
        self,
        channel_id: UUID,
        actor_id: UUID,
        title: Optional[str],
        status: Union[DecisionStatus, str] = DecisionStatus.OPEN,
        supersedes_decision_id: Optional[UUID] = None
    ) -> Decision:
        """Create a decision that is not backed by a message"""
        if not title or not title.strip():
            raise ValidationError("Decision title is required")
        title = title.strip()
        if len(title) > MAX_TITLE_LENGTH:
            raise ValidationError(f"Decision title must be at most {MAX_TITLE_LENGTH} characters")

        status = coerce_status(status) or DecisionStatus.OPEN

        channel = self.db.get(Channel, channel_id)
        if channel is None:
            raise NotFoundError("Channel not found")

        if supersedes_decision_id:
            self.coordinator.prepare(actor_id, channel.team_id, supersedes_decision_id)

        draft = Decision(
            title=title,
            status=status.value,
            owner_id=actor_id,
            channel_id=channel_id,
            closed_at=utc_now() if status == DecisionStatus.CLOSED else None,
        )

        with transaction(self.db):
            self._insert(draft, supersedes_decision_id)

        self.db.refresh(draft)
        decisions_created_total.labels(source="manual", superseding=str(bool(supersedes_decision_id)).lower()).inc()
        logger.info(
            "Manual decision created",
            extra={
                "decision_id": str(draft.id),
                "channel_id": str(channel_id),
                "actor_id": str(actor_id),
                "status": status.value,
            }
        )
        return draft

    def _insert(self, draft: Decision, supersedes_decision_id: Optional[UUID]):
        """Insert a new decision inside the caller's transaction"""
        if supersedes_decision_id:
            self.coordinator.supersede(supersedes_decision_id, draft)
            return
        self.db.add(draft)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConflictError("This message is already marked as a decision") from e

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def set_status(
        self,
        decision_id: UUID,
        status: Union[DecisionStatus, str],
        actor_id: UUID,
        closure_reason: Optional[str] = None
    ) -> Decision:
        """Open or close a decision"""
        status = coerce_status(status)
        if status is None:
            raise ValidationError("Decision status is required")

        closure_reason = (closure_reason or "").strip() or MANUAL_CLOSURE_REASON
        if status == DecisionStatus.CLOSED:
            # Only supersession may record this reason
            if closure_reason == SUPERSEDED_CLOSURE_REASON:
                raise ValidationError("This closure reason is reserved for superseded decisions")
            if len(closure_reason) > MAX_CLOSURE_REASON_LENGTH:
                raise ValidationError(f"Closure reason must be at most {MAX_CLOSURE_REASON_LENGTH} characters")

        decision = self.get_by_id(decision_id)
        if decision is None:
            raise NotFoundError("Decision not found")

        if decision.is_superseded and status == DecisionStatus.OPEN:
            logger.warning("Refusing to reopen superseded decision", extra={"decision_id": str(decision_id)})
            raise ConflictError("Cannot reopen a superseded decision")
        if decision.is_superseded:
            raise ConflictError("Cannot change the status of a superseded decision")

        with transaction(self.db):
            if status == DecisionStatus.CLOSED:
                decision.status = DecisionStatus.CLOSED.value
                decision.closed_at = utc_now()
                decision.closure_reason = closure_reason
            else:
                decision.status = DecisionStatus.OPEN.value
                decision.closed_at = None
                decision.closure_reason = None

        self.db.refresh(decision)
        decision_status_changes_total.labels(status=status.value).inc()
        logger.info(
            f"Decision {decision_id} set to {status.value}",
            extra={"decision_id": str(decision_id), "actor_id": str(actor_id), "closure_reason": decision.closure_reason}
        )
        return decision

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def delete_decision(self, decision_id: UUID, actor_id: UUID):
        """Delete a decision that has no successor and clear its message flag"""
        decision = self.get_by_id(decision_id)
        if decision is None:
            raise NotFoundError("Decision not found")

        self.linker.ensure_no_successor(decision, action="delete")

        with transaction(self.db):
            self.linker.remove_decision(decision)

        decisions_deleted_total.labels(via="delete").inc()
        logger.info("Decision deleted", extra={"decision_id": str(decision_id), "actor_id": str(actor_id)})

    def unmark_message(self, message_id: UUID, actor_id: UUID):
        """Remove the decision derived from a message"""
        self.linker.unmark_message(message_id, actor_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_id(self, decision_id: UUID) -> Optional[Decision]:
        """Get decision by ID"""
        return self.db.get(Decision, decision_id)

    def list_by_team(
        self,
        team_id: UUID,
        status: Union[DecisionStatus, str, None] = None,
        include_superseded: bool = False
    ) -> List[Decision]:
        """Get decisions of every channel in a team, newest first"""
        status = coerce_status(status)
        query = self.db.query(Decision).join(Channel, Decision.channel_id == Channel.id).filter(
            Channel.team_id == team_id
        )

        if status:
            query = query.filter(Decision.status == status.value)

        if not include_superseded:
            query = query.filter(or_(
                Decision.closure_reason.is_(None),
                Decision.closure_reason != SUPERSEDED_CLOSURE_REASON
            ))

        return query.order_by(Decision.created_at.desc()).all()

    def list_open_by_team(self, team_id: UUID) -> List[Decision]:
        """Get OPEN decisions of a team (candidates for supersession)"""
        return self.list_by_team(team_id, status=DecisionStatus.OPEN)

    def list_by_channel(
        self,
        channel_id: UUID,
        status: Union[DecisionStatus, str, None] = None
    ) -> List[Decision]:
        """Get decisions of a channel, newest first"""
        status = coerce_status(status)
        query = self.db.query(Decision).filter(Decision.channel_id == channel_id)
        if status:
            query = query.filter(Decision.status == status.value)
        return query.order_by(Decision.created_at.desc()).all()
