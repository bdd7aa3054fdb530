"""
Supersession: atomically retire an OPEN decision in favour of a new one
"""
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from decisionlog.core.exceptions import (ConflictError, ForbiddenError,
                                         NotFoundError)
from decisionlog.core.logging_config import LoggingConfig
from decisionlog.models.decision import (SUPERSEDED_CLOSURE_REASON, Decision,
                                         DecisionStatus)
from decisionlog.services.team_access_service import TeamAccessService
from decisionlog.utils.datetime_utils import utc_now

logger = LoggingConfig.get_logger(__name__)


@dataclass
class SupersessionResult:
    """Outcome of a supersession"""
    closed_old: Decision
    created_new: Decision


class SupersessionCoordinator:
    """
    Closes the superseded decision and inserts its successor as one unit.

    The coordinator never commits; callers wrap `supersede` in
    `decisionlog.core.database.transaction` so that both writes commit or
    neither does.
    """

    def __init__(self, db: Session, access: Optional[TeamAccessService] = None):
        self.db = db
        self.access = access or TeamAccessService(db)

    def authorize(self, actor_id: UUID, team_id: UUID):
        """Only privileged team members may supersede"""
        self.access.require_privileged(actor_id, team_id)

    def load_target(self, decision_id: UUID) -> Decision:
        """Get the decision to supersede, checking that it can be superseded"""
        target = self.db.get(Decision, decision_id)
        if target is None:
            raise NotFoundError("Decision to supersede not found")
        if not target.is_open:
            logger.warning(
                "Supersession target is already closed",
                extra={"decision_id": str(decision_id)}
            )
            raise ConflictError("Cannot supersede a closed decision")
        return target

    def prepare(self, actor_id: UUID, team_id: UUID, decision_id: UUID) -> Decision:
        """
        Validate a supersession before any write.

        `team_id` is the team of the new decision. The target must belong to
        the same team, and the actor must be privileged in that team.
        """
        target = self.load_target(decision_id)
        if target.team_id != team_id:
            logger.warning(
                "Supersession target belongs to another team",
                extra={"decision_id": str(decision_id), "actor_id": str(actor_id), "team_id": str(team_id)}
            )
            raise ForbiddenError("Cannot supersede a decision of another team")
        self.authorize(actor_id, target.team_id)
        return target

    def supersede(self, old_decision_id: UUID, draft: Decision) -> SupersessionResult:
        """
        Close `old_decision_id` and insert `draft` as its successor.

        The close is a compare-and-swap on status, so a concurrent
        supersession of the same decision finds zero rows and fails.
        """
        result = self.db.execute(
            update(Decision)
            .where(Decision.id == old_decision_id, Decision.status == DecisionStatus.OPEN.value)
            .values(
                status=DecisionStatus.CLOSED.value,
                closed_at=utc_now(),
                closure_reason=SUPERSEDED_CLOSURE_REASON,
            )
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount != 1:
            if self.db.get(Decision, old_decision_id) is None:
                raise NotFoundError("Decision to supersede not found")
            raise ConflictError("Cannot supersede a closed decision")

        draft.supersedes_decision_id = old_decision_id
        self.db.add(draft)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise ConflictError("Decision has already been superseded or its message already has a decision") from e

        closed_old = self.db.get(Decision, old_decision_id)
        logger.info(
            "Decision superseded",
            extra={"closed_decision_id": str(old_decision_id), "new_decision_id": str(draft.id)}
        )
        return SupersessionResult(closed_old=closed_old, created_new=draft)
