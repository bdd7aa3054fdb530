"""
Team role lookups used to authorize supersession
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from decisionlog.core.config import get_settings
from decisionlog.core.exceptions import ForbiddenError
from decisionlog.core.logging_config import LoggingConfig
from decisionlog.models.team import TeamMember

logger = LoggingConfig.get_logger(__name__)


class TeamAccessService:
    """Answers whether an actor holds an elevated role in a team"""

    def __init__(self, db: Session, privileged_roles: Optional[List[str]] = None):
        self.db = db
        if privileged_roles is None:
            privileged_roles = get_settings().privileged_team_roles_list
        self.privileged_roles = {role.lower() for role in privileged_roles}

    def get_membership(self, actor_id: UUID, team_id: UUID) -> Optional[TeamMember]:
        """Get the active membership of an actor in a team"""
        return self.db.query(TeamMember).filter(
            TeamMember.team_id == team_id,
            TeamMember.user_id == actor_id,
            TeamMember.is_active.is_(True)
        ).first()

    def is_privileged(self, actor_id: UUID, team_id: UUID) -> bool:
        membership = self.get_membership(actor_id, team_id)
        return membership is not None and membership.role.lower() in self.privileged_roles

    def require_privileged(self, actor_id: UUID, team_id: UUID):
        """Raise ForbiddenError unless the actor holds a privileged role"""
        if not self.is_privileged(actor_id, team_id):
            logger.warning(
                "Supersession refused for non-privileged actor",
                extra={"actor_id": str(actor_id), "team_id": str(team_id)}
            )
            raise ForbiddenError("Only team leads, managers or owners can supersede decisions")
