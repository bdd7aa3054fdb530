"""
Team and membership models

Teams are administered elsewhere; this service only reads memberships to
answer whether an actor holds a privileged role.
"""
from enum import Enum
from uuid import uuid4

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, String,
                        UniqueConstraint, Uuid)
from sqlalchemy.orm import relationship

from decisionlog.core.database import Base
from decisionlog.utils.datetime_utils import utc_now


class TeamRole(str, Enum):
    """Team role enumeration"""
    OWNER = "owner"
    MANAGER = "manager"
    LEAD = "lead"
    MEMBER = "member"


class Team(Base):
    """Team model"""
    __tablename__ = "teams"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    # Relationships
    members = relationship("TeamMember", back_populates="team", cascade="all, delete-orphan")
    channels = relationship("Channel", back_populates="team")

    def __repr__(self):
        return f"<Team(id={self.id}, name={self.name})>"


class TeamMember(Base):
    """Membership of a user in a team"""
    __tablename__ = "team_members"
    __table_args__ = (UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    team_id = Column(Uuid(as_uuid=True), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    role = Column(String(50), nullable=False, default=TeamRole.MEMBER.value)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    team = relationship("Team", back_populates="members")

    def __repr__(self):
        return f"<TeamMember(team_id={self.team_id}, user_id={self.user_id}, role={self.role})>"
