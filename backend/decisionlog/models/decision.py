"""
Decision model and its OPEN/CLOSED lifecycle constants
"""
from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from decisionlog.core.database import Base
from decisionlog.utils.datetime_utils import utc_now

SUPERSEDED_CLOSURE_REASON = "Superseded by new decision"
MANUAL_CLOSURE_REASON = "Manually closed"


class DecisionStatus(str, Enum):
    """Decision status enumeration"""
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class Decision(Base):
    """A team's resolved choice, tracked from a message or entered manually"""
    __tablename__ = "decisions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=DecisionStatus.OPEN.value, index=True)
    owner_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    channel_id = Column(Uuid(as_uuid=True), ForeignKey("channels.id", ondelete="CASCADE"), nullable=False, index=True)

    # At most one decision per message
    message_id = Column(Uuid(as_uuid=True), ForeignKey("messages.id"), nullable=True, unique=True)
    # At most one successor per decision
    supersedes_decision_id = Column(Uuid(as_uuid=True), ForeignKey("decisions.id"), nullable=True, unique=True)

    closed_at = Column(DateTime(timezone=True), nullable=True)
    closure_reason = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False, index=True)

    # Relationships
    channel = relationship("Channel", back_populates="decisions")
    message = relationship("Message", back_populates="decision")
    supersedes = relationship(
        "Decision",
        remote_side=[id],
        back_populates="superseded_by",
        foreign_keys=[supersedes_decision_id],
    )
    superseded_by = relationship(
        "Decision",
        back_populates="supersedes",
        foreign_keys=[supersedes_decision_id],
        uselist=False,
    )

    @property
    def is_open(self) -> bool:
        return self.status == DecisionStatus.OPEN.value

    @property
    def is_superseded(self) -> bool:
        """Closed by supersession, or referenced by a successor"""
        return self.closure_reason == SUPERSEDED_CLOSURE_REASON or self.superseded_by is not None

    @property
    def superseded_by_id(self):
        return self.superseded_by.id if self.superseded_by is not None else None

    @property
    def team_id(self):
        return self.channel.team_id if self.channel is not None else None

    def __repr__(self):
        return f"<Decision(id={self.id}, status={self.status}, supersedes={self.supersedes_decision_id})>"
