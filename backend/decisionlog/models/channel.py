"""
Channel model
"""
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from decisionlog.core.database import Base
from decisionlog.utils.datetime_utils import utc_now


class Channel(Base):
    """Channel model - a conversation space inside a team"""
    __tablename__ = "channels"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    team_id = Column(Uuid(as_uuid=True), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    is_archived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    # Relationships
    team = relationship("Team", back_populates="channels")
    messages = relationship("Message", back_populates="channel")
    decisions = relationship("Decision", back_populates="channel")

    def __repr__(self):
        return f"<Channel(id={self.id}, name={self.name}, team_id={self.team_id})>"
