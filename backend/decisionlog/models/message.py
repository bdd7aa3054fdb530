"""
Chat message model (only the fields decision tracking touches)
"""
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship

from decisionlog.core.database import Base
from decisionlog.utils.datetime_utils import utc_now


class Message(Base):
    """Chat message"""
    __tablename__ = "messages"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    channel_id = Column(Uuid(as_uuid=True), ForeignKey("channels.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    content = Column(Text, nullable=False)
    # True if and only if a decision references this message
    has_decision = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    # Relationships
    channel = relationship("Channel", back_populates="messages")
    decision = relationship("Decision", back_populates="message", uselist=False)

    def __repr__(self):
        return f"<Message(id={self.id}, channel_id={self.channel_id}, has_decision={self.has_decision})>"
