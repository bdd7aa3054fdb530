"""
Message intake with advisory decision suggestions
"""
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from decisionlog.core.decision_classifier import (DecisionClassifier,
                                                  Verdict)
from decisionlog.core.exceptions import NotFoundError, ValidationError
from decisionlog.core.logging_config import LoggingConfig
from decisionlog.core.metrics import classifier_verdicts_total
from decisionlog.models.channel import Channel
from decisionlog.models.message import Message

logger = LoggingConfig.get_logger(__name__)


@dataclass
class PostedMessage:
    """A stored message together with the classifier's suggestion"""
    message: Message
    decision_suggestion: Verdict


class MessageService:
    """Service for storing chat messages"""

    def __init__(self, db: Session, classifier: Optional[DecisionClassifier] = None):
        self.db = db
        self.classifier = classifier or DecisionClassifier()

    def analyze(self, content: Optional[str]) -> Verdict:
        """Classify content and record the verdict"""
        verdict = self.classifier.analyze(content)
        classifier_verdicts_total.labels(
            suggest=str(verdict.suggest).lower(),
            category=verdict.category or "none"
        ).inc()
        return verdict

    def create_message(self, channel_id: UUID, author_id: UUID, content: str) -> PostedMessage:
        """Store a message and suggest (never create) a decision for it"""
        if not content or not content.strip():
            raise ValidationError("Message content is required")

        channel = self.db.get(Channel, channel_id)
        if channel is None:
            raise NotFoundError("Channel not found")

        message = Message(channel_id=channel_id, author_id=author_id, content=content)
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)

        suggestion = self.analyze(message.content)
        logger.debug(
            "Message stored",
            extra={"message_id": str(message.id), "suggest_decision": suggestion.suggest}
        )
        return PostedMessage(message=message, decision_suggestion=suggestion)

    def get_message(self, message_id: UUID) -> Optional[Message]:
        """Get message by ID"""
        return self.db.get(Message, message_id)
