"""
Keeps Message.has_decision in step with the decision derived from it
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from decisionlog.core.database import transaction
from decisionlog.core.exceptions import ConflictError, NotFoundError
from decisionlog.core.logging_config import LoggingConfig
from decisionlog.core.metrics import decisions_deleted_total
from decisionlog.models.decision import Decision
from decisionlog.models.message import Message

logger = LoggingConfig.get_logger(__name__)


class MessageDecisionLinker:
    """Enforces the exclusive link between a message and its decision"""

    def __init__(self, db: Session):
        self.db = db

    def mark_message(self, message_id: UUID):
        """
        Flag a message as carrying a decision.

        Conditional on the flag still being unset, so that of two concurrent
        callers only one can win. Must run inside the caller's transaction.
        """
        result = self.db.execute(
            update(Message)
            .where(Message.id == message_id, Message.has_decision.is_(False))
            .values(has_decision=True)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount != 1:
            raise ConflictError("This message is already marked as a decision")

    def clear_message(self, message_id: UUID):
        """Reset the decision flag of a message"""
        self.db.execute(
            update(Message)
            .where(Message.id == message_id)
            .values(has_decision=False)
            .execution_options(synchronize_session="fetch")
        )

    def get_successor(self, decision: Decision) -> Optional[Decision]:
        """Get the decision that superseded this one, if any"""
        return self.db.query(Decision).filter(
            Decision.supersedes_decision_id == decision.id
        ).first()

    def ensure_no_successor(self, decision: Decision, action: str = "delete"):
        """Refuse to remove a decision that another decision supersedes"""
        successor = self.get_successor(decision)
        if successor is not None:
            logger.warning(
                f"Refusing to {action} superseded decision {decision.id}",
                extra={"decision_id": str(decision.id), "successor_id": str(successor.id)}
            )
            raise ConflictError(f"Cannot {action} a decision that has been superseded by another decision")

    def remove_decision(self, decision: Decision):
        """Delete a decision and clear its message flag inside the caller's transaction"""
        message_id = decision.message_id
        self.db.delete(decision)
        self.db.flush()
        if message_id is not None:
            self.clear_message(message_id)

    def unmark_message(self, message_id: UUID, actor_id: UUID):
        """Remove the decision derived from a message and clear the flag"""
        message = self.db.get(Message, message_id)
        if message is None:
            raise NotFoundError("Message not found")

        decision = self.db.query(Decision).filter(Decision.message_id == message_id).first()
        if not message.has_decision or decision is None:
            raise NotFoundError("This message is not marked as a decision")

        self.ensure_no_successor(decision, action="unmark")

        decision_id = decision.id
        with transaction(self.db):
            self.remove_decision(decision)

        decisions_deleted_total.labels(via="unmark").inc()
        logger.info(
            "Message unmarked as decision",
            extra={"message_id": str(message_id), "decision_id": str(decision_id), "actor_id": str(actor_id)}
        )
