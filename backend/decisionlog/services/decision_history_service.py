"""
Supersession history: walk supersedes_decision_id back to the first decision
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from decisionlog.core.config import get_settings
from decisionlog.core.logging_config import LoggingConfig
from decisionlog.models.decision import Decision

logger = LoggingConfig.get_logger(__name__)


class DecisionHistoryResolver:
    """Reconstructs the chain of decisions a decision replaced"""

    def __init__(self, db: Session, max_depth: Optional[int] = None):
        self.db = db
        self.max_depth = max_depth or get_settings().history_max_depth

    def get_history(self, decision_id: UUID) -> List[Decision]:
        """
        Get the supersession chain starting at `decision_id`, most recent first.

        A reference that resolves to nothing ends the chain. Malformed chains
        (a cycle, or one longer than max_depth) are cut where they are
        detected instead of looping.
        """
        history: List[Decision] = []
        visited = set()
        current_id = decision_id

        while current_id is not None:
            if current_id in visited:
                logger.warning(
                    "Cycle detected in supersession chain",
                    extra={"start_decision_id": str(decision_id), "repeated_decision_id": str(current_id)}
                )
                break
            if len(history) >= self.max_depth:
                logger.warning(
                    f"Supersession chain truncated at {self.max_depth} decisions",
                    extra={"start_decision_id": str(decision_id)}
                )
                break

            decision = self.db.get(Decision, current_id)
            if decision is None:
                break

            visited.add(current_id)
            history.append(decision)
            current_id = decision.supersedes_decision_id

        return history
