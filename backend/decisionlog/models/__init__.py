"""
SQLAlchemy models
"""
from decisionlog.core.database import Base  # noqa: F401
# Import all models here so Base.metadata knows every table
from decisionlog.models.channel import Channel  # noqa: F401
from decisionlog.models.decision import (MANUAL_CLOSURE_REASON,  # noqa: F401
                                         SUPERSEDED_CLOSURE_REASON, Decision,
                                         DecisionStatus)
from decisionlog.models.message import Message  # noqa: F401
from decisionlog.models.team import Team, TeamMember, TeamRole  # noqa: F401
