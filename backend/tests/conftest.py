"""
Pytest configuration and fixtures
"""
import sys
from pathlib import Path
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from decisionlog.core.database import (get_engine, get_session_local,
                                       init_db, init_engine)
from decisionlog.models.channel import Channel
from decisionlog.models.message import Message
from decisionlog.models.team import Team, TeamMember, TeamRole


@pytest.fixture(scope="function")
def db(tmp_path) -> Session:
    """Create a database session backed by a fresh SQLite file"""
    init_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db()

    session = get_session_local()()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        get_engine().dispose()


@pytest.fixture(scope="function")
def team(db: Session) -> Team:
    team = Team(name=f"Team {uuid4()}")
    db.add(team)
    db.commit()
    db.refresh(team)
    return team


@pytest.fixture(scope="function")
def channel(db: Session, team: Team) -> Channel:
    channel = Channel(team_id=team.id, name="general")
    db.add(channel)
    db.commit()
    db.refresh(channel)
    return channel


def _add_member(db: Session, team: Team, role: TeamRole, is_active: bool = True):
    user_id = uuid4()
    db.add(TeamMember(team_id=team.id, user_id=user_id, role=role.value, is_active=is_active))
    db.commit()
    return user_id


@pytest.fixture(scope="function")
def lead_id(db: Session, team: Team):
    """User id of a team lead"""
    return _add_member(db, team, TeamRole.LEAD)


@pytest.fixture(scope="function")
def member_id(db: Session, team: Team):
    """User id of a plain team member"""
    return _add_member(db, team, TeamRole.MEMBER)


@pytest.fixture(scope="function")
def inactive_lead_id(db: Session, team: Team):
    """User id of a lead whose membership was deactivated"""
    return _add_member(db, team, TeamRole.LEAD, is_active=False)


@pytest.fixture(scope="function")
def make_message(db: Session, channel: Channel, member_id):
    """Factory for stored chat messages"""
    def _make(content: str = "We decided to use PostgreSQL", author_id=None, channel_id=None) -> Message:
        message = Message(
            channel_id=channel_id or channel.id,
            author_id=author_id or member_id,
            content=content,
        )
        db.add(message)
        db.commit()
        db.refresh(message)
        return message
    return _make


@pytest.fixture(scope="function")
def client(db: Session):
    """Create test client with database dependency override"""
    from fastapi.testclient import TestClient

    from decisionlog.core.database import get_db
    from decisionlog.main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()
