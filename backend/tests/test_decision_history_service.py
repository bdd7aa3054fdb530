"""
Tests for DecisionHistoryResolver
"""
from uuid import uuid4

from decisionlog.models.decision import Decision, DecisionStatus
from decisionlog.services.decision_history_service import \
    DecisionHistoryResolver
from decisionlog.services.decision_service import DecisionService


def _chain(db, channel, lead_id, length: int):
    service = DecisionService(db)
    decisions = [service.create_manual(channel.id, lead_id, title="Decision 0")]
    for i in range(1, length):
        decisions.append(service.create_manual(
            channel.id,
            lead_id,
            title=f"Decision {i}",
            supersedes_decision_id=decisions[-1].id
        ))
    return decisions


def test_history_most_recent_first(db, channel, lead_id):
    first, second, third = _chain(db, channel, lead_id, 3)

    history = DecisionHistoryResolver(db).get_history(third.id)

    assert [d.id for d in history] == [third.id, second.id, first.id]


def test_history_from_middle_of_chain(db, channel, lead_id):
    """History only walks backwards"""
    first, second, _ = _chain(db, channel, lead_id, 3)

    history = DecisionHistoryResolver(db).get_history(second.id)

    assert [d.id for d in history] == [second.id, first.id]


def test_history_single_decision(db, channel, lead_id):
    (only,) = _chain(db, channel, lead_id, 1)

    assert [d.id for d in DecisionHistoryResolver(db).get_history(only.id)] == [only.id]


def test_history_missing_decision(db):
    assert DecisionHistoryResolver(db).get_history(uuid4()) == []


def test_history_stops_at_cycle(db, channel, lead_id):
    """A corrupted chain that loops back is cut at the first repeat"""
    a = Decision(title="A", status=DecisionStatus.OPEN.value, owner_id=lead_id, channel_id=channel.id)
    b = Decision(title="B", status=DecisionStatus.OPEN.value, owner_id=lead_id, channel_id=channel.id)
    db.add_all([a, b])
    db.commit()
    a.supersedes_decision_id = b.id
    db.commit()
    b.supersedes_decision_id = a.id
    db.commit()

    history = DecisionHistoryResolver(db).get_history(a.id)

    assert [d.id for d in history] == [a.id, b.id]


def test_history_respects_max_depth(db, channel, lead_id):
    decisions = _chain(db, channel, lead_id, 4)

    history = DecisionHistoryResolver(db, max_depth=2).get_history(decisions[-1].id)

    assert [d.id for d in history] == [decisions[3].id, decisions[2].id]
