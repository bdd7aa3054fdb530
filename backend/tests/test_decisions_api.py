"""
Tests for the decision and message API routes
"""
from uuid import uuid4

from decisionlog.models.channel import Channel
from decisionlog.models.decision import SUPERSEDED_CLOSURE_REASON
from decisionlog.models.team import Team, TeamMember, TeamRole


def _headers(user_id) -> dict:
    return {"X-User-Id": str(user_id)}


def _post_message(client, channel_id, user_id, content="We decided to use PostgreSQL"):
    response = client.post(
        f"/api/channels/{channel_id}/messages",
        json={"content": content},
        headers=_headers(user_id)
    )
    assert response.status_code == 201
    return response.json()


def _create_manual(client, channel_id, user_id, **payload):
    payload.setdefault("title", "Adopt trunk-based development")
    return client.post(f"/api/decisions/channel/{channel_id}", json=payload, headers=_headers(user_id))


def test_missing_user_id(client, channel):
    response = client.get(f"/api/decisions/channel/{channel.id}")

    assert response.status_code == 401
    assert response.json() == {"detail": "User ID is required", "type": "unauthenticated"}


def test_malformed_user_id(client, channel):
    response = client.get(f"/api/decisions/channel/{channel.id}", headers={"X-User-Id": "not-a-uuid"})

    assert response.status_code == 401


def test_post_message_returns_suggestion(client, channel, member_id):
    body = _post_message(client, channel.id, member_id)

    assert body["has_decision"] is False
    assert body["decision_suggestion"]["suggest"] is True
    assert body["decision_suggestion"]["category"] == "Explicit Decision"


def test_get_message(client, channel, member_id):
    body = _post_message(client, channel.id, member_id)

    response = client.get(f"/api/messages/{body['id']}", headers=_headers(member_id))

    assert response.status_code == 200
    assert response.json()["content"] == "We decided to use PostgreSQL"
    assert client.get(f"/api/messages/{uuid4()}", headers=_headers(member_id)).status_code == 404


def test_analyze(client, member_id):
    response = client.post(
        "/api/decisions/analyze",
        json={"content": "Approved."},
        headers=_headers(member_id)
    )

    assert response.status_code == 200
    assert response.json()["category"] == "Approval/Confirmation"


def test_analyze_requires_content(client, member_id):
    response = client.post("/api/decisions/analyze", json={}, headers=_headers(member_id))

    assert response.status_code == 400
    assert response.json()["type"] == "validation"


def test_create_from_message(client, channel, member_id):
    message = _post_message(client, channel.id, member_id)

    response = client.post(f"/api/decisions/from-message/{message['id']}", headers=_headers(member_id))

    assert response.status_code == 201
    data = response.json()
    assert data["message_id"] == message["id"]
    assert data["status"] == "OPEN"
    assert data["superseded_by_id"] is None

    again = client.post(f"/api/decisions/from-message/{message['id']}", headers=_headers(member_id))
    assert again.status_code == 409
    assert again.json()["detail"] == "This message is already marked as a decision"


def test_suggested_message_promoted_to_decision(client, channel, member_id):
    """A message flagged by the classifier is promoted and marked"""
    message = _post_message(client, channel.id, member_id, "Decision: we're going with Postgres")
    assert message["decision_suggestion"] == {
        "suggest": True,
        "reason": "Matches Explicit Decision pattern",
        "category": "Explicit Decision",
        "pattern": r"\bdecision:\s*",
    }
    assert message["has_decision"] is False

    response = client.post(f"/api/decisions/from-message/{message['id']}", headers=_headers(member_id))
    assert response.status_code == 201
    decision = response.json()
    assert decision["title"] == "Decision: we're going with Postgres"
    assert decision["owner_id"] == str(member_id)
    assert decision["status"] == "OPEN"

    message_now = client.get(f"/api/messages/{message['id']}", headers=_headers(member_id)).json()
    assert message_now["has_decision"] is True


def test_create_from_missing_message(client, member_id):
    response = client.post(f"/api/decisions/from-message/{uuid4()}", headers=_headers(member_id))

    assert response.status_code == 404


def test_create_manual_validation(client, channel, member_id):
    response = _create_manual(client, channel.id, member_id, title="   ")

    assert response.status_code == 400


def test_supersede_requires_privileged_role(client, channel, member_id):
    old = _create_manual(client, channel.id, member_id).json()

    response = _create_manual(client, channel.id, member_id, title="New", supersedes_decision_id=old["id"])

    assert response.status_code == 403
    assert response.json()["type"] == "forbidden"


def test_supersede_and_history(client, channel, lead_id):
    """Lead supersedes a decision; the chain is visible through history"""
    old = _create_manual(client, channel.id, lead_id, title="Use MySQL").json()
    message = _post_message(client, channel.id, lead_id, "We're going with PostgreSQL")

    response = client.post(
        f"/api/decisions/from-message/{message['id']}",
        json={"supersedes_decision_id": old["id"]},
        headers=_headers(lead_id)
    )
    assert response.status_code == 201
    new = response.json()
    assert new["supersedes_decision_id"] == old["id"]

    old_now = client.get(f"/api/decisions/{old['id']}", headers=_headers(lead_id)).json()
    assert old_now["status"] == "CLOSED"
    assert old_now["closure_reason"] == SUPERSEDED_CLOSURE_REASON
    assert old_now["superseded_by_id"] == new["id"]

    history = client.get(f"/api/decisions/{new['id']}/history", headers=_headers(lead_id))
    assert history.status_code == 200
    assert [d["id"] for d in history.json()] == [new["id"], old["id"]]


def test_history_not_found(client, member_id):
    response = client.get(f"/api/decisions/{uuid4()}/history", headers=_headers(member_id))

    assert response.status_code == 404


def test_get_decision_not_found(client, member_id):
    response = client.get(f"/api/decisions/{uuid4()}", headers=_headers(member_id))

    assert response.status_code == 404
    assert response.json() == {"detail": "Decision not found", "type": "not_found"}


def test_update_status(client, channel, member_id):
    decision = _create_manual(client, channel.id, member_id).json()

    closed = client.patch(
        f"/api/decisions/{decision['id']}/status",
        json={"status": "CLOSED"},
        headers=_headers(member_id)
    )
    assert closed.status_code == 200
    assert closed.json()["closure_reason"] == "Manually closed"

    reopened = client.patch(
        f"/api/decisions/{decision['id']}/status",
        json={"status": "OPEN"},
        headers=_headers(member_id)
    )
    assert reopened.status_code == 200
    assert reopened.json()["closed_at"] is None


def test_update_status_invalid(client, channel, member_id):
    decision = _create_manual(client, channel.id, member_id).json()

    response = client.patch(
        f"/api/decisions/{decision['id']}/status",
        json={"status": "ARCHIVED"},
        headers=_headers(member_id)
    )

    assert response.status_code == 422


def test_close_with_reserved_reason(client, channel, member_id):
    decision = _create_manual(client, channel.id, member_id).json()

    response = client.patch(
        f"/api/decisions/{decision['id']}/status",
        json={"status": "CLOSED", "closure_reason": SUPERSEDED_CLOSURE_REASON},
        headers=_headers(member_id)
    )

    assert response.status_code == 400
    assert response.json()["type"] == "validation"


def test_supersede_decision_of_another_team(client, db, channel, member_id):
    victim = _create_manual(client, channel.id, member_id, title="Use MySQL").json()
    other_team = Team(name="Other team")
    db.add(other_team)
    db.commit()
    other_channel = Channel(team_id=other_team.id, name="general")
    db.add(other_channel)
    outsider_id = uuid4()
    db.add(TeamMember(team_id=other_team.id, user_id=outsider_id, role=TeamRole.LEAD.value))
    db.commit()

    response = _create_manual(client, other_channel.id, outsider_id, title="Hijack", supersedes_decision_id=victim["id"])

    assert response.status_code == 403
    victim_now = client.get(f"/api/decisions/{victim['id']}", headers=_headers(member_id)).json()
    assert victim_now["status"] == "OPEN"


def test_reopen_superseded_conflict(client, channel, lead_id):
    old = _create_manual(client, channel.id, lead_id, title="Old").json()
    _create_manual(client, channel.id, lead_id, title="New", supersedes_decision_id=old["id"])

    response = client.patch(
        f"/api/decisions/{old['id']}/status",
        json={"status": "OPEN"},
        headers=_headers(lead_id)
    )

    assert response.status_code == 409


def test_team_listing(client, team, channel, lead_id):
    old = _create_manual(client, channel.id, lead_id, title="Old").json()
    new = _create_manual(client, channel.id, lead_id, title="New", supersedes_decision_id=old["id"]).json()
    closed = _create_manual(client, channel.id, lead_id, title="Closed", status="CLOSED").json()

    listed = client.get(f"/api/decisions/team/{team.id}", headers=_headers(lead_id)).json()
    assert {d["id"] for d in listed} == {new["id"], closed["id"]}

    listed_all = client.get(
        f"/api/decisions/team/{team.id}",
        params={"include_superseded": "true"},
        headers=_headers(lead_id)
    ).json()
    assert {d["id"] for d in listed_all} == {old["id"], new["id"], closed["id"]}

    open_only = client.get(f"/api/decisions/team/{team.id}/open", headers=_headers(lead_id)).json()
    assert [d["id"] for d in open_only] == [new["id"]]


def test_channel_listing_status_filter(client, channel, member_id):
    open_decision = _create_manual(client, channel.id, member_id, title="Open").json()
    _create_manual(client, channel.id, member_id, title="Closed", status="CLOSED")

    response = client.get(
        f"/api/decisions/channel/{channel.id}",
        params={"status": "OPEN"},
        headers=_headers(member_id)
    )

    assert [d["id"] for d in response.json()] == [open_decision["id"]]


def test_delete_decision(client, channel, member_id):
    message = _post_message(client, channel.id, member_id)
    decision = client.post(f"/api/decisions/from-message/{message['id']}", headers=_headers(member_id)).json()

    response = client.delete(f"/api/decisions/{decision['id']}", headers=_headers(member_id))

    assert response.status_code == 200
    assert response.json()["status"] == "deleted"
    message_now = client.get(f"/api/messages/{message['id']}", headers=_headers(member_id)).json()
    assert message_now["has_decision"] is False


def test_delete_superseded_conflict(client, channel, lead_id):
    old = _create_manual(client, channel.id, lead_id, title="Old").json()
    _create_manual(client, channel.id, lead_id, title="New", supersedes_decision_id=old["id"])

    response = client.delete(f"/api/decisions/{old['id']}", headers=_headers(lead_id))

    assert response.status_code == 409


def test_unmark_message(client, channel, member_id):
    message = _post_message(client, channel.id, member_id)
    decision = client.post(f"/api/decisions/from-message/{message['id']}", headers=_headers(member_id)).json()

    response = client.delete(f"/api/decisions/message/{message['id']}", headers=_headers(member_id))

    assert response.status_code == 200
    assert response.json()["status"] == "unmarked"
    assert client.get(f"/api/decisions/{decision['id']}", headers=_headers(member_id)).status_code == 404

    again = client.delete(f"/api/decisions/message/{message['id']}", headers=_headers(member_id))
    assert again.status_code == 404
