from fastapi.testclient import TestClient
from sqlmodel import Session

from services.conversations import get_conversation


def test_friendship_lifecycle(client: TestClient, test_session: Session, login_as, alice, bob):
    # Alice finds Bob by UID
    login_as(alice)
    r = client.get("/friends/search/BBB222")
    assert r.status_code == 200
    found = r.json()
    assert found["userId"] == bob.id
    assert found["friendshipStatus"] is None
    assert found["canSendRequest"] is True

    r = client.post("/friends/request", json={"uid": "BBB222", "message": "hi"})
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Friend request sent"}

    r = client.get("/friends/requests", params={"type": "sent"})
    assert [req["user"]["uid"] for req in r.json()] == ["BBB222"]

    # Bob sees and accepts it
    login_as(bob)
    r = client.get("/friends/requests")
    assert r.status_code == 200
    (request,) = r.json()
    assert request["status"] == "pending"
    assert request["message"] == "hi"
    assert request["user"]["uid"] == "AAA111"

    r = client.post(
        f"/friends/requests/{request['id']}/handle", json={"action": "accept"}
    )
    assert r.status_code == 200
    assert r.json()["message"] == "Friend request accepted"
    assert client.get("/friends/requests").json() == []

    (alice_for_bob,) = client.get("/friends").json()
    assert alice_for_bob["uid"] == "AAA111"
    assert alice_for_bob["isOnline"] is True

    # Both sides share the same conversation
    login_as(alice)
    (bob_for_alice,) = client.get("/friends").json()
    assert bob_for_alice["userId"] == bob.id
    assert bob_for_alice["displayName"] == "Bob"
    assert bob_for_alice["conversationId"] == alice_for_bob["conversationId"]
    conversation_id = bob_for_alice["conversationId"]
    assert get_conversation(test_session, conversation_id).is_active is True

    r = client.get("/friends/notifications")
    (notification,) = r.json()
    assert notification["type"] == "accepted"
    assert notification["isRead"] is False
    assert notification["fromUser"]["uid"] == "BBB222"

    r = client.post(f"/friends/notifications/{notification['id']}/read")
    assert r.status_code == 200
    assert client.get("/friends/notifications").json()[0]["isRead"] is True

    r = client.get("/friends/search/BBB222")
    assert r.json()["friendshipStatus"] == "accepted"
    assert r.json()["canSendRequest"] is False

    r = client.post("/friends/request", json={"uid": "BBB222"})
    assert r.status_code == 409
    assert r.json() == {"success": False, "message": "You are already friends"}

    # Settings are partial
    r = client.patch(f"/friends/{bob.id}/settings", json={"alias": "Bobby"})
    assert r.status_code == 200
    r = client.patch(f"/friends/{bob.id}/settings", json={"isStarred": True})
    assert r.status_code == 200
    (friend,) = client.get("/friends").json()
    assert friend["displayName"] == "Bobby"
    assert friend["isStarred"] is True
    assert friend["isMuted"] is False

    # Removal is mutual and archives the conversation
    r = client.delete(f"/friends/{bob.id}")
    assert r.status_code == 200
    assert r.json()["message"] == "Friend removed"
    assert client.get("/friends").json() == []
    login_as(bob)
    assert client.get("/friends").json() == []
    test_session.expire_all()
    assert get_conversation(test_session, conversation_id).is_active is False


def test_decline_flow(client: TestClient, login_as, alice, bob):
    login_as(alice)
    client.post("/friends/request", json={"uid": "BBB222"})

    login_as(bob)
    (request,) = client.get("/friends/requests").json()
    r = client.post(
        f"/friends/requests/{request['id']}/handle",
        json={"action": "decline", "message": "not now"},
    )
    assert r.status_code == 200
    assert r.json()["message"] == "Friend request declined"

    # Handling it again looks like a missing request
    r = client.post(
        f"/friends/requests/{request['id']}/handle", json={"action": "accept"}
    )
    assert r.status_code == 404
    assert r.json()["message"] == "Friend request not found or already handled"

    login_as(alice)
    (notification,) = client.get("/friends/notifications").json()
    assert notification["type"] == "declined"
    assert notification["message"] == "not now"
    assert client.get("/friends").json() == []

    r = client.post("/friends/request", json={"uid": "BBB222"})
    assert r.status_code == 409


def test_requires_authentication(client: TestClient):
    for method, path in [
        ("get", "/friends"),
        ("get", "/friends/search/BBB222"),
        ("get", "/friends/requests"),
        ("get", "/friends/notifications"),
        ("delete", "/friends/u2"),
    ]:
        r = getattr(client, method)(path)
        assert r.status_code == 401
        assert r.json() == {"success": False, "message": "Not authenticated"}


def test_health_is_public(client: TestClient):
    r = client.get("/friends/health")
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.json()["message"] == "Friends API is up"
    assert "timestamp" in r.json()


def test_error_envelopes(client: TestClient, login_as, alice, bob):
    login_as(alice)

    r = client.get("/friends/search/AAA111")
    assert r.status_code == 400
    assert r.json() == {
        "success": False,
        "message": "You cannot add yourself as a friend",
    }

    r = client.get("/friends/search/NOPE00")
    assert r.status_code == 404
    assert r.json()["message"] == "User not found"

    r = client.get("/friends/search/bad-uid")
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid UID"

    r = client.post("/friends/request", json={})
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert r.json()["message"].startswith("Invalid uid")

    r = client.get("/friends/requests", params={"type": "all"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid request type"

    r = client.post("/friends/requests/1/handle", json={"action": "maybe"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid action"

    r = client.delete(f"/friends/{bob.id}")
    assert r.status_code == 404
    assert r.json()["message"] == "Friendship not found"

    r = client.get("/friends/notifications", params={"limit": 0})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid paging parameters"

    r = client.post("/friends/notifications/999/read")
    assert r.status_code == 404


def test_block_user_route(client: TestClient, login_as, alice, bob):
    login_as(alice)
    r = client.post(f"/friends/{bob.id}/block")
    assert r.status_code == 200
    assert r.json()["message"] == "User blocked"

    login_as(bob)
    r = client.get("/friends/search/AAA111")
    assert r.json()["friendshipStatus"] == "blocked"
    r = client.post("/friends/request", json={"uid": "AAA111"})
    assert r.status_code == 409

    r = client.post(f"/friends/{bob.id}/block")
    assert r.status_code == 400


def test_unexpected_error_is_internal(test_app, login_as, alice, mocker):
    mocker.patch("routes.friendship.svc_list_friends", side_effect=RuntimeError("boom"))
    mocker.patch("app.slack.send_message")
    login_as(alice)

    client = TestClient(test_app, raise_server_exceptions=False)
    r = client.get("/friends")
    assert r.status_code == 500
    assert r.json() == {"success": False, "message": "Internal server error"}
