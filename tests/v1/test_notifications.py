"""Tests for the notification inbox endpoints."""

from fastapi import status


def test_inbox_flow(client, alice, bob, alice_headers, bob_headers) -> None:
    client.post(f"/api/v1/users/{alice.id}/follow", headers=bob_headers)
    r = client.post("/api/v1/murmurs/", json={"content": "note this"}, headers=alice_headers)
    murmur_id = r.json()["id"]
    client.post(f"/api/v1/murmurs/{murmur_id}/like", headers=bob_headers)
    client.post(
        f"/api/v1/murmurs/{murmur_id}/replies",
        json={"content": "noted"},
        headers=bob_headers,
    )

    r = client.get("/api/v1/notifications/unread-count", headers=alice_headers)
    assert r.json() == {"count": 3}

    r = client.get("/api/v1/notifications/", params={"limit": 2}, headers=alice_headers)
    body = r.json()
    assert [n["type"] for n in body["notifications"]] == ["reply", "like"]
    assert body["has_more"] is True
    assert body["notifications"][0]["actor"]["username"] == "bob"

    r = client.get(
        "/api/v1/notifications/",
        params={"limit": 2, "cursor": body["next_cursor"]},
        headers=alice_headers,
    )
    body = r.json()
    assert [n["type"] for n in body["notifications"]] == ["follow"]
    assert body["has_more"] is False
    assert body["next_cursor"] is None
    follow_id = body["notifications"][0]["id"]

    r = client.put(f"/api/v1/notifications/{follow_id}/read", headers=alice_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/api/v1/notifications/unread-count", headers=alice_headers).json() == {"count": 2}

    # Another user's id is a silent no-op.
    client.delete(f"/api/v1/notifications/{follow_id}", headers=bob_headers)
    client.put("/api/v1/notifications/read-all", headers=alice_headers)
    assert client.get("/api/v1/notifications/unread-count", headers=alice_headers).json() == {"count": 0}

    r = client.delete(f"/api/v1/notifications/{follow_id}", headers=alice_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT
    r = client.get("/api/v1/notifications/", headers=alice_headers)
    assert len(r.json()["notifications"]) == 2


def test_self_actions_do_not_notify(client, alice_headers) -> None:
    r = client.post("/api/v1/murmurs/", json={"content": "mine"}, headers=alice_headers)
    murmur_id = r.json()["id"]
    client.post(f"/api/v1/murmurs/{murmur_id}/like", headers=alice_headers)
    client.post(
        f"/api/v1/murmurs/{murmur_id}/replies",
        json={"content": "talking to myself"},
        headers=alice_headers,
    )
    assert client.get("/api/v1/notifications/unread-count", headers=alice_headers).json() == {"count": 0}


def test_requires_auth(client) -> None:
    assert client.get("/api/v1/notifications/").status_code == status.HTTP_401_UNAUTHORIZED


def test_deleted_murmurs_drop_out_of_inbox(client, alice, bob, alice_headers, bob_headers) -> None:
    r = client.post("/api/v1/murmurs/", json={"content": "bob's post"}, headers=bob_headers)
    post_id = r.json()["id"]
    r = client.post(
        f"/api/v1/murmurs/{post_id}/replies",
        json={"content": "reply text to hide"},
        headers=alice_headers,
    )
    reply_id = r.json()["id"]
    client.post(f"/api/v1/murmurs/{post_id}/like", headers=alice_headers)

    r = client.get("/api/v1/notifications/", headers=bob_headers)
    assert [n["type"] for n in r.json()["notifications"]] == ["like", "reply"]

    r = client.delete(f"/api/v1/murmurs/{reply_id}", headers=alice_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT
    r = client.get("/api/v1/notifications/", headers=bob_headers)
    assert "reply text to hide" not in r.text
    assert [n["type"] for n in r.json()["notifications"]] == ["like"]

    client.delete(f"/api/v1/murmurs/{post_id}", headers=bob_headers)
    r = client.get("/api/v1/notifications/", headers=bob_headers)
    assert r.json()["notifications"] == []
    assert client.get("/api/v1/notifications/unread-count", headers=bob_headers).json() == {"count": 0}
