"""Tests for murmur, reply and like endpoints."""

from fastapi import status

from murmur.core.settings import settings


def post_murmur(client, headers: dict[str, str], content: str = "hello") -> dict:
    r = client.post("/api/v1/murmurs/", json={"content": content}, headers=headers)
    assert r.status_code == status.HTTP_201_CREATED, r.text
    return r.json()


def test_create_and_fetch(client, alice, alice_headers) -> None:
    created = post_murmur(client, alice_headers, "  first murmur  ")
    assert created["content"] == "first murmur"
    assert created["user"]["username"] == "alice"
    assert created["likes_count"] == 0
    assert created["reply_to_id"] is None

    r = client.get(f"/api/v1/murmurs/{created['id']}")
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["id"] == created["id"]

    r = client.get(f"/api/v1/users/{alice.id}")
    assert r.json()["murmurs_count"] == 1


def test_create_validation(client, alice_headers) -> None:
    r = client.post("/api/v1/murmurs/", json={"content": "x" * 281}, headers=alice_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["detail"] == "Content must be between 1 and 280 characters"

    r = client.post("/api/v1/murmurs/", json={"content": ""}, headers=alice_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST

    r = client.post("/api/v1/murmurs/", json={"content": "    "}, headers=alice_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST

    r = client.post("/api/v1/murmurs/", json={"content": "anonymous"})
    assert r.status_code == status.HTTP_401_UNAUTHORIZED


def test_delete_requires_ownership(client, alice_headers, bob_headers) -> None:
    murmur = post_murmur(client, alice_headers)

    r = client.delete(f"/api/v1/murmurs/{murmur['id']}", headers=bob_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND
    assert r.json()["detail"] == "Murmur not found or you do not have permission to delete it"

    r = client.delete(f"/api/v1/murmurs/{murmur['id']}", headers=alice_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"/api/v1/murmurs/{murmur['id']}").status_code == status.HTTP_404_NOT_FOUND


def test_like_toggle(client, alice_headers, bob_headers) -> None:
    murmur = post_murmur(client, alice_headers)
    url = f"/api/v1/murmurs/{murmur['id']}/like"

    r = client.post(url, headers=bob_headers)
    assert r.json() == {"is_liked": True, "likes_count": 1}
    r = client.post(url, headers=bob_headers)
    assert r.json() == {"is_liked": False, "likes_count": 0}
    r = client.post(url, headers=bob_headers)
    assert r.json() == {"is_liked": True, "likes_count": 1}

    r = client.delete(url, headers=bob_headers)
    assert r.json() == {"is_liked": False, "likes_count": 0}
    r = client.delete(url, headers=bob_headers)
    assert r.status_code == status.HTTP_200_OK

    assert client.post("/api/v1/murmurs/9999/like", headers=bob_headers).status_code == 404


def test_likers_and_viewer_flag(client, alice_headers, bob_headers) -> None:
    murmur = post_murmur(client, alice_headers)
    client.post(f"/api/v1/murmurs/{murmur['id']}/like", headers=bob_headers)

    r = client.get(f"/api/v1/murmurs/{murmur['id']}/likes")
    assert [u["username"] for u in r.json()["users"]] == ["bob"]

    r = client.get(f"/api/v1/murmurs/{murmur['id']}", headers=bob_headers)
    assert r.json()["is_liked_by_user"] is True
    r = client.get(f"/api/v1/murmurs/{murmur['id']}", headers=alice_headers)
    assert r.json()["is_liked_by_user"] is False


def test_replies(client, alice_headers, bob_headers) -> None:
    root = post_murmur(client, alice_headers, "root")
    url = f"/api/v1/murmurs/{root['id']}/replies"

    r = client.post(url, json={"content": "first reply"}, headers=bob_headers)
    assert r.status_code == status.HTTP_201_CREATED
    reply = r.json()
    assert reply["reply_to_id"] == root["id"]
    client.post(url, json={"content": "second reply"}, headers=alice_headers)

    r = client.get(url)
    assert [m["content"] for m in r.json()["murmurs"]] == ["first reply", "second reply"]
    assert client.get(f"/api/v1/murmurs/{root['id']}").json()["replies_count"] == 2

    r = client.delete(f"{url}/{reply['id']}", headers=alice_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND
    r = client.delete(f"{url}/{reply['id']}", headers=bob_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"/api/v1/murmurs/{root['id']}").json()["replies_count"] == 1

    r = client.post("/api/v1/murmurs/9999/replies", json={"content": "hi"}, headers=bob_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_public_user_search_and_trending_feeds(client, alice, alice_headers, bob_headers) -> None:
    post_murmur(client, alice_headers, "alpha")
    beta = post_murmur(client, bob_headers, "beta")
    client.post(f"/api/v1/murmurs/{beta['id']}/like", headers=alice_headers)

    r = client.get("/api/v1/murmurs/")
    assert [m["content"] for m in r.json()["murmurs"]] == ["beta", "alpha"]
    r = client.get("/api/v1/murmurs/", params={"exclude_own": True}, headers=alice_headers)
    assert [m["content"] for m in r.json()["murmurs"]] == ["beta"]

    r = client.get(f"/api/v1/murmurs/user/{alice.id}")
    assert [m["content"] for m in r.json()["murmurs"]] == ["alpha"]
    assert client.get("/api/v1/murmurs/user/9999").status_code == status.HTTP_404_NOT_FOUND

    r = client.get("/api/v1/murmurs/search", params={"q": "ALP"})
    assert [m["content"] for m in r.json()["murmurs"]] == ["alpha"]
    assert client.get("/api/v1/murmurs/search").status_code == 422

    r = client.get("/api/v1/murmurs/trending")
    assert [m["content"] for m in r.json()["murmurs"]] == ["beta", "alpha"]


def test_pagination_envelope(client, alice_headers) -> None:
    for i in range(15):
        post_murmur(client, alice_headers, f"murmur {i}")

    r = client.get("/api/v1/murmurs/", params={"page": 2, "limit": 10})
    body = r.json()
    assert len(body["murmurs"]) == 5
    assert body["pagination"] == {
        "page": 2,
        "limit": 10,
        "total_count": 15,
        "total_pages": 2,
        "has_next_page": False,
        "has_previous_page": True,
    }

    assert client.get("/api/v1/murmurs/", params={"limit": 51}).status_code == 422
    assert client.get("/api/v1/murmurs/", params={"page": 0}).status_code == 422


def test_user_feed_includes_replies_by_default(client, alice, alice_headers, bob_headers) -> None:
    root = post_murmur(client, bob_headers, "bob root")
    r = client.post(
        f"/api/v1/murmurs/{root['id']}/replies",
        json={"content": "alice reply"},
        headers=alice_headers,
    )
    assert r.status_code == status.HTTP_201_CREATED

    r = client.get(f"/api/v1/murmurs/user/{alice.id}")
    assert [m["content"] for m in r.json()["murmurs"]] == ["alice reply"]

    r = client.get(f"/api/v1/murmurs/user/{alice.id}", params={"include_replies": False})
    assert r.json()["murmurs"] == []


def test_length_limit_follows_settings(client, alice_headers, monkeypatch) -> None:
    monkeypatch.setattr(settings, "murmur_max_length", 300)
    created = post_murmur(client, alice_headers, "y" * 300)
    assert len(created["content"]) == 300
    assert client.get("/api/v1/system/config").json()["limits"]["murmur_max_length"] == 300

    r = client.post("/api/v1/murmurs/", json={"content": "y" * 301}, headers=alice_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST
