"""Tests for the bearer-token auth gate."""

from datetime import timedelta

from fastapi.security import HTTPAuthorizationCredentials

from murmur.api.v1.dependencies import Anonymous, Authenticated, Rejected, resolve_auth
from murmur.core.security import issue_access_token


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def test_missing_credentials_are_anonymous(db_session) -> None:
    assert isinstance(resolve_auth(None, db_session), Anonymous)


def test_valid_token_authenticates(db_session, alice) -> None:
    result = resolve_auth(_bearer(issue_access_token(alice.id)), db_session)
    assert isinstance(result, Authenticated)
    assert result.user.id == alice.id


def test_bad_tokens_are_rejected_with_reason(db_session, alice, make_user) -> None:
    expired = resolve_auth(
        _bearer(issue_access_token(alice.id, ttl=timedelta(seconds=-5))), db_session
    )
    assert expired == Rejected("Token expired")

    assert resolve_auth(_bearer("nonsense"), db_session) == Rejected("Invalid token")
    assert isinstance(resolve_auth(_bearer(issue_access_token(9999)), db_session), Rejected)

    sleeper = make_user("sleeper", is_active=False)
    assert isinstance(resolve_auth(_bearer(issue_access_token(sleeper.id)), db_session), Rejected)


def test_optional_routes_treat_rejected_as_anonymous(client, alice, make_murmur) -> None:
    murmur = make_murmur(alice)
    r = client.get(
        f"/api/v1/murmurs/{murmur.id}",
        headers={"Authorization": "Bearer broken"},
    )
    assert r.status_code == 200
    assert r.json()["is_liked_by_user"] is False

    r = client.get("/api/v1/murmurs/timeline", headers={"Authorization": "Bearer broken"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid token"
