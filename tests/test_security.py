"""Tests for access-token issuing and validation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from flask_jwt_extended import create_access_token, decode_token

from budget_assistant import create_app
from budget_assistant.models import User
from budget_assistant.security import issue_access_token, validate_token


@pytest.fixture()
def token_user() -> User:
    return User(id="user-123", username="sam", display_name="Sam", password_hash="x")


def test_issued_token_carries_identity_and_names(app, token_user):
    with app.app_context():
        before = datetime.now(timezone.utc)
        token, expires_at = issue_access_token(token_user)
        claims = decode_token(token)

    assert claims["sub"] == "user-123"
    assert claims["name"] == "sam"
    assert claims["display_name"] == "Sam"
    assert claims["iss"] == "BudgetAssistant.Server"
    assert claims["aud"] == "BudgetAssistant.Client"
    assert expires_at - before >= timedelta(hours=24) - timedelta(seconds=5)
    assert abs(claims["exp"] - expires_at.timestamp()) < 5


def test_validate_token_accepts_own_tokens(app, token_user):
    with app.app_context():
        token, _ = issue_access_token(token_user)
        assert validate_token(token)
        assert not validate_token("")
        assert not validate_token("not-a-jwt")
        assert not validate_token(token[:-4] + "AAAA")


def test_expired_token_is_invalid(app):
    with app.app_context():
        token = create_access_token(identity="user-123", expires_delta=timedelta(seconds=-1))
        assert not validate_token(token)


def test_token_for_another_audience_is_invalid(app, token_user, monkeypatch):
    monkeypatch.setenv("BUDGET_ASSISTANT_JWT_AUDIENCE", "SomeOther.Client")
    other_app = create_app("testing")
    try:
        with other_app.app_context():
            foreign_token, _ = issue_access_token(token_user)
    finally:
        other_app.extensions["budget_assistant"]["engines"].dispose()

    with app.app_context():
        assert not validate_token(foreign_token)


def test_expired_token_is_rejected_by_protected_routes(app, client, registered_user):
    with app.app_context():
        token = create_access_token(
            identity=registered_user["id"], expires_delta=timedelta(seconds=-1)
        )

    response = client.get("/api/user/profile", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.get_json() == {"success": False, "message": "無效的使用者身份"}
