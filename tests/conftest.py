"""Pytest configuration and shared fixtures for Budget Assistant tests.

Every test gets its own pair of temporary SQLite files (user DB and expense
DB), so services and routes never touch a real data directory.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlmodel import select

from budget_assistant import create_app
from budget_assistant.config import TestingConfig
from budget_assistant.infra.database import (
    create_db_engines,
    create_session_factory,
    init_database,
)
from budget_assistant.models import CashExpense, MonthlyBudget
from budget_assistant.services import auth

DEFAULT_PASSWORD = "secret123"


def _point_env_at(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUDGET_ASSISTANT_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("BUDGET_ASSISTANT_USER_DATABASE_URL", f"sqlite:///{tmp_path / 'users.db'}")
    monkeypatch.setenv(
        "BUDGET_ASSISTANT_EXPENSE_DATABASE_URL", f"sqlite:///{tmp_path / 'expenses.db'}"
    )
    overridable = (
        "DEV_MODE",
        "JWT_ISSUER",
        "JWT_AUDIENCE",
        "JWT_EXPIRES_HOURS",
        "EDIT_WINDOW_DAYS",
        "LOG_LEVEL",
    )
    for name in overridable:
        monkeypatch.delenv(f"BUDGET_ASSISTANT_{name}", raising=False)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture()
def config(tmp_path, monkeypatch: pytest.MonkeyPatch) -> TestingConfig:
    _point_env_at(tmp_path, monkeypatch)
    return TestingConfig()


@pytest.fixture()
def db_engines(config):
    """Both engines with their schemas created; disposed after the test."""

    engines = create_db_engines(config)
    init_database(engines)
    yield engines
    engines.dispose()


@pytest.fixture()
def session_factory(db_engines):
    return create_session_factory(db_engines)


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture()
def app(tmp_path, monkeypatch: pytest.MonkeyPatch):
    _point_env_at(tmp_path, monkeypatch)
    flask_app = create_app("testing")
    yield flask_app
    flask_app.extensions["budget_assistant"]["engines"].dispose()


@pytest.fixture()
def client(app):
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture()
def app_session_factory(app):
    return app.extensions["budget_assistant"]["session_factory"]


@pytest.fixture()
def registered_user(client) -> dict:
    """Register ``alice`` through the API and return the credentials."""

    response = client.post(
        "/api/auth/register",
        json={
            "username": "alice",
            "password": DEFAULT_PASSWORD,
            "confirmPassword": DEFAULT_PASSWORD,
            "email": "alice@example.com",
            "displayName": "Alice",
        },
    )
    assert response.status_code == 201, response.get_json()
    body = response.get_json()
    return {"id": body["userId"], "username": "alice", "password": DEFAULT_PASSWORD}


@pytest.fixture()
def auth_headers(client, registered_user) -> dict:
    response = client.post(
        "/api/auth/login",
        json={"username": registered_user["username"], "password": registered_user["password"]},
    )
    assert response.status_code == 200, response.get_json()
    return {"Authorization": f"Bearer {response.get_json()['token']}"}


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture()
def user_factory(session_factory):
    """Register users straight through the service layer."""

    def _create_user(username: str = "tester", email: str | None = None, **kwargs) -> str:
        result = auth.register(
            username=username,
            password=kwargs.pop("password", DEFAULT_PASSWORD),
            email=email,
            session_factory=session_factory,
            **kwargs,
        )
        assert result.success, result.message
        return result.user_id  # type: ignore[return-value]

    return _create_user


@pytest.fixture()
def user_id(user_factory) -> str:
    return user_factory()


@pytest.fixture()
def ledger_state(session_factory):
    """Read back (budget, cash expenses) of one period for invariant checks."""

    def _state(user_id: str, year: int, month: int):
        with session_factory() as session:
            budget = session.exec(
                select(MonthlyBudget)
                .where(MonthlyBudget.user_id == user_id)
                .where(MonthlyBudget.year == year)
                .where(MonthlyBudget.month == month)
            ).first()
            expenses = list(
                session.exec(
                    select(CashExpense)
                    .where(CashExpense.user_id == user_id)
                    .where(CashExpense.year == year)
                    .where(CashExpense.month == month)
                ).all()
            )
            session.expunge_all()
        return budget, expenses

    return _state


@pytest.fixture()
def at():
    """Build ``now`` callables frozen at ``datetime(*args)`` in UTC."""

    def _clock(*args: int):
        moment = datetime(*args, tzinfo=timezone.utc)
        return lambda: moment

    return _clock
