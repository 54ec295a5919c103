"""Tests for the SQLModel repository implementations."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import inspect

from budget_assistant.domain.repositories import (
    BudgetRepository,
    CashExpenseRepository,
    CreditCardExpenseRepository,
    UserRepository,
)
from budget_assistant.exceptions import ConcurrencyConflictError
from budget_assistant.infra.repositories import (
    SQLModelBudgetRepository,
    SQLModelCashExpenseRepository,
    SQLModelCreditCardExpenseRepository,
    SQLModelUserRepository,
)
from budget_assistant.models import CashExpense, CreditCardExpense, MonthlyBudget, User


@pytest.fixture()
def seeded_budget(session_factory):
    with session_factory() as session:
        SQLModelBudgetRepository(session).add(
            MonthlyBudget(
                user_id="u-1", year=2024, month=5, total_amount=1000, remaining_amount=1000
            )
        )


def _add_cash(session_factory, amount: float, **overrides) -> CashExpense:
    values = {
        "user_id": "u-1",
        "year": 2024,
        "month": 5,
        "amount": amount,
        "description": "測試",
        "created_at": datetime(2024, 5, 3, 12, 0, tzinfo=timezone.utc),
    }
    values.update(overrides)
    with session_factory() as session:
        return SQLModelCashExpenseRepository(session).add(CashExpense(**values))


def test_user_lookup_and_uniqueness(session_factory):
    with session_factory() as session:
        repo = SQLModelUserRepository(session)
        user = repo.add(User(username="carol", password_hash="x", email="carol@example.com"))
        other = repo.add(User(username="dave", password_hash="x"))

    assert len(user.id) == 36

    with session_factory() as session:
        repo = SQLModelUserRepository(session)
        assert repo.get_by_username("carol").id == user.id
        assert repo.get_by_email("carol@example.com").id == user.id
        assert repo.get_by_id(other.id).username == "dave"
        assert repo.username_exists("carol")
        assert not repo.username_exists("erin")
        assert repo.email_exists("carol@example.com")
        assert not repo.email_exists("carol@example.com", exclude_user_id=user.id)
        assert repo.email_exists("carol@example.com", exclude_user_id=other.id)


def test_users_and_expenses_live_in_separate_databases(db_engines, session_factory):
    with session_factory() as session:
        SQLModelUserRepository(session).add(User(username="frank", password_hash="x"))
        SQLModelBudgetRepository(session).add(
            MonthlyBudget(user_id="u-9", year=2024, month=1, total_amount=1, remaining_amount=1)
        )

    assert inspect(db_engines.user).get_table_names() == ["user"]
    assert set(inspect(db_engines.expense).get_table_names()) == {
        "monthly_budget",
        "cash_expense",
        "credit_card_expense",
    }


def test_deduct_is_conditional(session_factory, seeded_budget):
    with session_factory() as session:
        repo = SQLModelBudgetRepository(session)
        assert repo.deduct(2024, 5, 400, user_id="u-1") == 600
        assert repo.deduct(2024, 5, 600.01, user_id="u-1") is None
        assert repo.deduct(2024, 5, 600, user_id="u-1") == 0
        assert repo.deduct(2024, 6, 1, user_id="u-1") is None

    with session_factory() as session:
        budget = SQLModelBudgetRepository(session).get_for_month(2024, 5, user_id="u-1")
    assert budget.remaining_amount == 0
    assert budget.updated_at is not None


def test_restore_and_missing_budget(session_factory, seeded_budget):
    with session_factory() as session:
        repo = SQLModelBudgetRepository(session)
        repo.deduct(2024, 5, 250.25, user_id="u-1")
        assert repo.restore(2024, 5, 250.25, user_id="u-1") == 1000
        assert repo.restore(2030, 1, 5, user_id="u-1") is None


def test_reset_total_recomputes_from_cash_expenses(session_factory, seeded_budget):
    _add_cash(session_factory, 120)
    _add_cash(session_factory, 80)
    _add_cash(session_factory, 999, month=6)
    _add_cash(session_factory, 999, user_id="u-2")

    with session_factory() as session:
        remaining = SQLModelBudgetRepository(session).reset_total(
            2024, 5, 1500, user_id="u-1"
        )

    assert remaining == 1300
    with session_factory() as session:
        budget = SQLModelBudgetRepository(session).get_for_month(2024, 5, user_id="u-1")
    assert budget.total_amount == 1500


def test_list_budgets_newest_first(session_factory):
    with session_factory() as session:
        repo = SQLModelBudgetRepository(session)
        for year, month in ((2023, 12), (2024, 2), (2024, 1)):
            repo.add(
                MonthlyBudget(
                    user_id="u-1", year=year, month=month, total_amount=1, remaining_amount=1
                )
            )
        periods = [(b.year, b.month) for b in repo.list_all(user_id="u-1")]

    assert periods == [(2024, 2), (2024, 1), (2023, 12)]


def test_versioned_update_bumps_version(session_factory):
    expense = _add_cash(session_factory, 50)

    expense.amount = 75
    expense.description = "改過"
    with session_factory() as session:
        saved = SQLModelCashExpenseRepository(session).update_versioned(
            expense, expected_version=1
        )
    assert saved.version == 2

    with session_factory() as session:
        reloaded = SQLModelCashExpenseRepository(session).get_by_id(expense.id, user_id="u-1")
    assert reloaded.amount == 75
    assert reloaded.description == "改過"
    assert reloaded.version == 2


def test_stale_version_is_rejected(session_factory):
    expense = _add_cash(session_factory, 50)

    with session_factory() as session:
        SQLModelCashExpenseRepository(session).update_versioned(expense, expected_version=1)

    with pytest.raises(ConcurrencyConflictError) as excinfo:
        with session_factory() as session:
            SQLModelCashExpenseRepository(session).update_versioned(
                expense, expected_version=1
            )
    assert excinfo.value.entity == "CashExpense"

    with pytest.raises(ConcurrencyConflictError):
        with session_factory() as session:
            SQLModelCashExpenseRepository(session).delete_versioned(
                expense.id, user_id="u-1", expected_version=1
            )

    with session_factory() as session:
        repo = SQLModelCashExpenseRepository(session)
        repo.delete_versioned(expense.id, user_id="u-1", expected_version=2)
        assert repo.get_by_id(expense.id, user_id="u-1") is None


def test_cash_aggregates(session_factory):
    _add_cash(session_factory, 10.1)
    _add_cash(session_factory, 20.2)
    _add_cash(session_factory, 5, month=6)

    with session_factory() as session:
        repo = SQLModelCashExpenseRepository(session)
        assert repo.total_for_month(2024, 5, user_id="u-1") == 30.3
        assert repo.total(user_id="u-1") == 35.3
        assert repo.count(user_id="u-1") == 3
        assert repo.monthly_totals(user_id="u-1") == {(2024, 5): 30.3, (2024, 6): 5}
        assert repo.total_for_month(2024, 5, user_id="nobody") == 0


def test_list_for_month_orders_newest_first(session_factory):
    early = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
    late = datetime(2024, 5, 20, 8, 0, tzinfo=timezone.utc)
    _add_cash(session_factory, 1, description="舊", created_at=early)
    _add_cash(session_factory, 2, description="新", created_at=late)

    with session_factory() as session:
        rows = SQLModelCashExpenseRepository(session).list_for_month(2024, 5, user_id="u-1")

    assert [row.description for row in rows] == ["新", "舊"]


def test_credit_card_repository_round_trip(session_factory):
    with session_factory() as session:
        card = SQLModelCreditCardExpenseRepository(session).add(
            CreditCardExpense(
                user_id="u-1",
                year=2024,
                month=5,
                amount=300,
                description="機票",
                card_name="台新",
                created_at=datetime(2024, 5, 2, 10, 0, tzinfo=timezone.utc),
            )
        )

    card.installments = 3
    with session_factory() as session:
        saved = SQLModelCreditCardExpenseRepository(session).save(card)
    assert saved.updated_at is not None

    with session_factory() as session:
        repo = SQLModelCreditCardExpenseRepository(session)
        assert repo.get_by_id(card.id, user_id="u-1").installments == 3
        assert repo.get_by_id(card.id, user_id="u-2") is None
        assert repo.total_for_month(2024, 5, user_id="u-1") == 300
        assert repo.count(user_id="u-1") == 1
        repo.delete(card.id, user_id="u-1")
        assert repo.list_for_month(2024, 5, user_id="u-1") == []


def test_implementations_satisfy_protocols(session_factory):
    with session_factory() as session:
        assert isinstance(SQLModelUserRepository(session), UserRepository)
        assert isinstance(SQLModelBudgetRepository(session), BudgetRepository)
        assert isinstance(SQLModelCashExpenseRepository(session), CashExpenseRepository)
        assert isinstance(
            SQLModelCreditCardExpenseRepository(session), CreditCardExpenseRepository
        )


def test_timestamps_load_back_as_utc(session_factory, seeded_budget):
    taipei = timezone(timedelta(hours=8))
    naive = _add_cash(session_factory, 1, created_at=datetime(2024, 5, 3, 12, 0))
    local = _add_cash(session_factory, 2, created_at=datetime(2024, 5, 3, 20, 0, tzinfo=taipei))

    with session_factory() as session:
        budgets = SQLModelBudgetRepository(session)
        budgets.deduct(2024, 5, 10, user_id="u-1")
        expenses = SQLModelCashExpenseRepository(session)
        stored = [expenses.get_by_id(row.id, user_id="u-1") for row in (naive, local)]
        budget = budgets.get_for_month(2024, 5, user_id="u-1")

    expected = datetime(2024, 5, 3, 12, 0, tzinfo=timezone.utc)
    assert [row.created_at for row in stored] == [expected, expected]
    assert all(row.created_at.tzinfo is timezone.utc for row in stored)
    assert budget.created_at.tzinfo is timezone.utc
    assert budget.updated_at.tzinfo is timezone.utc
