"""Budget and expense routes."""

from __future__ import annotations

from typing import Optional

from flask import current_app, jsonify, request
from flask_jwt_extended import jwt_required

from ...constants import messages
from ...constants.expense_types import ExpenseType
from ...extensions import get_session_factory
from ...security import current_user_id
from ...services import expenses as expense_service
from ..responses import message_response, result_response, validation_error
from . import bp
from .forms import BudgetForm, CashExpenseForm, CreditCardExpenseForm, ExpenseUpdateForm


def _edit_window_days() -> int:
    return int(current_app.config["EDIT_WINDOW_DAYS"])


def _requested_type() -> ExpenseType:
    """Expense type from ``?type=`` or the body; unknown values mean cash."""

    raw: Optional[str] = request.args.get("type")
    if not raw:
        body = request.get_json(silent=True)
        if isinstance(body, dict):
            raw = body.get("expenseType")
    return ExpenseType.from_string(raw)


def _detail_response(detail):
    if detail is None:
        return message_response(messages.EXPENSE_NOT_FOUND, 404)
    return jsonify(detail.to_dict())


@bp.get("/budget/current")
@jwt_required()
def current_budget():
    summary = expense_service.get_current_month_budget(
        current_user_id(), session_factory=get_session_factory()
    )
    return jsonify(summary.to_dict())


@bp.post("/budget")
@jwt_required()
def set_budget():
    form = BudgetForm.from_mapping(request.get_json(silent=True))
    if not form.validate():
        return validation_error(form)

    result = expense_service.set_monthly_budget(
        current_user_id(),
        amount=form.amount,
        year=form.year,
        month=form.month,
        session_factory=get_session_factory(),
    )
    return result_response(result)


@bp.post("/cash")
@jwt_required()
def add_cash_expense():
    form = CashExpenseForm.from_mapping(request.get_json(silent=True))
    if not form.validate():
        return validation_error(form)

    result = expense_service.add_cash_expense(
        current_user_id(),
        amount=form.amount,
        description=form.description,
        category=form.category,
        session_factory=get_session_factory(),
    )
    return result_response(result, success_status=201)


@bp.post("/credit-card")
@jwt_required()
def add_credit_card_expense():
    form = CreditCardExpenseForm.from_mapping(request.get_json(silent=True))
    if not form.validate():
        return validation_error(form)

    result = expense_service.add_credit_card_expense(
        current_user_id(),
        amount=form.amount,
        description=form.description,
        category=form.category,
        card_name=form.card_name,
        installments=form.installments,
        is_online_transaction=form.is_online_transaction,
        merchant_name=form.merchant_name,
        session_factory=get_session_factory(),
    )
    return result_response(result, success_status=201)


@bp.get("/history/<int:year>/<int:month>")
@jwt_required()
def history(year: int, month: int):
    items = expense_service.get_expense_history(
        current_user_id(),
        year,
        month,
        session_factory=get_session_factory(),
        edit_window_days=_edit_window_days(),
    )
    return jsonify([item.to_dict() for item in items])


@bp.get("/cash/<int:expense_id>")
@jwt_required()
def cash_expense_detail(expense_id: int):
    detail = expense_service.get_cash_expense_detail(
        current_user_id(),
        expense_id,
        session_factory=get_session_factory(),
        edit_window_days=_edit_window_days(),
    )
    return _detail_response(detail)


@bp.put("/cash/<int:expense_id>")
@jwt_required()
def update_cash_expense(expense_id: int):
    form = CashExpenseForm.from_mapping(request.get_json(silent=True))
    if not form.validate():
        return validation_error(form)

    result = expense_service.update_cash_expense(
        current_user_id(),
        expense_id,
        amount=form.amount,
        description=form.description,
        category=form.category,
        session_factory=get_session_factory(),
        edit_window_days=_edit_window_days(),
    )
    return result_response(result)


@bp.delete("/cash/<int:expense_id>")
@jwt_required()
def delete_cash_expense(expense_id: int):
    result = expense_service.delete_cash_expense(
        current_user_id(), expense_id, session_factory=get_session_factory()
    )
    return result_response(result)


@bp.get("/<int:expense_id>")
@jwt_required()
def expense_detail(expense_id: int):
    detail = expense_service.get_expense_detail(
        current_user_id(),
        expense_id,
        _requested_type(),
        session_factory=get_session_factory(),
        edit_window_days=_edit_window_days(),
    )
    return _detail_response(detail)


@bp.put("/<int:expense_id>")
@jwt_required()
def update_expense(expense_id: int):
    form = ExpenseUpdateForm.from_mapping(request.get_json(silent=True))
    if not form.validate(default_type=request.args.get("type")):
        return validation_error(form)

    result = expense_service.update_expense(
        current_user_id(),
        expense_id,
        form.expense_type,
        amount=form.amount,
        description=form.description,
        category=form.category,
        card_name=form.card_name,
        installments=form.installments,
        merchant_name=form.merchant_name,
        is_online_transaction=form.is_online_transaction,
        session_factory=get_session_factory(),
        edit_window_days=_edit_window_days(),
    )
    return result_response(result)


@bp.delete("/<int:expense_id>")
@jwt_required()
def delete_expense(expense_id: int):
    result = expense_service.delete_expense(
        current_user_id(),
        expense_id,
        _requested_type(),
        session_factory=get_session_factory(),
    )
    return result_response(result)
