"""Expense and budget payload validation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ...constants.expense_types import ExpenseType
from ..forms import BaseForm

MIN_BUDGET_YEAR = 2020
MAX_BUDGET_YEAR = 2050


@dataclass
class CashExpenseForm(BaseForm):
    """Amount, description and an optional category."""

    fields = ("amount", "description", "category")

    amount: Optional[float] = None
    description: str = ""
    category: Optional[str] = None

    def validate(self) -> bool:
        self.errors.clear()
        self._validate_common()
        return not self.errors

    def _validate_common(self) -> None:
        self.amount = self._amount()
        self.description = self._required_text(
            "description",
            required="支出描述不能為空",
            max_length=200,
            too_long="支出描述不能超過 200 個字元",
        )
        self.category = self._optional_text(
            "category", max_length=50, too_long="支出類別不能超過 50 個字元"
        )


@dataclass
class CreditCardExpenseForm(CashExpenseForm):
    fields = (
        "amount",
        "description",
        "category",
        "cardName",
        "installments",
        "isOnlineTransaction",
        "merchantName",
    )

    card_name: Optional[str] = None
    installments: int = 1
    is_online_transaction: bool = False
    merchant_name: Optional[str] = None

    def validate(self) -> bool:
        self.errors.clear()
        self._validate_common()
        self.card_name = self._optional_text(
            "cardName", max_length=100, too_long="信用卡名稱不能超過 100 個字元"
        )
        self.installments = (
            self._int(
                "installments",
                low=1,
                high=60,
                message="分期期數必須在 1 到 60 之間",
                default=1,
            )
            or 1
        )
        self.is_online_transaction = bool(self._bool("isOnlineTransaction"))
        self.merchant_name = self._optional_text(
            "merchantName", max_length=200, too_long="商店名稱不能超過 200 個字元"
        )
        return not self.errors


@dataclass
class ExpenseUpdateForm(CashExpenseForm):
    """Edit payload for either expense type.

    The type comes from the ``expenseType`` body field; routes may pass a
    fallback taken from the query string.
    """

    fields = (
        "amount",
        "description",
        "category",
        "expenseType",
        "cardName",
        "installments",
        "isOnlineTransaction",
        "merchantName",
    )

    expense_type: Optional[ExpenseType] = None
    card_name: Optional[str] = None
    installments: Optional[int] = None
    is_online_transaction: Optional[bool] = None
    merchant_name: Optional[str] = None

    def validate(self, default_type: Optional[str] = None) -> bool:
        self.errors.clear()
        self._validate_common()

        raw_type = self._raw("expenseType") or (default_type or "").strip()
        self.expense_type = None
        if not raw_type:
            self._add_error("expenseType", "支出類型不能為空")
        else:
            self.expense_type = ExpenseType.parse(raw_type)
            if self.expense_type is None:
                self._add_error("expenseType", "支出類型必須是 Cash 或 CreditCard")

        self.card_name = self._optional_text(
            "cardName", max_length=100, too_long="信用卡名稱不能超過 100 個字元"
        )
        self.installments = None
        if self._raw("installments"):
            self.installments = self._int(
                "installments", low=1, high=60, message="分期期數必須在 1 到 60 之間"
            )
        self.is_online_transaction = self._bool("isOnlineTransaction")
        self.merchant_name = self._optional_text(
            "merchantName", max_length=200, too_long="商店名稱不能超過 200 個字元"
        )
        return not self.errors


@dataclass
class BudgetForm(BaseForm):
    fields = ("amount", "year", "month")

    amount: Optional[float] = None
    year: Optional[int] = None
    month: Optional[int] = None

    def validate(self) -> bool:
        self.errors.clear()

        raw_amount = self._raw("amount")
        self.amount = None
        try:
            amount = float(raw_amount)
        except ValueError:
            self._add_error("amount", "預算金額必須大於 0")
        else:
            if not math.isfinite(amount) or amount < 0.01:
                self._add_error("amount", "預算金額必須大於 0")
            else:
                self.amount = amount

        self.year = self._int(
            "year",
            low=MIN_BUDGET_YEAR,
            high=MAX_BUDGET_YEAR,
            message="年份必須在 2020-2050 之間",
        )
        self.month = self._int("month", low=1, high=12, message="月份必須在 1-12 之間")
        return not self.errors
