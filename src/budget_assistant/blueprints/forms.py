"""Shared form plumbing for the JSON blueprints."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional

MAX_AMOUNT = 9_999_999.99
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class BaseForm:
    """Binds a request mapping as strings, then validates into typed fields.

    Subclasses list the payload keys they read in ``fields`` (camelCase, as
    the client sends them) and implement ``validate``.
    """

    fields: ClassVar[tuple[str, ...]] = ()

    errors: dict[str, list[str]] = field(default_factory=dict, init=False)
    raw_data: dict[str, str] = field(default_factory=dict, init=False)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]):
        """Create a form populated from request data."""

        form = cls()
        form.load(data if isinstance(data, Mapping) else {})
        return form

    def load(self, data: Mapping[str, Any]) -> None:
        self.raw_data = {}
        for key in self.fields:
            value = data.get(key)
            if value is None:
                value_str = ""
            elif isinstance(value, bool):
                value_str = "true" if value else "false"
            elif isinstance(value, str):
                value_str = value
            else:
                value_str = str(value)
            self.raw_data[key] = value_str

    def validate(self) -> bool:  # pragma: no cover - overridden
        raise NotImplementedError

    def _raw(self, key: str) -> str:
        return self.raw_data.get(key, "").strip()

    def _add_error(self, field: str, message: str) -> None:
        """Accumulate validation errors for a specific field."""

        self.errors.setdefault(field, []).append(message)

    def _required_text(
        self, key: str, *, required: str, max_length: int, too_long: str
    ) -> str:
        value = self._raw(key)
        if not value:
            self._add_error(key, required)
        elif len(value) > max_length:
            self._add_error(key, too_long)
        return value

    def _optional_text(self, key: str, *, max_length: int, too_long: str) -> Optional[str]:
        value = self._raw(key)
        if not value:
            return None
        if len(value) > max_length:
            self._add_error(key, too_long)
        return value

    def _amount(self, key: str = "amount") -> Optional[float]:
        raw = self._raw(key)
        if not raw:
            self._add_error(key, "支出金額不能為空")
            return None
        try:
            value = float(raw)
        except ValueError:
            self._add_error(key, "請輸入有效的金額")
            return None
        if not 0.01 <= value <= MAX_AMOUNT:
            self._add_error(key, "支出金額必須在 0.01 到 9,999,999.99 之間")
            return None
        if round(value, 2) != value:
            self._add_error(key, "金額格式不正確，最多只能有兩位小數")
            return None
        return value

    def _int(
        self, key: str, *, low: int, high: int, message: str, default: Optional[int] = None
    ) -> Optional[int]:
        raw = self._raw(key)
        if not raw:
            if default is None:
                self._add_error(key, message)
            return default
        try:
            value = int(raw)
        except ValueError:
            self._add_error(key, message)
            return None
        if not low <= value <= high:
            self._add_error(key, message)
            return None
        return value

    def _bool(self, key: str) -> Optional[bool]:
        raw = self._raw(key).lower()
        if not raw:
            return None
        if raw in _TRUE_VALUES:
            return True
        if raw in _FALSE_VALUES:
            return False
        self._add_error(key, "請輸入 true 或 false")
        return None

    def _email(self, key: str, *, message: str) -> Optional[str]:
        value = self._raw(key)
        if not value:
            return None
        if len(value) > 100:
            self._add_error(key, "電子郵件長度不能超過100個字元")
        elif not _EMAIL_RE.match(value):
            self._add_error(key, message)
        return value
