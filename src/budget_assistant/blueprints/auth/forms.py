"""Login and registration payload validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..forms import BaseForm

MIN_PASSWORD_LENGTH = 6


@dataclass
class LoginForm(BaseForm):
    fields = ("username", "password")

    username: str = ""
    password: str = ""

    def validate(self) -> bool:
        self.errors.clear()
        self.username = self._required_text(
            "username",
            required="帳號不能為空",
            max_length=50,
            too_long="帳號長度不能超過50個字元",
        )
        self.password = self.raw_data.get("password", "")
        if not self.password:
            self._add_error("password", "密碼不能為空")
        elif len(self.password) < MIN_PASSWORD_LENGTH:
            self._add_error("password", "密碼長度至少需要6個字元")
        return not self.errors


@dataclass
class RegisterForm(BaseForm):
    """Registration input; email and display name are optional."""

    fields = ("username", "password", "confirmPassword", "email", "displayName")

    username: str = ""
    password: str = ""
    email: Optional[str] = None
    display_name: Optional[str] = None

    def validate(self) -> bool:
        self.errors.clear()
        self.username = self._required_text(
            "username",
            required="帳號不能為空",
            max_length=50,
            too_long="帳號長度不能超過50個字元",
        )

        self.password = self.raw_data.get("password", "")
        if not self.password:
            self._add_error("password", "密碼不能為空")
        elif len(self.password) < MIN_PASSWORD_LENGTH:
            self._add_error("password", "密碼長度至少需要6個字元")

        confirm = self.raw_data.get("confirmPassword", "")
        if not confirm:
            self._add_error("confirmPassword", "確認密碼不能為空")
        elif confirm != self.password:
            self._add_error("confirmPassword", "密碼與確認密碼不符")

        self.email = self._email("email", message="請輸入有效的電子信箱")
        self.display_name = self._optional_text(
            "displayName", max_length=100, too_long="顯示名稱不能超過100個字元"
        )
        return not self.errors
