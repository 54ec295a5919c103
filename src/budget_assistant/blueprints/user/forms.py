"""Profile and password payload validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..forms import BaseForm


@dataclass
class ProfileForm(BaseForm):
    fields = ("displayName", "email")

    display_name: str = ""
    email: Optional[str] = None

    def validate(self) -> bool:
        self.errors.clear()
        self.display_name = self._raw("displayName")
        if not self.display_name:
            self._add_error("displayName", "顯示名稱不能為空")
        elif len(self.display_name) < 2:
            self._add_error("displayName", "顯示名稱至少需要2個字元")
        elif len(self.display_name) > 50:
            self._add_error("displayName", "顯示名稱不能超過50個字元")

        self.email = self._email("email", message="請輸入有效的電子郵件地址")
        return not self.errors


@dataclass
class ChangePasswordForm(BaseForm):
    fields = ("currentPassword", "newPassword", "confirmPassword")

    current_password: str = ""
    new_password: str = ""
    confirm_password: str = ""

    def validate(self) -> bool:
        self.errors.clear()
        self.current_password = self.raw_data.get("currentPassword", "")
        self.new_password = self.raw_data.get("newPassword", "")
        self.confirm_password = self.raw_data.get("confirmPassword", "")

        if not self.current_password:
            self._add_error("currentPassword", "目前密碼不能為空")
        if not self.new_password:
            self._add_error("newPassword", "新密碼不能為空")
        elif len(self.new_password) < 6:
            self._add_error("newPassword", "新密碼至少需要6個字元")
        elif len(self.new_password) > 50:
            self._add_error("newPassword", "新密碼不能超過50個字元")
        if not self.confirm_password:
            self._add_error("confirmPassword", "確認密碼不能為空")
        return not self.errors
