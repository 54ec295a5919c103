"""User-facing response messages.

The client renders these strings verbatim, so they stay in Traditional Chinese.
"""

# Generic
SERVER_ERROR = "系統暫時無法處理請求"
VALIDATION_FAILED = "輸入資料驗證失敗"
INVALID_IDENTITY = "無效的使用者身份"
USER_NOT_FOUND = "找不到使用者"
CONCURRENT_MODIFICATION = "資料已被其他請求修改，請重新整理後再試"

# Auth
LOGIN_SUCCESS = "登入成功"
LOGIN_INVALID_CREDENTIALS = "帳號或密碼錯誤"
LOGIN_INACTIVE = "帳號已停用"
REGISTER_SUCCESS = "註冊成功"
USERNAME_TAKEN = "此帳號已存在"
EMAIL_TAKEN_ON_REGISTER = "此信箱已被使用"

# Profile
PROFILE_UPDATED = "個人資料更新成功"
EMAIL_TAKEN = "此電子郵件已被使用"
PASSWORD_CHANGED = "密碼變更成功"
CURRENT_PASSWORD_INCORRECT = "目前密碼不正確"
PASSWORD_CONFIRM_MISMATCH = "新密碼與確認密碼不符"
PASSWORD_UNCHANGED = "新密碼不能與目前密碼相同"

# Budget / expenses
BUDGET_REQUIRED = "請先設定當月預算"
BUDGET_CREATED = "預算設定成功"
BUDGET_UPDATED = "預算更新成功"
EXPENSE_ADDED = "支出記錄新增成功"
CREDIT_CARD_EXPENSE_ADDED = "信用卡支出記錄新增成功"
EXPENSE_UPDATED = "支出記錄更新成功"
EXPENSE_DELETED = "支出記錄已刪除，金額已退還至預算"
CREDIT_CARD_EXPENSE_DELETED = "信用卡支出記錄已刪除"
EXPENSE_NOT_FOUND = "找不到指定的支出記錄"
EDIT_WINDOW_EXPIRED = "該支出記錄已超過可編輯期限"
DELETE_WINDOW_EXPIRED = "該支出記錄已超過可刪除期限"


def insufficient_balance(remaining: float) -> str:
    """Message for a cash expense that exceeds the remaining budget."""

    return f"餘額不足，目前剩餘 NT${remaining:,.2f}"
