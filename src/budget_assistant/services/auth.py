"""Authentication, profile and account services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from sqlalchemy.exc import IntegrityError

from ..constants import messages
from ..infra.database import SessionFactory
from ..infra.repositories import (
    SQLModelBudgetRepository,
    SQLModelCashExpenseRepository,
    SQLModelCreditCardExpenseRepository,
    SQLModelUserRepository,
)
from ..logging_config import get_logger
from ..models.types import utcnow
from ..models.user import User
from ..security import issue_access_token
from .results import NOT_FOUND, REJECTED

logger = get_logger("services.auth")

_hasher = PasswordHasher()

TokenIssuer = Callable[[User], tuple[str, datetime]]


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _verify_password(password_hash: str, password: str) -> bool:
    try:
        return _hasher.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHash, VerificationError):
        return False


def _clean_email(email: Optional[str]) -> Optional[str]:
    if email is None:
        return None
    email = email.strip()
    return email or None


@dataclass
class AuthResult:
    """Outcome of a login or registration attempt."""

    success: bool
    message: str
    token: Optional[str] = None
    user_id: Optional[str] = None
    username: Optional[str] = None
    expires_at: Optional[datetime] = None
    kind: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "token": self.token,
            "userId": self.user_id,
            "username": self.username,
            "expiresAt": _isoformat(self.expires_at),
        }


@dataclass
class ProfileResult:
    """Outcome of a profile or password change."""

    success: bool
    message: str
    user: Optional[User] = None
    kind: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.user is not None:
            payload["user"] = {
                "id": self.user.id,
                "username": self.user.username,
                "displayName": self.user.display_name,
                "email": self.user.email,
            }
        return payload


@dataclass(frozen=True)
class AccountStatistics:
    registration_date: datetime
    last_login_date: Optional[datetime]
    total_expense_records: int
    total_budgets: int
    total_cash_expenses: float
    total_credit_card_expenses: float
    average_monthly_expense: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "registrationDate": _isoformat(self.registration_date),
            "lastLoginDate": _isoformat(self.last_login_date),
            "totalExpenseRecords": self.total_expense_records,
            "totalBudgets": self.total_budgets,
            "totalCashExpenses": self.total_cash_expenses,
            "totalCreditCardExpenses": self.total_credit_card_expenses,
            "averageMonthlyExpense": self.average_monthly_expense,
        }


def profile_payload(user: User) -> dict[str, Any]:
    """Public view of a user's profile."""

    return {
        "id": user.id,
        "username": user.username,
        "displayName": user.display_name,
        "email": user.email,
        "createdDate": _isoformat(user.created_at),
        "lastLoginDate": _isoformat(user.last_login_at),
    }


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def register(
    *,
    username: str,
    password: str,
    email: Optional[str] = None,
    display_name: Optional[str] = None,
    session_factory: SessionFactory,
) -> AuthResult:
    """Create a user; the username and email must be unused."""

    username = username.strip()
    email = _clean_email(email)
    display_name = (display_name or "").strip() or username

    try:
        with session_factory() as session:
            users = SQLModelUserRepository(session)
            if users.username_exists(username):
                return AuthResult(False, messages.USERNAME_TAKEN, kind=REJECTED)
            if email and users.email_exists(email):
                return AuthResult(False, messages.EMAIL_TAKEN_ON_REGISTER, kind=REJECTED)

            user = users.add(
                User(
                    username=username,
                    password_hash=hash_password(password),
                    email=email,
                    display_name=display_name,
                )
            )
            user_id, stored_username = user.id, user.username
    except IntegrityError as exc:
        # A concurrent registration claimed the username or email first.
        logger.warning("Registration lost a uniqueness race", extra={"username": username})
        if email and "email" in str(exc.orig).lower():
            return AuthResult(False, messages.EMAIL_TAKEN_ON_REGISTER, kind=REJECTED)
        return AuthResult(False, messages.USERNAME_TAKEN, kind=REJECTED)

    logger.info("User registered", extra={"user_id": user_id, "username": stored_username})
    return AuthResult(
        True, messages.REGISTER_SUCCESS, user_id=user_id, username=stored_username
    )


def login(
    *,
    username: str,
    password: str,
    session_factory: SessionFactory,
    issue_token: TokenIssuer = issue_access_token,
) -> AuthResult:
    """Check credentials and issue an access token."""

    username = username.strip()
    with session_factory() as session:
        users = SQLModelUserRepository(session)
        user = users.get_by_username(username) if username else None
        if user is None or not _verify_password(user.password_hash, password):
            logger.warning("Login failed", extra={"username": username})
            return AuthResult(False, messages.LOGIN_INVALID_CREDENTIALS, kind=REJECTED)
        if not user.is_active:
            logger.warning("Login refused for inactive user", extra={"user_id": user.id})
            return AuthResult(False, messages.LOGIN_INACTIVE, kind=REJECTED)

        user.last_login_at = utcnow()
        users.save(user)
        token, expires_at = issue_token(user)
        result = AuthResult(
            True,
            messages.LOGIN_SUCCESS,
            token=token,
            user_id=user.id,
            username=user.username,
            expires_at=expires_at,
        )

    logger.info("User logged in", extra={"user_id": result.user_id})
    return result


def username_exists(username: str, *, session_factory: SessionFactory) -> bool:
    with session_factory() as session:
        return SQLModelUserRepository(session).username_exists(username.strip())


def email_exists(email: str, *, session_factory: SessionFactory) -> bool:
    with session_factory() as session:
        return SQLModelUserRepository(session).email_exists(email.strip())


def get_profile(user_id: str, *, session_factory: SessionFactory) -> Optional[User]:
    """Fetch a user by id."""
    with session_factory() as session:
        user = SQLModelUserRepository(session).get_by_id(user_id)
        if user:
            session.expunge(user)
        return user


def update_profile(
    user_id: str,
    *,
    display_name: str,
    email: Optional[str] = None,
    session_factory: SessionFactory,
) -> ProfileResult:
    """Change the display name and email; the email must not belong to anyone else."""

    email = _clean_email(email)
    with session_factory() as session:
        users = SQLModelUserRepository(session)
        user = users.get_by_id(user_id)
        if user is None:
            return ProfileResult(False, messages.USER_NOT_FOUND, kind=NOT_FOUND)
        if email and email != user.email and users.email_exists(email, exclude_user_id=user.id):
            return ProfileResult(False, messages.EMAIL_TAKEN, kind=REJECTED)

        user.display_name = display_name.strip() or user.display_name
        user.email = email
        users.save(user)
        session.expunge(user)

    logger.info("Profile updated", extra={"user_id": user_id})
    return ProfileResult(True, messages.PROFILE_UPDATED, user=user)


def change_password(
    user_id: str,
    *,
    current_password: str,
    new_password: str,
    confirm_password: str,
    session_factory: SessionFactory,
) -> ProfileResult:
    """Replace the password after verifying the current one."""

    with session_factory() as session:
        users = SQLModelUserRepository(session)
        user = users.get_by_id(user_id)
        if user is None:
            return ProfileResult(False, messages.USER_NOT_FOUND, kind=NOT_FOUND)
        if not _verify_password(user.password_hash, current_password):
            return ProfileResult(False, messages.CURRENT_PASSWORD_INCORRECT, kind=REJECTED)
        if new_password != confirm_password:
            return ProfileResult(False, messages.PASSWORD_CONFIRM_MISMATCH, kind=REJECTED)
        if _verify_password(user.password_hash, new_password):
            return ProfileResult(False, messages.PASSWORD_UNCHANGED, kind=REJECTED)

        user.password_hash = hash_password(new_password)
        users.save(user)

    logger.info("Password changed", extra={"user_id": user_id})
    return ProfileResult(True, messages.PASSWORD_CHANGED)


def account_statistics(
    user_id: str, *, session_factory: SessionFactory
) -> Optional[AccountStatistics]:
    """Summarise a user's records across both databases.

    The monthly average spreads cash and card spending over every period that
    has a budget or at least one expense.
    """

    with session_factory() as session:
        user = SQLModelUserRepository(session).get_by_id(user_id)
        if user is None:
            return None
        budgets = SQLModelBudgetRepository(session).list_all(user_id=user_id)
        cash = SQLModelCashExpenseRepository(session)
        cards = SQLModelCreditCardExpenseRepository(session)

        cash_total = cash.total(user_id=user_id)
        card_total = cards.total(user_id=user_id)
        periods = {(budget.year, budget.month) for budget in budgets}
        periods.update(cash.monthly_totals(user_id=user_id))
        periods.update(cards.monthly_totals(user_id=user_id))
        average = round((cash_total + card_total) / len(periods), 2) if periods else 0.0

        return AccountStatistics(
            registration_date=user.created_at,
            last_login_date=user.last_login_at,
            total_expense_records=cash.count(user_id=user_id) + cards.count(user_id=user_id),
            total_budgets=len(budgets),
            total_cash_expenses=cash_total,
            total_credit_card_expenses=card_total,
            average_monthly_expense=average,
        )
