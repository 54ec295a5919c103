"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

ENV_PREFIX = "BUDGET_ASSISTANT_"
DEFAULT_SECRET_KEY = "replace-me"
DEFAULT_JWT_SECRET_KEY = "dev-budget-assistant-jwt-secret-replace-me-0123456789"
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _env(name: str, default: str | None = None) -> str | None:
    """Read a prefixed environment variable."""

    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = _env(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = _env(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {value!r}") from exc


def _env_list(name: str, default: str) -> list[str]:
    raw = _env(name, default) or ""
    return [item.strip() for item in raw.split(",") if item.strip()]


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "BudgetAssistant"
    USER_DB_FILENAME = "users.db"
    EXPENSE_DB_FILENAME = "expenses.db"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_ALGORITHM = "HS256"
    DEFAULT_DEV_MODE = True

    def __init__(self) -> None:
        self.SECRET_KEY = _env("SECRET_KEY", DEFAULT_SECRET_KEY)
        self.DEV_MODE = _env_bool("DEV_MODE", default=self.DEFAULT_DEV_MODE)
        self.DATA_DIR = self._resolve_data_dir()
        self.USER_DATABASE_URL = _env("USER_DATABASE_URL") or self._sqlite_url(
            self.USER_DB_FILENAME
        )
        self.EXPENSE_DATABASE_URL = _env("EXPENSE_DATABASE_URL") or self._sqlite_url(
            self.EXPENSE_DB_FILENAME
        )

        self.JWT_SECRET_KEY = _env("JWT_SECRET_KEY", DEFAULT_JWT_SECRET_KEY)
        self.JWT_ISSUER = _env("JWT_ISSUER", "BudgetAssistant.Server")
        self.JWT_AUDIENCE = _env("JWT_AUDIENCE", "BudgetAssistant.Client")
        self.JWT_EXPIRES_HOURS = _env_int("JWT_EXPIRES_HOURS", 24)

        self.CORS_ORIGINS = _env_list("CORS_ORIGINS", "http://localhost:4200")
        self.EDIT_WINDOW_DAYS = _env_int("EDIT_WINDOW_DAYS", 30)
        self.LOG_LEVEL = (_env("LOG_LEVEL", "INFO") or "INFO").strip().upper()

        self._validate()

    def _validate(self) -> None:
        """Reject settings the API cannot run with."""

        for name in ("JWT_SECRET_KEY", "JWT_ISSUER", "JWT_AUDIENCE"):
            value = getattr(self, name)
            if not value or not value.strip():
                raise ValueError(f"{ENV_PREFIX}{name} cannot be empty.")
        if self.LOG_LEVEL not in _LOG_LEVELS:
            raise ValueError(f"{ENV_PREFIX}LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}.")
        if self.JWT_EXPIRES_HOURS <= 0:
            raise ValueError(f"{ENV_PREFIX}JWT_EXPIRES_HOURS must be positive.")
        if not self.DEV_MODE:
            if self.SECRET_KEY == DEFAULT_SECRET_KEY:
                raise ValueError(f"{ENV_PREFIX}SECRET_KEY must be set in non-dev mode.")
            if self.JWT_SECRET_KEY == DEFAULT_JWT_SECRET_KEY:
                raise ValueError(f"{ENV_PREFIX}JWT_SECRET_KEY must be set in non-dev mode.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite files and logs live."""

        data_root = _env("DATA_DIR", "instance") or "instance"
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _sqlite_url(self, filename: str) -> str:
        return f"sqlite:///{self.DATA_DIR / filename}"

    # Flask-JWT-Extended reads these keys straight from app.config.
    @property
    def JWT_ACCESS_TOKEN_EXPIRES(self) -> timedelta:
        return timedelta(hours=self.JWT_EXPIRES_HOURS)

    @property
    def JWT_ENCODE_ISSUER(self) -> str:
        return self.JWT_ISSUER

    @property
    def JWT_DECODE_ISSUER(self) -> str:
        return self.JWT_ISSUER

    @property
    def JWT_ENCODE_AUDIENCE(self) -> str:
        return self.JWT_AUDIENCE

    @property
    def JWT_DECODE_AUDIENCE(self) -> str:
        return self.JWT_AUDIENCE

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        # Seconds a writer waits on a locked SQLite file.
        connect_args: dict[str, Any] = {"check_same_thread": False, "timeout": 30}
        return {"connect_args": connect_args}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestingConfig(BaseConfig):
    """Configuration used by the pytest suite."""

    DEBUG = False
    TESTING = True


class ProductionConfig(BaseConfig):
    """Production configuration; requires real secrets."""

    DEBUG = False
    TESTING = False
    DEFAULT_DEV_MODE = False
