"""Database, JWT and CORS wiring for the Flask app."""

from __future__ import annotations

from flask import Flask, current_app, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from .config import BaseConfig
from .constants import messages
from .infra.database import DatabaseEngines, SessionFactory, bootstrap_database
from .logging_config import get_logger

EXTENSION_KEY = "budget_assistant"

jwt = JWTManager()
logger = get_logger("extensions")


def init_db(app: Flask) -> None:
    """Create both engines from the app config and keep them on the app."""

    config: BaseConfig = app.config["BUDGET_ASSISTANT_CONFIG"]
    engines, session_factory = bootstrap_database(config)
    app.extensions[EXTENSION_KEY] = {
        "engines": engines,
        "session_factory": session_factory,
    }


def get_engines() -> DatabaseEngines:
    """Return the engines of the running app."""

    state = current_app.extensions.get(EXTENSION_KEY)
    if state is None:  # pragma: no cover - only reachable with a half-built app
        raise RuntimeError("Database engines not initialized")
    return state["engines"]


def get_session_factory() -> SessionFactory:
    """Return the session factory of the running app."""

    state = current_app.extensions.get(EXTENSION_KEY)
    if state is None:  # pragma: no cover - only reachable with a half-built app
        raise RuntimeError("Database engines not initialized")
    return state["session_factory"]


def _unauthorized(reason: str):
    logger.info("Rejected request token", extra={"reason": reason})
    return jsonify({"success": False, "message": messages.INVALID_IDENTITY}), 401


def init_jwt(app: Flask) -> None:
    """Register JWT verification with JSON 401 responses."""

    jwt.init_app(app)

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return _unauthorized(reason)

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return _unauthorized(reason)

    @jwt.expired_token_loader
    def _expired_token(_jwt_header, _jwt_payload):
        return _unauthorized("token expired")


def init_cors(app: Flask) -> None:
    config: BaseConfig = app.config["BUDGET_ASSISTANT_CONFIG"]
    CORS(
        app,
        resources={r"/api/*": {"origins": config.CORS_ORIGINS}},
        supports_credentials=True,
    )
