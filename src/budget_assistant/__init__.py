"""Budget Assistant API application factory."""

from __future__ import annotations

from importlib import import_module
from typing import Iterable

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from . import cli as _cli
from .config import BaseConfig, DevConfig, ProductionConfig, TestingConfig
from .constants import messages
from .logging_config import get_logger, setup_logging

_CONFIG_MAP = {
    "development": DevConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": BaseConfig,
}

logger = get_logger("app")


def _resolve_config(name: str | None) -> type[BaseConfig]:
    """Return the config class for the provided environment name."""

    if not name:
        return BaseConfig
    return _CONFIG_MAP.get(name.lower(), BaseConfig)


def _blueprint_paths() -> Iterable[str]:
    """Yield blueprint import paths registered on every app."""

    yield "budget_assistant.blueprints.auth"
    yield "budget_assistant.blueprints.expense"
    yield "budget_assistant.blueprints.user"
    yield "budget_assistant.blueprints.health"


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__, instance_relative_config=True)
    config_cls = _resolve_config(config_name)
    config_obj = config_cls()
    app.config.from_object(config_obj)
    app.config["BUDGET_ASSISTANT_CONFIG"] = config_obj
    app.json.ensure_ascii = False  # type: ignore[attr-defined]

    if not app.config.get("TESTING"):
        setup_logging(config_obj)

    # Import extensions lazily so importing the package does not build engines.
    from .extensions import init_cors, init_db, init_jwt

    init_db(app)
    init_jwt(app)
    init_cors(app)
    _register_blueprints(app)
    _register_error_handlers(app)
    _cli.init_app(app)

    logger.info("Application created", extra={"config": config_cls.__name__})
    return app


def _register_blueprints(app: Flask) -> None:
    """Import and register all blueprints declared in `_blueprint_paths`."""

    for dotted_path in _blueprint_paths():
        module = import_module(dotted_path)
        blueprint = getattr(module, "bp")
        app.register_blueprint(blueprint)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return jsonify({"success": False, "message": exc.description}), exc.code

    @app.errorhandler(Exception)
    def _unexpected_error(exc: Exception):
        logger.exception("Unhandled error while processing request")
        return jsonify({"success": False, "message": messages.SERVER_ERROR}), 500


__all__ = ["create_app"]
