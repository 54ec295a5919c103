"""Budget and expense blueprint package."""

from __future__ import annotations

from flask import Blueprint

bp = Blueprint("expense", __name__, url_prefix="/api/expense")

from . import routes  # noqa: E402,F401 - ensure routes get registered

__all__ = ["bp"]
