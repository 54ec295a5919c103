"""Liveness and readiness routes."""

from __future__ import annotations

from flask import Response, jsonify

from ...extensions import get_engines
from ...services.health import default_checks, run_health_checks
from . import bp


def _status_code(report) -> int:
    return 200 if report.is_available else 503


@bp.get("")
def health():
    report = run_health_checks(default_checks(get_engines()))
    return Response(report.status, status=_status_code(report), mimetype="text/plain")


@bp.get("/detailed")
def detailed():
    report = run_health_checks(default_checks(get_engines()))
    response = jsonify(report.to_dict())
    response.headers["Cache-Control"] = "no-store"
    return response, _status_code(report)


@bp.get("/database")
def database():
    report = run_health_checks(default_checks(get_engines()), tag="database")
    return jsonify(report.to_dict()), _status_code(report)
