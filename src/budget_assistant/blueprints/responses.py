"""JSON response helpers shared by the blueprints."""

from __future__ import annotations

from typing import Any

from flask import jsonify

from ..constants import messages
from ..services.results import CONFLICT, NOT_FOUND
from .forms import BaseForm

_STATUS_BY_KIND = {NOT_FOUND: 404, CONFLICT: 409}


def status_for(result: Any, success_status: int = 200) -> int:
    """HTTP status for a service result object."""

    if result.success:
        return success_status
    return _STATUS_BY_KIND.get(result.kind, 400)


def result_response(result: Any, success_status: int = 200):
    return jsonify(result.to_dict()), status_for(result, success_status)


def validation_error(form: BaseForm):
    return (
        jsonify(
            {
                "success": False,
                "message": messages.VALIDATION_FAILED,
                "errors": form.errors,
            }
        ),
        400,
    )


def message_response(message: str, status: int):
    return jsonify({"success": False, "message": message}), status
