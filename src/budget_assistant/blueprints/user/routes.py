"""User profile routes."""

from __future__ import annotations

from flask import jsonify, request
from flask_jwt_extended import jwt_required

from ...constants import messages
from ...extensions import get_session_factory
from ...security import current_user_id
from ...services import auth as auth_service
from ..responses import message_response, result_response, validation_error
from . import bp
from .forms import ChangePasswordForm, ProfileForm


@bp.get("/profile")
@jwt_required()
def get_profile():
    user = auth_service.get_profile(current_user_id(), session_factory=get_session_factory())
    if user is None:
        return message_response(messages.USER_NOT_FOUND, 404)
    return jsonify(auth_service.profile_payload(user))


@bp.put("/profile")
@jwt_required()
def update_profile():
    form = ProfileForm.from_mapping(request.get_json(silent=True))
    if not form.validate():
        return validation_error(form)

    result = auth_service.update_profile(
        current_user_id(),
        display_name=form.display_name,
        email=form.email,
        session_factory=get_session_factory(),
    )
    return result_response(result)


@bp.put("/change-password")
@jwt_required()
def change_password():
    form = ChangePasswordForm.from_mapping(request.get_json(silent=True))
    if not form.validate():
        return validation_error(form)

    result = auth_service.change_password(
        current_user_id(),
        current_password=form.current_password,
        new_password=form.new_password,
        confirm_password=form.confirm_password,
        session_factory=get_session_factory(),
    )
    return result_response(result)


@bp.get("/statistics")
@jwt_required()
def statistics():
    stats = auth_service.account_statistics(
        current_user_id(), session_factory=get_session_factory()
    )
    if stats is None:
        return message_response(messages.USER_NOT_FOUND, 404)
    return jsonify(stats.to_dict())


@bp.get("/check-username/<username>")
def check_username(username: str):
    exists = auth_service.username_exists(username, session_factory=get_session_factory())
    return jsonify({"available": not exists})


@bp.get("/check-email/<email>")
def check_email(email: str):
    exists = auth_service.email_exists(email, session_factory=get_session_factory())
    return jsonify({"available": not exists})
