"""Authentication routes."""

from __future__ import annotations

from flask import jsonify, request

from ...extensions import get_session_factory
from ...services import auth as auth_service
from ..responses import result_response, validation_error
from . import bp
from .forms import LoginForm, RegisterForm


@bp.post("/login")
def login():
    form = LoginForm.from_mapping(request.get_json(silent=True))
    if not form.validate():
        return validation_error(form)

    result = auth_service.login(
        username=form.username,
        password=form.password,
        session_factory=get_session_factory(),
    )
    return result_response(result)


@bp.post("/register")
def register():
    form = RegisterForm.from_mapping(request.get_json(silent=True))
    if not form.validate():
        return validation_error(form)

    result = auth_service.register(
        username=form.username,
        password=form.password,
        email=form.email,
        display_name=form.display_name,
        session_factory=get_session_factory(),
    )
    return result_response(result, success_status=201)


@bp.get("/check-username/<username>")
def check_username(username: str):
    exists = auth_service.username_exists(username, session_factory=get_session_factory())
    return jsonify({"available": not exists})
