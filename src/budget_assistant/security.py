"""Access-token helpers built on Flask-JWT-Extended."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from flask import current_app
from flask_jwt_extended import create_access_token, decode_token, get_jwt_identity
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from .logging_config import get_logger
from .models.user import User

logger = get_logger("security")

NAME_CLAIM = "name"
DISPLAY_NAME_CLAIM = "display_name"


def issue_access_token(user: User) -> tuple[str, datetime]:
    """Sign a token for ``user`` and return it with its UTC expiry."""

    expires_delta = current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    expires_at = datetime.now(timezone.utc) + expires_delta
    token = create_access_token(
        identity=user.id,
        additional_claims={
            NAME_CLAIM: user.username,
            DISPLAY_NAME_CLAIM: user.display_name,
        },
        expires_delta=expires_delta,
    )
    return token, expires_at


def validate_token(token: str) -> bool:
    """Return True when signature, issuer, audience and expiry all check out."""

    if not token:
        return False
    try:
        decode_token(token)
    except (PyJWTError, JWTExtendedException) as exc:
        logger.info("Token rejected", extra={"reason": type(exc).__name__})
        return False
    return True


def current_user_id() -> Optional[str]:
    """Identity of the verified request; call only inside ``jwt_required`` views."""

    identity = get_jwt_identity()
    return str(identity) if identity else None
