from __future__ import annotations

import logging
import secrets
from functools import wraps
from http import HTTPStatus
from typing import Any, Callable, TypeVar

from flask import Flask, current_app, jsonify, request

from pastebox.observability import get_correlation_id
from pastebox.services.helpers import hash_password, verify_password


logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

_PASSWORD_HASH_KEY = "AUTH_PASS_HASH"


def init_auth(app: Flask) -> None:
    """
    Hash the configured admin password once so requests only verify.

    Logs a warning when the shipped default credentials are still in use.
    """

    app.config[_PASSWORD_HASH_KEY] = hash_password(
        app.config["AUTH_PASS"],
        rounds=app.config.get("BCRYPT_ROUNDS", 12),
    )
    if app.config["AUTH_PASS"] == "changeme" and not app.config.get("TESTING"):
        logger.warning(
            "Admin password is the default; set AUTH_USER and AUTH_PASS",
            extra={"event": "auth_default_credentials"},
        )


def check_credentials(username: str | None, password: str | None) -> bool:
    if username is None or password is None:
        return False
    config = current_app.config
    user_ok = secrets.compare_digest(
        username.encode("utf-8"), config["AUTH_USER"].encode("utf-8")
    )
    # Always run bcrypt so a wrong username costs the same as a wrong password.
    password_ok = verify_password(password, config[_PASSWORD_HASH_KEY])
    return user_ok and password_ok


def _challenge():
    realm = current_app.config.get("ADMIN_REALM", "Admin Area")
    response = jsonify({"error": "Unauthorized"})
    response.status_code = HTTPStatus.UNAUTHORIZED
    response.headers["WWW-Authenticate"] = f'Basic realm="{realm}"'
    return response


def require_admin(view: F) -> F:
    """Reject the request with a Basic challenge unless admin credentials match."""

    @wraps(view)
    def wrapper(*args: Any, **kwargs: Any):
        auth = request.authorization
        if auth is None or auth.type != "basic" or not check_credentials(
            auth.username, auth.password
        ):
            logger.info(
                "Admin authentication failed",
                extra={
                    "event": "auth_failed",
                    "correlation_id": get_correlation_id(),
                },
            )
            return _challenge()
        return view(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
