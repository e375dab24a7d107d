from __future__ import annotations

import os
from typing import Any, Mapping

from flask import Flask
from flask_cors import CORS

from .api.admin import admin_bp, api_bp
from .api.public import public_bp
from .auth import init_auth
from .config import get_config
from .db import init_db
from .observability import init_observability


def create_app(
    env_name: str | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Flask:
    """
    Application factory for the pastebin service.

    The configuration is selected based on the provided ``env_name`` or,
    if not given, the ``APP_ENV`` environment variable (falling back to
    ``development``). ``overrides`` are applied on top of the selected
    config class.
    """
    if env_name is None:
        env_name = os.getenv("APP_ENV", "development")

    # Static assets are served by the admin blueprint behind the auth gate.
    app = Flask(__name__, static_folder=None)
    app_config = get_config(env_name)
    app.config.from_object(app_config)
    if overrides:
        app.config.update(overrides)

    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    # Initialize infrastructure layers
    init_observability(app)
    init_db(app)
    init_auth(app)

    # Admin routes first; the public "/<paste_id>" route is a catch-all.
    app.register_blueprint(api_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(public_bp)

    return app
