from __future__ import annotations

import base64
from typing import Generator

import pytest
from flask import Flask
from flask.testing import FlaskClient

from pastebox import create_app
from pastebox.db import close_db


@pytest.fixture
def app(tmp_path) -> Generator[Flask, None, None]:
    """Application backed by a throwaway SQLite file."""

    app = create_app(
        "testing",
        overrides={"SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'pastes.db'}"},
    )
    try:
        yield app
    finally:
        close_db()


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    return app.test_client()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    token = base64.b64encode(b"admin:changeme").decode("ascii")
    return {"Authorization": f"Basic {token}"}
