from __future__ import annotations

import pytest
from flask import Flask
from flask.testing import FlaskClient

from backend.app import create_app


@pytest.fixture()
def app(tmp_path) -> Flask:
    return create_app(
        {
            "TESTING": True,
            "SETTINGS_PATH": tmp_path / "settings" / "dynamic-compound-config.json",
        }
    )


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    with app.test_client() as test_client:
        yield test_client
