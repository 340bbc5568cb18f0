"""Application factory and app-wide configuration."""

#setup: python -m venv .venv
#setup: source .venv/bin/activate   # (windows: .venv\Scripts\activate)
#setup: pip install -U pip -e ".[test]"
#setup: flask --app backend.app run --port 5000 --debug

from typing import Any, Mapping, Optional

from flask import Flask
from flask_cors import CORS

from backend.app.api.routes import api_bp
from backend.config import Config
from backend.core.settings_store import SettingsStore
from backend.logger import setup_logger


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """Build the Flask app instance."""
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    logger = setup_logger(
        "backend",
        level=app.config["LOG_LEVEL"],
        log_dir=app.config.get("LOG_DIR"),
    )

    CORS(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        supports_credentials=True,
    )

    app.extensions["settings_store"] = SettingsStore(app.config["SETTINGS_PATH"])
    app.register_blueprint(api_bp, url_prefix="/api")

    logger.info("Settings stored at %s", app.config["SETTINGS_PATH"])
    return app
