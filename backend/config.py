"""Runtime configuration, read from the environment."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List, Optional

APP_DIR_NAME = "dynamic-compound"
CONFIG_FILE_NAME = "dynamic-compound-config.json"


def user_data_dir() -> Path:
    """Return the platform's per-user application data directory."""
    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / APP_DIR_NAME


def _split_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Config:
    SETTINGS_PATH = Path(
        os.environ.get("DYNAMIC_COMPOUND_SETTINGS_PATH", user_data_dir() / CONFIG_FILE_NAME)
    )
    LOG_LEVEL = os.environ.get("DYNAMIC_COMPOUND_LOG_LEVEL", "INFO")
    # no file logging unless a directory is given
    LOG_DIR = os.environ.get("DYNAMIC_COMPOUND_LOG_DIR")
    CORS_ORIGINS = _split_origins(os.environ.get("DYNAMIC_COMPOUND_CORS_ORIGINS"))
