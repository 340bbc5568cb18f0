from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, List, Union

from pydantic import BaseModel, ValidationError

from backend.core.scenarios import default_scenarios, ensure_scenarios
from backend.models import Scenario

logger = logging.getLogger(__name__)


class StoredConfig(BaseModel):
    scenarios: List[Scenario] = []


class SettingsStore:
    """
    Persists the scenario list as a JSON document on disk.

    Writes go to a sibling temp file that replaces the document in one step,
    so a concurrent read sees either the old list or the new one.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.RLock()

    def read(self) -> StoredConfig:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return StoredConfig(scenarios=default_scenarios())
        except (OSError, UnicodeDecodeError):
            logger.exception("Failed to read persisted settings from %s", self.path)
            return StoredConfig(scenarios=default_scenarios())

        try:
            stored = StoredConfig.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.error("Ignoring invalid settings file %s: %s", self.path, exc)
            return StoredConfig(scenarios=default_scenarios())

        return StoredConfig(scenarios=ensure_scenarios(stored.scenarios))

    def write(self, config: StoredConfig) -> StoredConfig:
        document = json.dumps(config.model_dump(), indent=2, ensure_ascii=False)
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(document)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        logger.debug("Saved %d scenarios to %s", len(config.scenarios), self.path)
        return config

    def save_scenarios(self, scenarios: List[Scenario]) -> StoredConfig:
        return self.write(StoredConfig(scenarios=scenarios))

    def update(self, change: Callable[[List[Scenario]], List[Scenario]]) -> StoredConfig:
        """Read, change and save the scenario list without interleaving other writers."""
        with self._lock:
            return self.save_scenarios(change(self.read().scenarios))
