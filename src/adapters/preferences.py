"""Preference store adapters.

Durable per-user UI preferences (mute state). No cross-tab or cross-process
synchronization; last write wins.
"""

import json
import os
from pathlib import Path


class InMemoryPreferenceStore:
    """In-memory preference storage - suitable for tests and single sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def clear(self) -> None:
        """Clear all preferences - useful for testing."""
        self._values.clear()


class JsonFilePreferenceStore:
    """Preferences persisted as a single JSON object on disk."""

    def __init__(self, path: str):
        self.path = Path(path).resolve()
        if not self.path.parent.exists():
            os.makedirs(self.path.parent, exist_ok=True)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        return {str(k): str(v) for k, v in data.items()}

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        tmp = self.path.with_suffix(".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
        os.replace(tmp, self.path)
