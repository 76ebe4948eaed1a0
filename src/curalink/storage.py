"""Key-value stores backing user preferences and per-session state.

Both stores hold JSON-encoded strings keyed by name, mirroring the browser's
local/session storage. Writes overwrite the whole value; there is no locking, so
two processes sharing a data directory resolve conflicts as last write wins.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Protocol

LOGGER = logging.getLogger("curalink.storage")


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def clear(self) -> None: ...


class InMemoryStore:
    """Dict-backed store; used for tests and for sessions that should not outlive the process."""

    def __init__(self, initial: Dict[str, str] | None = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


class JsonFileStore:
    """Store persisted as a single JSON object on disk.

    The file is re-read on every access so that another process writing the same
    file is picked up; a missing or unreadable file reads as empty.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.warning("Ignoring unreadable store %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            LOGGER.warning("Ignoring store %s: expected a JSON object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _dump(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._dump(data)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


def read_json(store: KeyValueStore, key: str, default: Any = None) -> Any:
    """Decode the JSON value under ``key``; absent or corrupt values yield ``default``."""
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        LOGGER.warning("Discarding corrupt value under %r", key)
        return default


def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value))
