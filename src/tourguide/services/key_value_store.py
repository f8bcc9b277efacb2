"""Key-value storage backends for tour persistence.

Tour completion, resumable progress and feature flags live behind the small
``KeyValueStore`` protocol so tests can use ``InMemoryKeyValueStore`` while the
application binds ``JsonFileKeyValueStore`` (a single JSON document in the data
directory).

File backend rules:
 - Missing file -> empty store.
 - Corrupt file -> empty store plus a logged warning (never raises on load).
 - Writes go to ``<name>.tmp`` first and are swapped in with ``Path.replace``.
 - Read-modify-write is not synchronised across processes; two application
   instances may overwrite each other's last write.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Protocol, runtime_checkable

from tourguide.config.settings import STATE_FILENAME

__all__ = ["KeyValueStore", "InMemoryKeyValueStore", "JsonFileKeyValueStore"]

_log = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> Iterable[str]: ...


class InMemoryKeyValueStore:
    """Dict-backed store used in tests and headless sessions."""

    def __init__(self, initial: Dict[str, Any] | None = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> Iterable[str]:
        return list(self._data.keys())


class JsonFileKeyValueStore:
    """Store persisted as one JSON object on disk.

    The document is loaded lazily on first access and rewritten on every
    mutation.
    """

    def __init__(self, base_dir: str | Path | None = None, filename: str = STATE_FILENAME) -> None:
        base = Path(base_dir) if base_dir else Path.cwd()
        self.path = base / filename
        self._data: Dict[str, Any] | None = None

    def _load(self) -> Dict[str, Any]:
        if self._data is not None:
            return self._data
        data: Dict[str, Any] = {}
        if self.path.exists():
            try:
                loaded = json.loads(self.path.read_text(encoding="utf-8"))
                if isinstance(loaded, dict):
                    data = loaded
                else:
                    _log.warning("Ignoring non-object tour state in %s", self.path)
            except (OSError, ValueError) as exc:
                _log.warning("Could not read tour state %s: %s", self.path, exc)
        self._data = data
        return data

    def _flush(self) -> None:
        data = self._load()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._load()[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._flush()

    def keys(self) -> Iterable[str]:
        return list(self._load().keys())

    def reload(self) -> None:
        """Drop the cached document so the next access re-reads the file."""
        self._data = None
