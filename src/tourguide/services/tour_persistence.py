"""Tour completion and progress persistence.

Keys in the backing ``KeyValueStore``:
 - ``completedTours``: list of completed tour path ids (a set stored as list)
 - ``tourProgress``: ``{"pathId": str, "step": int, "active": bool}``
 - ``enabledFeatureFlags``: ``{flag_name: bool}`` read by feature-flag steps

Values written by other tools as JSON text are decoded transparently. Any
malformed value reads as the default and is logged, never raised.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .key_value_store import KeyValueStore

__all__ = [
    "COMPLETED_TOURS_KEY",
    "PROGRESS_KEY",
    "FEATURE_FLAGS_KEY",
    "TourProgress",
    "TourProgressStore",
]

COMPLETED_TOURS_KEY = "completedTours"
PROGRESS_KEY = "tourProgress"
FEATURE_FLAGS_KEY = "enabledFeatureFlags"

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TourProgress:
    path_id: str
    step: int
    active: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"pathId": self.path_id, "step": self.step, "active": self.active}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TourProgress":
        return cls(
            path_id=str(data["pathId"]),
            step=int(data.get("step", 0)),
            active=bool(data.get("active", False)),
        )


class TourProgressStore:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def _read(self, key: str, expected: type, default: Any) -> Any:
        raw = self._store.get(key)
        if raw is None:
            return default
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except ValueError:
                _log.warning("Stored value for %s is not valid JSON", key)
                return default
        if not isinstance(raw, expected):
            _log.warning("Stored value for %s has unexpected type %s", key, type(raw).__name__)
            return default
        return raw

    # Completion ---------------------------------------------------------
    def completed_tours(self) -> List[str]:
        values = self._read(COMPLETED_TOURS_KEY, list, [])
        return [str(v) for v in values]

    def mark_tour_completed(self, path_id: str) -> bool:
        """Add ``path_id`` to ``completedTours``; returns False if already present."""
        completed = self.completed_tours()
        if path_id in completed:
            return False
        completed.append(path_id)
        self._store.set(COMPLETED_TOURS_KEY, completed)
        return True

    def is_tour_completed(self, path_id: str) -> bool:
        return path_id in self.completed_tours()

    def reset_completed_tours(self) -> None:
        self._store.remove(COMPLETED_TOURS_KEY)

    # Resumable progress ---------------------------------------------------
    def save_progress(self, path_id: str, step: int, active: bool) -> None:
        self._store.set(PROGRESS_KEY, TourProgress(path_id, step, active).to_dict())

    def load_progress(self) -> Optional[TourProgress]:
        data = self._read(PROGRESS_KEY, dict, None)
        if data is None:
            return None
        try:
            return TourProgress.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            _log.warning("Discarding malformed tour progress: %s", exc)
            return None

    def clear_progress(self) -> None:
        self._store.remove(PROGRESS_KEY)

    # Feature flags ----------------------------------------------------------
    def enabled_feature_flags(self) -> Dict[str, bool]:
        flags = self._read(FEATURE_FLAGS_KEY, dict, {})
        return {str(k): bool(v) for k, v in flags.items()}

    def is_feature_enabled(self, flag: str) -> bool:
        return self.enabled_feature_flags().get(flag, False)

    def set_feature_flag(self, flag: str, enabled: bool = True) -> None:
        flags = self.enabled_feature_flags()
        flags[flag] = enabled
        self._store.set(FEATURE_FLAGS_KEY, flags)
