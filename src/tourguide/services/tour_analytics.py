"""Tour analytics tracker.

Records navigation events (``tour_started``, ``step_completed``,
``tour_completed`` ...) tagged with the host-supplied user id / type into a
bounded ring buffer, and republishes each record on the ``EventBus`` as
``tour_analytics`` so dashboards or exporters can listen. Recording is
skipped entirely when ``enabled`` is False.
"""

from __future__ import annotations

import json
import logging
import os
import time
from collections import Counter, deque
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Deque, Dict, List, Optional

from .event_bus import EventBus, TourEvent

__all__ = ["TourAnalyticsEvent", "TourAnalytics"]

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TourAnalyticsEvent:
    event: str
    path_id: Optional[str]
    step_index: Optional[int] = None
    step_id: Optional[str] = None
    user_id: Optional[str] = None
    user_type: Optional[str] = None
    timestamp: float = field(default_factory=time.time)
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.event,
            "pathId": self.path_id,
            "stepIndex": self.step_index,
            "stepId": self.step_id,
            "userId": self.user_id,
            "userType": self.user_type,
            "timestamp": self.timestamp,
            "data": self.data,
        }


class TourAnalytics:
    def __init__(
        self,
        *,
        event_bus: Optional[EventBus] = None,
        capacity: int = 500,
        enabled: bool = True,
        user_id: Optional[str] = None,
        user_type: Optional[str] = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.enabled = enabled
        self.user_id = user_id
        self.user_type = user_type
        self._bus = event_bus
        self._lock = RLock()
        self._events: Deque[TourAnalyticsEvent] = deque(maxlen=capacity)

    def track(
        self,
        event: str | TourEvent,
        path_id: Optional[str],
        *,
        step_index: Optional[int] = None,
        step_id: Optional[str] = None,
        **data: Any,
    ) -> Optional[TourAnalyticsEvent]:
        if not self.enabled:
            return None
        name = event.value if isinstance(event, TourEvent) else event
        record = TourAnalyticsEvent(
            event=name,
            path_id=path_id,
            step_index=step_index,
            step_id=step_id,
            user_id=self.user_id,
            user_type=self.user_type,
            data=dict(data),
        )
        with self._lock:
            self._events.append(record)
        _log.debug("tour analytics %s path=%s step=%s", name, path_id, step_index)
        if self._bus is not None:
            self._bus.publish(TourEvent.ANALYTICS_RECORDED, record)
        return record

    # Query ----------------------------------------------------------------
    def recent(self, limit: Optional[int] = None) -> List[TourAnalyticsEvent]:
        with self._lock:
            data = list(self._events)
        return data[-limit:] if limit is not None else data

    def filter(
        self, *, event: Optional[str] = None, path_id: Optional[str] = None
    ) -> List[TourAnalyticsEvent]:
        return [
            e
            for e in self.recent()
            if (event is None or e.event == event) and (path_id is None or e.path_id == path_id)
        ]

    def summary(self, path_id: Optional[str] = None) -> Dict[str, int]:
        """Event name -> count, optionally for one path."""
        return dict(Counter(e.event for e in self.filter(path_id=path_id)))

    def completion_rate(self, path_id: str) -> float:
        counts = self.summary(path_id)
        started = counts.get(TourEvent.TOUR_STARTED.value, 0)
        if started == 0:
            return 0.0
        return counts.get(TourEvent.TOUR_COMPLETED.value, 0) / started

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    # Export ----------------------------------------------------------------
    def export_jsonl(self, path: str | None = None, *, append: bool = False) -> int:
        """Write recorded events as JSON Lines; returns number of lines written."""
        entries = self.recent()
        file_path = path or os.path.join(os.getcwd(), "tour_analytics.jsonl")
        with open(file_path, "a" if append else "w", encoding="utf-8") as f:
            for e in entries:
                f.write(json.dumps(e.to_dict(), sort_keys=True, default=str) + "\n")
        return len(entries)
