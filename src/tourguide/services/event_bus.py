"""Synchronous publish/subscribe bus for tour events.

Stands in for the document-level custom events a browser tour would use:
host widgets publish ``tour:next`` / ``tour:previous`` / ``tour:escape`` and
the controller publishes lifecycle events (``tour_started``,
``tour_completed`` ...) that analytics and overlays consume.

Properties:
 - Handlers run in subscription order on the publishing thread.
 - One failing handler does not stop the publish cycle; the failure is
   logged and kept in ``errors``.
 - Optional tracing keeps a small ring buffer of recent events.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from threading import RLock
from time import perf_counter
from typing import Any, Deque, Dict, List, Protocol, Tuple

__all__ = [
    "TourEvent",
    "Event",
    "EventBus",
    "EventHandler",
    "Subscription",
    "TraceEntry",
]

_log = logging.getLogger(__name__)


class TourEvent(str, Enum):
    # Inbound navigation requests
    NEXT = "tour:next"
    PREVIOUS = "tour:previous"
    ESCAPE = "tour:escape"
    # Lifecycle notifications
    TOUR_STARTED = "tour_started"
    TOUR_COMPLETED = "tour_completed"
    TOUR_SKIPPED = "tour_skipped"
    TOUR_EXITED = "tour_exited"
    STEP_CHANGED = "step_changed"
    STEP_COMPLETED = "step_completed"
    STEP_BACK = "step_back"
    JUMP_TO_STEP = "jump_to_step"
    HELP_REQUESTED = "tour_help_requested"
    CONTENT_LOADED = "tour_content_loaded"
    ANALYTICS_RECORDED = "tour_analytics"


@dataclass
class Event:
    name: str
    payload: Any
    timestamp: float


class EventHandler(Protocol):
    def __call__(self, event: Event) -> None: ...  # pragma: no cover - structural


@dataclass
class Subscription:
    event: str
    handler: EventHandler
    once: bool
    active: bool = True

    def cancel(self) -> None:
        self.active = False


@dataclass(frozen=True)
class TraceEntry:
    name: str
    timestamp: float
    summary: str


def _key(name: str | TourEvent) -> str:
    return name.value if isinstance(name, TourEvent) else name


class EventBus:
    """Synchronous event dispatcher with optional tracing.

    Subscriber lists are snapshotted under the lock and handlers run without
    it, so a handler may subscribe or unsubscribe while being dispatched.
    """

    DEFAULT_TRACE_CAPACITY = 50

    def __init__(self) -> None:
        self._lock = RLock()
        self._subs: Dict[str, List[Subscription]] = {}
        self._errors: List[tuple[Event, BaseException]] = []
        self._tracing_enabled = False
        self._traces: Deque[Tuple[str, float, str]] = deque(maxlen=self.DEFAULT_TRACE_CAPACITY)

    # Subscription management -------------------------------------------
    def subscribe(
        self, name: str | TourEvent, handler: EventHandler, *, once: bool = False
    ) -> Subscription:
        sub = Subscription(event=_key(name), handler=handler, once=once)
        with self._lock:
            self._subs.setdefault(sub.event, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            bucket = self._subs.get(sub.event)
            if bucket:
                self._subs[sub.event] = [s for s in bucket if s is not sub]
                if not self._subs[sub.event]:
                    self._subs.pop(sub.event, None)
        sub.active = False

    def clear(self) -> None:
        with self._lock:
            self._subs.clear()
            self._errors.clear()

    # Publishing ---------------------------------------------------------
    def publish(self, name: str | TourEvent, payload: Any = None) -> Event:
        evt = Event(name=_key(name), payload=payload, timestamp=perf_counter())
        with self._lock:
            subs = list(self._subs.get(evt.name, ()))
            if self._tracing_enabled:
                text = "-" if payload is None else str(payload)
                summary = text if len(text) <= 40 else text[:37] + "..."
                self._traces.append((evt.name, evt.timestamp, summary))
        fired: List[Subscription] = []
        for sub in subs:
            if not sub.active:
                continue
            try:
                sub.handler(evt)
            except Exception as exc:  # noqa: BLE001 - isolate handler failures
                _log.exception("Handler for %s failed", evt.name)
                with self._lock:
                    self._errors.append((evt, exc))
            else:
                if sub.once:
                    fired.append(sub)
        for sub in fired:
            self.unsubscribe(sub)
        return evt

    # Introspection ------------------------------------------------------
    def subscriber_count(self, name: str | TourEvent) -> int:
        with self._lock:
            return len(self._subs.get(_key(name), ()))

    @property
    def errors(self) -> list[tuple[Event, BaseException]]:
        with self._lock:
            return list(self._errors)

    # Tracing ------------------------------------------------------------
    def enable_tracing(self, enabled: bool = True, *, capacity: int | None = None) -> None:
        with self._lock:
            self._tracing_enabled = enabled
            if capacity is not None and capacity != self._traces.maxlen:
                self._traces = deque(self._traces, maxlen=capacity)

    def recent_trace_entries(self) -> list[TraceEntry]:
        with self._lock:
            return [TraceEntry(name=n, timestamp=ts, summary=s) for (n, ts, s) in self._traces]
