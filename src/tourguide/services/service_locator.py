"""Typed service registry for the tour engine.

``create_tour_context`` registers the session collaborators here so the Qt
glue and lazily evaluated step conditions can reach them without constructor
plumbing. Each well-known collaborator has a ``ServiceKey`` constant carrying
its expected type; the type is checked when the service is registered, so a
lookup never hands back the wrong object:

    services.register(EVENT_BUS, EventBus())
    bus = services.get(EVENT_BUS)
    store = services.lookup(KEY_VALUE_STORE)  # None until bootstrapped

Plain string keys are accepted for host-application extras. Tests swap
collaborators with ``override_context``.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from threading import RLock
from typing import Any, Dict, Generator, Generic, List, Optional, TypeVar, Union, overload

from tourguide.config.settings import TourSettings

from .event_bus import EventBus
from .key_value_store import KeyValueStore
from .tour_analytics import TourAnalytics

T = TypeVar("T")

__all__ = [
    "ServiceKey",
    "ServiceLocator",
    "services",
    "ServiceAlreadyRegisteredError",
    "ServiceNotFoundError",
    "TOUR_SETTINGS",
    "EVENT_BUS",
    "KEY_VALUE_STORE",
    "TOUR_ANALYTICS",
    "TOUR_CONTROLLER",
    "BOOTSTRAP_KEYS",
]


class ServiceAlreadyRegisteredError(RuntimeError):
    """Raised when a key is registered twice without allow_override."""


class ServiceNotFoundError(KeyError):
    """Raised when a requested service key is not present."""


@dataclass(frozen=True)
class ServiceKey(Generic[T]):
    name: str
    expected_type: Optional[type] = None

    def check(self, value: Any) -> None:
        if self.expected_type is not None and not isinstance(value, self.expected_type):
            raise TypeError(
                f"Service '{self.name}' expects {self.expected_type.__name__}, "
                f"got {type(value).__name__}"
            )


TOUR_SETTINGS: ServiceKey[TourSettings] = ServiceKey("tour_settings", TourSettings)
EVENT_BUS: ServiceKey[EventBus] = ServiceKey("event_bus", EventBus)
KEY_VALUE_STORE: ServiceKey[KeyValueStore] = ServiceKey("key_value_store", KeyValueStore)
TOUR_ANALYTICS: ServiceKey[TourAnalytics] = ServiceKey("tour_analytics", TourAnalytics)
# The controller module imports this one through the step enhancers, so its
# type is not checked here.
TOUR_CONTROLLER: ServiceKey[Any] = ServiceKey("tour_controller")

BOOTSTRAP_KEYS = (TOUR_SETTINGS, EVENT_BUS, KEY_VALUE_STORE, TOUR_ANALYTICS, TOUR_CONTROLLER)

Key = Union[str, ServiceKey[Any]]


@dataclass
class _Entry:
    value: Any
    origin: Optional[str] = None


def _name(key: Key) -> str:
    return key.name if isinstance(key, ServiceKey) else key


class ServiceLocator:
    """Thread-safe registry keyed by ``ServiceKey`` (or plain names)."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._entries: Dict[str, _Entry] = {}

    def register(
        self, key: Key, value: Any, *, allow_override: bool = False, origin: Optional[str] = None
    ) -> None:
        if isinstance(key, ServiceKey):
            key.check(value)
        name = _name(key)
        with self._lock:
            if name in self._entries and not allow_override:
                raise ServiceAlreadyRegisteredError(f"Service '{name}' already registered")
            self._entries[name] = _Entry(value, origin)

    @overload
    def get(self, key: ServiceKey[T]) -> T: ...

    @overload
    def get(self, key: str) -> Any: ...

    def get(self, key: Key) -> Any:
        name = _name(key)
        with self._lock:
            entry = self._entries.get(name)
        if entry is None:
            raise ServiceNotFoundError(name)
        return entry.value

    @overload
    def lookup(self, key: ServiceKey[T]) -> Optional[T]: ...

    @overload
    def lookup(self, key: str) -> Any: ...

    def lookup(self, key: Key) -> Any:
        """Like ``get`` but returns None for a missing service."""
        with self._lock:
            entry = self._entries.get(_name(key))
        return entry.value if entry is not None else None

    def origin(self, key: Key) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(_name(key))
        return entry.origin if entry is not None else None

    @contextmanager
    def override_context(self, overrides: Dict[Key, Any]) -> Generator[None, None, None]:
        """Temporarily replace (or add) services; previous entries are restored on exit."""
        for key, value in overrides.items():
            if isinstance(key, ServiceKey):
                key.check(value)
        saved: Dict[str, Optional[_Entry]] = {}
        with self._lock:
            for key, value in overrides.items():
                name = _name(key)
                saved[name] = self._entries.get(name)
                self._entries[name] = _Entry(value, "override")
        try:
            yield
        finally:
            with self._lock:
                for name, prior in saved.items():
                    if prior is None:
                        self._entries.pop(name, None)
                    else:
                        self._entries[name] = prior

    def unregister(self, key: Key) -> None:
        with self._lock:
            self._entries.pop(_name(key), None)

    def names(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


services = ServiceLocator()
