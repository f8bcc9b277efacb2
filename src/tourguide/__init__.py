"""tourguide public API.

Curated surface for host applications and tests: authoring helpers, the
navigation controller and the bootstrap. Qt widgets glue lives in
``tourguide.components`` and is not imported here (no implicit PyQt6 import).
"""

from __future__ import annotations

from .services.service_locator import (  # noqa: F401
    services,
    ServiceLocator,
    ServiceAlreadyRegisteredError,
    ServiceNotFoundError,
)
from .services.event_bus import EventBus, TourEvent, Event  # noqa: F401
from .services.error_handling import (  # noqa: F401
    TourConfigurationError,
    TourError,
    guarded_call,
)
from .services.key_value_store import (  # noqa: F401
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)
from .services.tour_controller import NavigationOutcome, TourController  # noqa: F401
from .design.tour_steps import TourPath, TourStep, create_step, create_tour_path  # noqa: F401
from .design.tour_registry import register_tour, get_tour  # noqa: F401
from .app.bootstrap import TourContext, create_tour_context  # noqa: F401

__all__ = [
    "services",
    "ServiceLocator",
    "ServiceAlreadyRegisteredError",
    "ServiceNotFoundError",
    "EventBus",
    "TourEvent",
    "Event",
    "TourConfigurationError",
    "TourError",
    "guarded_call",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "NavigationOutcome",
    "TourController",
    "TourPath",
    "TourStep",
    "create_step",
    "create_tour_path",
    "register_tour",
    "get_tour",
    "TourContext",
    "create_tour_context",
    "__version__",
]

__version__ = "0.1.0"
