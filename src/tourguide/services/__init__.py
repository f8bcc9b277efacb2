"""Service layer exports.

Responsibilities:
 - Dependency/service locator (`services`)
 - EventBus publish/subscribe core with the `TourEvent` names

Navigation, persistence and analytics live in their own modules
(`tour_controller`, `tour_persistence`, `tour_analytics`) and are imported
from there so this package stays cheap to import from the design layer.
"""

from .service_locator import services, ServiceKey, ServiceLocator  # noqa: F401
from .event_bus import EventBus, TourEvent  # noqa: F401

__all__ = [
    "services",
    "ServiceKey",
    "ServiceLocator",
    "EventBus",
    "TourEvent",
]
