"""Bootstrap for the tour engine.

Creates and registers the shared collaborators a host application needs:
 - ``event_bus``: fresh ``EventBus`` per bootstrap (test isolation)
 - ``key_value_store``: the injected store, or a ``JsonFileKeyValueStore`` in
   the data directory
 - ``tour_analytics`` and ``tour_controller`` (bound to the bus so
   ``tour:next`` / ``tour:previous`` / ``tour:escape`` drive navigation)

Qt is not imported here; the element finder, focus trap and keyboard filter
are attached by the host once its window exists.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from tourguide.config.settings import TourSettings
from tourguide.design.tour_registry import register_tour
from tourguide.design.tour_steps import TourPath
from tourguide.services.event_bus import EventBus
from tourguide.services.key_value_store import JsonFileKeyValueStore, KeyValueStore
from tourguide.services.service_locator import (
    EVENT_BUS,
    KEY_VALUE_STORE,
    TOUR_ANALYTICS,
    TOUR_CONTROLLER,
    TOUR_SETTINGS,
    ServiceLocator,
    services,
)
from tourguide.services.tour_analytics import TourAnalytics
from tourguide.services.tour_controller import TourController

__all__ = ["TourContext", "create_tour_context"]

_log = logging.getLogger(__name__)


@dataclass
class TourContext:
    """References created during bootstrap.

    Attributes
    ----------
    settings: Effective settings
    event_bus: Bus shared by controller, analytics and Qt glue
    store: Key-value store backing completion / progress / feature flags
    analytics: Analytics tracker
    controller: Navigation controller (already bound to ``event_bus``)
    services: Global service locator (post-initialization state)
    duration_s: Elapsed seconds for bootstrap
    metadata: Free-form dict (registered path ids ...)
    """

    settings: TourSettings
    event_bus: EventBus
    store: KeyValueStore
    analytics: TourAnalytics
    controller: TourController
    services: ServiceLocator
    duration_s: float
    metadata: Dict[str, Any] = field(default_factory=dict)


def create_tour_context(
    *,
    store: Optional[KeyValueStore] = None,
    data_dir: Optional[str] = None,
    paths: Optional[Iterable[TourPath]] = None,
    user_id: Optional[str] = None,
    user_type: Optional[str] = None,
    settings: Optional[TourSettings] = None,
    strict: bool = False,
) -> TourContext:
    """Create the tour engine context and register its services.

    Parameters
    ----------
    store: Explicit store (tests pass ``InMemoryKeyValueStore``). When None a
        JSON file store under ``data_dir`` (or ``settings.data_dir``) is used.
    paths: Tour paths to register in the global registry before the controller
        is created. Validation problems are logged unless ``strict``.
    """
    started = time.perf_counter()
    settings = settings or TourSettings.instance
    if store is None:
        store = JsonFileKeyValueStore(data_dir or settings.data_dir)

    registered = []
    for path in paths or ():
        report = register_tour(path, strict=strict, replace=True)
        registered.append(path.id)
        if not report.ok:
            _log.warning("Tour '%s' registered with %d problem(s)", path.id, len(report.problems()))

    bus = EventBus()
    analytics = TourAnalytics(
        event_bus=bus,
        capacity=settings.analytics_capacity,
        enabled=settings.analytics_enabled,
        user_id=user_id,
        user_type=user_type,
    )
    controller = TourController(
        store=store,
        event_bus=bus,
        analytics=analytics,
        settings=settings,
        user_id=user_id,
        user_type=user_type,
    )
    controller.bind_event_bus()

    # Always override: each bootstrap gets its own session objects.
    for key, value in [
        (TOUR_SETTINGS, settings),
        (EVENT_BUS, bus),
        (KEY_VALUE_STORE, store),
        (TOUR_ANALYTICS, analytics),
        (TOUR_CONTROLLER, controller),
    ]:
        services.register(key, value, allow_override=True, origin="bootstrap")

    duration = time.perf_counter() - started
    _log.debug("Tour context created in %.3fs (%d paths)", duration, len(registered))
    return TourContext(
        settings=settings,
        event_bus=bus,
        store=store,
        analytics=analytics,
        controller=controller,
        services=services,
        duration_s=duration,
        metadata={"paths": registered},
    )
