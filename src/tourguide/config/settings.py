"""Global configuration and constants for the tour engine.

Values are read once from the environment when the module is imported and can
be replaced in tests by assigning a new ``TourSettings`` to
``TourSettings.instance``.

Environment variables:
 - ``TOURGUIDE_DATA_DIR``: directory holding ``tour_state.json`` (default ``data``)
 - ``TOURGUIDE_ELEMENT_POLL_MS``: element finder poll interval (default 100)
 - ``TOURGUIDE_ELEMENT_TIMEOUT_MS``: element finder timeout, ``0`` polls forever
 - ``TOURGUIDE_ANALYTICS_ENABLED``: record analytics events (default on)
 - ``TOURGUIDE_VIEW_MODE``: explicit view mode preference (default ``auto``)
 - ``TOURGUIDE_ORIENTATION_SETTLE_MS``: view mode re-evaluation delay after a rotation
 - ``TOURGUIDE_RTL``: mirror arrow-key navigation for right-to-left layouts
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar, Final, Mapping

__all__ = [
    "DATA_DIR",
    "STATE_FILENAME",
    "DEFAULT_POLL_INTERVAL_MS",
    "DEFAULT_ELEMENT_TIMEOUT_MS",
    "DEFAULT_PAGE_JUMP_SIZE",
    "DEFAULT_SUGGESTION_LIMIT",
    "DEFAULT_ORIENTATION_SETTLE_MS",
    "TourSettings",
    "load_settings_from_env",
]

DATA_DIR: Final = os.environ.get("TOURGUIDE_DATA_DIR", "data")
STATE_FILENAME: Final = "tour_state.json"

DEFAULT_POLL_INTERVAL_MS: Final = 100
DEFAULT_ELEMENT_TIMEOUT_MS: Final = 10_000
DEFAULT_PAGE_JUMP_SIZE: Final = 3
DEFAULT_SUGGESTION_LIMIT: Final = 3
DEFAULT_ORIENTATION_SETTLE_MS: Final = 300
DEFAULT_ANALYTICS_CAPACITY: Final = 500

_VIEW_MODES = {"auto", "tooltip", "drawer", "compact", "sheet"}


def _env_truthy(val: str | None, default: bool = False) -> bool:
    if val is None or val == "":
        return default
    return val.lower() in {"1", "true", "yes", "on"}


def _env_int(val: str | None, default: int) -> int:
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        return default


@dataclass
class TourSettings:
    """Runtime knobs for tour navigation, element discovery and analytics.

    Attributes:
        data_dir: Directory of the persistent key-value store file.
        poll_interval_ms: Interval between element lookups while a step
            target is not yet rendered.
        element_timeout_ms: Give up and report "target not found" after this
            many milliseconds. ``None`` keeps polling until the step changes.
        page_jump_size: Steps skipped by PageUp / PageDown.
        suggestion_limit: Max entries returned by suggested next steps.
        orientation_settle_ms: Delay before the view selector re-evaluates
            after an orientation change.
        analytics_enabled: When False, analytics events are dropped.
        analytics_capacity: Ring buffer size for recorded analytics events.
        view_mode: Explicit view preference or ``auto``.
        rtl: Swap arrow key directions.
    """

    instance: ClassVar["TourSettings"]

    data_dir: str = DATA_DIR
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    element_timeout_ms: int | None = DEFAULT_ELEMENT_TIMEOUT_MS
    page_jump_size: int = DEFAULT_PAGE_JUMP_SIZE
    suggestion_limit: int = DEFAULT_SUGGESTION_LIMIT
    orientation_settle_ms: int = DEFAULT_ORIENTATION_SETTLE_MS
    analytics_enabled: bool = True
    analytics_capacity: int = DEFAULT_ANALYTICS_CAPACITY
    view_mode: str = "auto"
    rtl: bool = False

    def __post_init__(self) -> None:
        if self.poll_interval_ms < 1:
            raise ValueError("poll_interval_ms must be >= 1")
        if self.page_jump_size < 1:
            raise ValueError("page_jump_size must be >= 1")
        if self.orientation_settle_ms < 0:
            raise ValueError("orientation_settle_ms must be >= 0")
        if self.view_mode not in _VIEW_MODES:
            raise ValueError(f"Unknown view mode: {self.view_mode!r}")


def load_settings_from_env(env: Mapping[str, str] | None = None) -> TourSettings:
    """Build settings from environment variables (``os.environ`` by default)."""
    if env is None:
        env = os.environ
    timeout = _env_int(env.get("TOURGUIDE_ELEMENT_TIMEOUT_MS"), DEFAULT_ELEMENT_TIMEOUT_MS)
    view_mode = env.get("TOURGUIDE_VIEW_MODE", "auto").lower()
    if view_mode not in _VIEW_MODES:
        view_mode = "auto"
    return TourSettings(
        data_dir=env.get("TOURGUIDE_DATA_DIR", DATA_DIR),
        poll_interval_ms=max(1, _env_int(env.get("TOURGUIDE_ELEMENT_POLL_MS"), DEFAULT_POLL_INTERVAL_MS)),
        element_timeout_ms=timeout if timeout > 0 else None,
        orientation_settle_ms=max(
            0, _env_int(env.get("TOURGUIDE_ORIENTATION_SETTLE_MS"), DEFAULT_ORIENTATION_SETTLE_MS)
        ),
        analytics_enabled=_env_truthy(env.get("TOURGUIDE_ANALYTICS_ENABLED"), default=True),
        view_mode=view_mode,
        rtl=_env_truthy(env.get("TOURGUIDE_RTL")),
    )


# Initialize default singleton
TourSettings.instance = load_settings_from_env()
