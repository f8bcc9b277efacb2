"""Responsive view-mode selection for the tour shell.

A tour step can be presented as a ``tooltip`` anchored to its target, a side
``drawer``, a ``compact`` strip, or a bottom ``sheet``. The choice depends on
device class, orientation and an explicit user preference:

| preference | device  | orientation | view    |
|------------|---------|-------------|---------|
| explicit   | any     | any         | pref    |
| auto       | mobile  | portrait    | sheet   |
| auto       | mobile  | landscape   | compact |
| auto       | tablet  | portrait    | drawer  |
| auto       | tablet  | landscape   | tooltip |
| auto       | desktop | any         | tooltip |

Device classes are derived from the window size (mobile < 768 px wide, tablet
< 1024 px, desktop otherwise). Pure Python, no Qt dependency.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from tourguide.config.settings import TourSettings

__all__ = [
    "VIEW_MODES",
    "MOBILE_MAX_WIDTH",
    "TABLET_MAX_WIDTH",
    "DeviceProfile",
    "classify_device",
    "select_view_mode",
    "optimal_position",
    "ResponsiveViewSelector",
]

VIEW_MODES: Tuple[str, ...] = ("tooltip", "drawer", "compact", "sheet")
MOBILE_MAX_WIDTH = 768  # exclusive
TABLET_MAX_WIDTH = 1024  # exclusive


@dataclass(frozen=True)
class DeviceProfile:
    is_mobile: bool
    is_tablet: bool
    is_landscape: bool

    @property
    def is_portrait(self) -> bool:
        return not self.is_landscape

    @property
    def is_desktop(self) -> bool:
        return not (self.is_mobile or self.is_tablet)

    @property
    def device_class(self) -> str:
        if self.is_mobile:
            return "mobile"
        if self.is_tablet:
            return "tablet"
        return "desktop"


def classify_device(width: int, height: int) -> DeviceProfile:
    if width < 0 or height < 0:
        raise ValueError("Window dimensions must be non-negative")
    return DeviceProfile(
        is_mobile=width < MOBILE_MAX_WIDTH,
        is_tablet=MOBILE_MAX_WIDTH <= width < TABLET_MAX_WIDTH,
        is_landscape=width > height,
    )


def select_view_mode(
    preference: str, *, is_mobile: bool, is_tablet: bool, is_landscape: bool
) -> str:
    if preference != "auto":
        if preference not in VIEW_MODES:
            raise ValueError(f"Unknown view mode preference: {preference!r}")
        return preference
    if is_mobile:
        return "compact" if is_landscape else "sheet"
    if is_tablet:
        return "tooltip" if is_landscape else "drawer"
    return "tooltip"


def optimal_position(
    target: Optional[Tuple[int, int, int, int]], viewport: Tuple[int, int]
) -> str:
    """Side of ``target`` (x, y, w, h) with the most free space inside ``viewport``.

    Ties resolve in the order top, right, bottom, left. Without a target the
    tooltip goes below.
    """
    if target is None:
        return "bottom"
    x, y, w, h = target
    vw, vh = viewport
    spaces = [
        ("top", y),
        ("right", vw - (x + w)),
        ("bottom", vh - (y + h)),
        ("left", x),
    ]
    best = spaces[0]
    for candidate in spaces[1:]:
        if candidate[1] > best[1]:
            best = candidate
    return best[0]


class ResponsiveViewSelector:
    """Stateful wrapper that freezes the mode during orientation changes.

    ``begin_orientation_change`` keeps the previous mode (avoids flicker while
    the window geometry is settling); ``end_orientation_change`` re-evaluates
    with the latest profile. Without an explicit ``preference`` the
    ``TourSettings.view_mode`` setting is used.
    """

    def __init__(
        self, preference: Optional[str] = None, profile: Optional[DeviceProfile] = None
    ) -> None:
        self._preference = preference if preference is not None else TourSettings.instance.view_mode
        self._profile = profile or DeviceProfile(False, False, True)
        self._transitioning = False
        self._mode = self._evaluate()

    @property
    def view_mode(self) -> str:
        return self._mode

    @property
    def is_transitioning(self) -> bool:
        return self._transitioning

    @property
    def profile(self) -> DeviceProfile:
        return self._profile

    def _evaluate(self) -> str:
        return select_view_mode(
            self._preference,
            is_mobile=self._profile.is_mobile,
            is_tablet=self._profile.is_tablet,
            is_landscape=self._profile.is_landscape,
        )

    def set_preference(self, preference: str) -> str:
        self._preference = preference
        return self._refresh()

    def update_profile(self, profile: DeviceProfile) -> str:
        self._profile = profile
        return self._refresh()

    def update_size(self, width: int, height: int) -> str:
        return self.update_profile(classify_device(width, height))

    def begin_orientation_change(self) -> None:
        self._transitioning = True

    def end_orientation_change(self) -> str:
        self._transitioning = False
        return self._refresh()

    def _refresh(self) -> str:
        if not self._transitioning:
            self._mode = self._evaluate()
        return self._mode
