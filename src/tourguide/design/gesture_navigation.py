"""Swipe gesture mapping for touch navigation.

Mirrors ``keyboard_navigation`` for touch screens. A gesture is reduced to
the drag vector between touch begin and end (Qt coordinates, y grows
downwards) and classified by its dominant axis:

 - swipe left: next (previous in RTL)
 - swipe right: previous (next in RTL)
 - swipe down: close the tour, portrait only
 - swipe up: nothing

Drags shorter than the threshold are taps. Landscape uses a lower threshold
because the short axis leaves less room to drag.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .keyboard_navigation import NavigationAction

__all__ = [
    "SWIPE_THRESHOLD",
    "LANDSCAPE_SWIPE_THRESHOLD",
    "SwipeDirection",
    "swipe_threshold",
    "classify_swipe",
    "map_swipe",
]

SWIPE_THRESHOLD = 50
LANDSCAPE_SWIPE_THRESHOLD = 30


class SwipeDirection(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


def swipe_threshold(landscape: bool) -> int:
    return LANDSCAPE_SWIPE_THRESHOLD if landscape else SWIPE_THRESHOLD


def classify_swipe(dx: float, dy: float, threshold: float = SWIPE_THRESHOLD) -> Optional[SwipeDirection]:
    """Direction of the drag ``(dx, dy)``; ``None`` for taps."""
    if abs(dx) > abs(dy):
        if dx < -threshold:
            return SwipeDirection.LEFT
        if dx > threshold:
            return SwipeDirection.RIGHT
        return None
    if dy < -threshold:
        return SwipeDirection.UP
    if dy > threshold:
        return SwipeDirection.DOWN
    return None


def map_swipe(
    direction: Optional[SwipeDirection], *, rtl: bool = False, landscape: bool = False
) -> Optional[NavigationAction]:
    if direction is SwipeDirection.LEFT:
        return NavigationAction.PREVIOUS if rtl else NavigationAction.NEXT
    if direction is SwipeDirection.RIGHT:
        return NavigationAction.NEXT if rtl else NavigationAction.PREVIOUS
    if direction is SwipeDirection.DOWN and not landscape:
        return NavigationAction.ESCAPE
    return None
