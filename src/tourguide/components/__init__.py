"""Qt components binding the tour engine to a widget tree.

Importing this package imports PyQt6.
"""

from __future__ import annotations

from .element_finder import ElementFinder, ElementPoller, PollOutcome, find_target_widget
from .focus_trap import FocusTrap, wrap_focus_index
from .tour_keyboard_filter import TourKeyboardFilter, dispatch_key_event
from .tour_gesture_filter import TourGestureFilter
from .view_mode_driver import ViewModeDriver

__all__ = [
    "ElementFinder",
    "ElementPoller",
    "PollOutcome",
    "find_target_widget",
    "FocusTrap",
    "wrap_focus_index",
    "TourKeyboardFilter",
    "dispatch_key_event",
    "TourGestureFilter",
    "ViewModeDriver",
]
