"""Keyboard shortcut mapping for tour navigation.

Keys are named the way the Qt glue normalises them (``ArrowRight``,
``PageDown``, ``Escape``, single characters ...). Mapping is pure so it can be
tested without a widget tree; ``components.tour_keyboard_filter`` feeds it
from real ``QKeyEvent`` objects.

Default bindings:
 - ArrowRight / ArrowDown / Enter / Space / n: next (arrows swap in RTL)
 - ArrowLeft / ArrowUp / p: previous
 - Home / End: first / last step
 - PageDown / PageUp: jump forward / back
 - Escape: close, s: skip, Shift+?: shortcut help
Letter shortcuts are ignored with Ctrl/Meta held, and nothing is mapped while
focus is inside a text input.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from .tour_steps import KeyboardShortcuts

__all__ = ["NavigationAction", "map_key"]


class NavigationAction(str, Enum):
    NEXT = "next"
    PREVIOUS = "previous"
    FIRST = "first"
    LAST = "last"
    JUMP_FORWARD = "jump_forward"
    JUMP_BACKWARD = "jump_backward"
    ESCAPE = "escape"
    SKIP = "skip"
    HELP = "show_shortcuts_help"


_FIXED: Dict[str, NavigationAction] = {
    "Enter": NavigationAction.NEXT,
    " ": NavigationAction.NEXT,
    "Escape": NavigationAction.ESCAPE,
    "Home": NavigationAction.FIRST,
    "End": NavigationAction.LAST,
    "PageDown": NavigationAction.JUMP_FORWARD,
    "PageUp": NavigationAction.JUMP_BACKWARD,
}

_LETTERS: Dict[str, NavigationAction] = {
    "n": NavigationAction.NEXT,
    "p": NavigationAction.PREVIOUS,
    "s": NavigationAction.SKIP,
}


def map_key(
    key: str,
    *,
    shift: bool = False,
    ctrl: bool = False,
    meta: bool = False,
    rtl: bool = False,
    in_text_input: bool = False,
    shortcuts: Optional[KeyboardShortcuts] = None,
) -> Optional[NavigationAction]:
    if in_text_input:
        return None
    if shortcuts is not None:
        custom = {
            shortcuts.next_key: NavigationAction.NEXT,
            shortcuts.prev_key: NavigationAction.PREVIOUS,
            shortcuts.skip_key: NavigationAction.SKIP,
            shortcuts.help_key: NavigationAction.HELP,
        }
        if key in custom:
            return custom[key]
    if key in ("ArrowRight", "ArrowDown"):
        return NavigationAction.PREVIOUS if rtl else NavigationAction.NEXT
    if key in ("ArrowLeft", "ArrowUp"):
        return NavigationAction.NEXT if rtl else NavigationAction.PREVIOUS
    if key in _FIXED:
        return _FIXED[key]
    if key == "?":
        return NavigationAction.HELP if shift else None
    if key in _LETTERS and not (ctrl or meta):
        return _LETTERS[key]
    return None
