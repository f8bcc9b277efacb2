"""Focus trap for the tour popup.

While engaged, Tab / Shift+Tab cycle through the focusable widgets of the
tour container instead of escaping into the host window. Engaging focuses the
first focusable widget; releasing restores focus to the widget that had it
before (if it still exists).

The filter is installed application-wide because key events are delivered to
the focused widget, not to the container.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from PyQt6.QtCore import QEvent, QObject, Qt
from PyQt6.QtGui import QKeyEvent
from PyQt6.QtWidgets import QApplication, QWidget

__all__ = ["wrap_focus_index", "focusable_children", "FocusTrap"]

_log = logging.getLogger(__name__)


def wrap_focus_index(count: int, current: int, backwards: bool) -> int:
    """Index receiving focus after Tab (or Shift+Tab when ``backwards``).

    ``current`` of -1 means focus is outside the list. Returns -1 when there
    is nothing to focus.
    """
    if count <= 0:
        return -1
    if current < 0 or current >= count:
        return count - 1 if backwards else 0
    return (current - 1) % count if backwards else (current + 1) % count


def focusable_children(container: QWidget) -> List[QWidget]:
    return [
        w
        for w in container.findChildren(QWidget)
        if w.isVisible()
        and w.isEnabled()
        and w.focusPolicy() != Qt.FocusPolicy.NoFocus
        and w.focusPolicy() != Qt.FocusPolicy.ClickFocus
    ]


class FocusTrap(QObject):
    def __init__(
        self,
        container: QWidget,
        *,
        auto_focus_first: bool = True,
        restore_focus: bool = True,
    ) -> None:
        super().__init__(container)
        self._container = container
        self._auto_focus_first = auto_focus_first
        self._restore_focus = restore_focus
        self._previous: Optional[QWidget] = None
        self._engaged = False

    @property
    def is_engaged(self) -> bool:
        return self._engaged

    def engage(self) -> None:
        if self._engaged:
            return
        self._previous = QApplication.focusWidget()
        app = QApplication.instance()
        if app is not None:
            app.installEventFilter(self)
        self._engaged = True
        if self._auto_focus_first:
            self.focus_index(0)

    def release(self) -> None:
        if not self._engaged:
            return
        app = QApplication.instance()
        if app is not None:
            app.removeEventFilter(self)
        self._engaged = False
        previous, self._previous = self._previous, None
        if self._restore_focus and previous is not None:
            try:
                previous.setFocus(Qt.FocusReason.OtherFocusReason)
            except RuntimeError:  # underlying C++ widget already deleted
                _log.debug("Previous focus widget no longer exists")

    def focus_index(self, index: int) -> bool:
        widgets = focusable_children(self._container)
        if not 0 <= index < len(widgets):
            return False
        widgets[index].setFocus(Qt.FocusReason.TabFocusReason)
        return True

    def focus_named(self, object_name: str) -> bool:
        for i, w in enumerate(focusable_children(self._container)):
            if w.objectName() == object_name:
                return self.focus_index(i)
        return False

    def _owns(self, obj: QObject) -> bool:
        return isinstance(obj, QWidget) and (
            obj is self._container or self._container.isAncestorOf(obj)
        )

    def cycle(self, backwards: bool) -> Optional[QWidget]:
        widgets = focusable_children(self._container)
        current = self._container.focusWidget()
        index = widgets.index(current) if current in widgets else -1
        target = wrap_focus_index(len(widgets), index, backwards)
        if target < 0:
            return None
        widgets[target].setFocus(Qt.FocusReason.TabFocusReason)
        return widgets[target]

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:  # noqa: N802 - Qt API
        if not self._engaged or event.type() != QEvent.Type.KeyPress:
            return False
        if not isinstance(event, QKeyEvent) or not self._owns(obj):
            return False
        key = event.key()
        if key == Qt.Key.Key_Backtab or (
            key == Qt.Key.Key_Tab and event.modifiers() & Qt.KeyboardModifier.ShiftModifier
        ):
            return self.cycle(backwards=True) is not None
        if key == Qt.Key.Key_Tab:
            return self.cycle(backwards=False) is not None
        return False
