"""Touch swipe bridge for tour navigation.

Installed on the tour popup (or any widget accepting touch events). The drag
from ``TouchBegin`` to ``TouchEnd`` is classified by
``design.gesture_navigation`` and forwarded to ``TourController.handle_swipe``.
Orientation is read from the watched widget's window at the end of the drag.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from PyQt6.QtCore import QEvent, QObject, Qt
from PyQt6.QtGui import QTouchEvent
from PyQt6.QtWidgets import QWidget

from tourguide.services.tour_controller import NavigationOutcome

__all__ = ["TourGestureFilter"]


class TourGestureFilter(QObject):
    def __init__(self, controller: Any, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self._widget: Optional[QWidget] = None
        self._start: Optional[Tuple[float, float]] = None

    def install(self, widget: QWidget) -> None:
        self.uninstall()
        widget.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        widget.installEventFilter(self)
        self._widget = widget

    def uninstall(self) -> None:
        if self._widget is not None:
            self._widget.removeEventFilter(self)
        self._widget = None
        self._start = None

    # Drag tracking ------------------------------------------------------------
    def begin(self, x: float, y: float) -> None:
        self._start = (x, y)

    def end(self, x: float, y: float, *, landscape: bool = False) -> Optional[NavigationOutcome]:
        """Finish the drag at ``(x, y)``; returns the navigation outcome or None for taps."""
        if self._start is None:
            return None
        sx, sy = self._start
        self._start = None
        if not self._controller.is_active:
            return None
        return self._controller.handle_swipe(x - sx, y - sy, landscape=landscape)

    def _is_landscape(self, obj: QObject) -> bool:
        if not isinstance(obj, QWidget):
            return False
        window = obj.window()
        return window.width() > window.height()

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:  # noqa: N802 - Qt API
        kind = event.type()
        if kind not in (QEvent.Type.TouchBegin, QEvent.Type.TouchEnd, QEvent.Type.TouchCancel):
            return False
        if not isinstance(event, QTouchEvent):
            return False
        if kind == QEvent.Type.TouchCancel:
            self._start = None
            return False
        points = event.points()
        if not points:
            return False
        pos = points[0].globalPosition()
        if kind == QEvent.Type.TouchBegin:
            self.begin(pos.x(), pos.y())
            # Accept the sequence so TouchEnd is delivered here.
            return bool(self._controller.is_active)
        outcome = self.end(pos.x(), pos.y(), landscape=self._is_landscape(obj))
        return outcome is not None and outcome is not NavigationOutcome.IGNORED
