"""Qt driver for the responsive view selector.

Watches a top-level window for resize events and feeds the new size into a
``ResponsiveViewSelector``. When the resize flips orientation the selector is
frozen on its previous mode and a single-shot ``QTimer`` of
``TourSettings.orientation_settle_ms`` ends the transition; further resizes
while settling restart the timer, so only the final geometry is evaluated.

``view_mode_changed`` is emitted whenever the effective mode changes. If a
controller is attached its device class follows the window.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from PyQt6.QtCore import QEvent, QObject, QTimer, pyqtSignal
from PyQt6.QtGui import QResizeEvent
from PyQt6.QtWidgets import QWidget

from tourguide.config.settings import TourSettings
from tourguide.design.responsive_view import ResponsiveViewSelector, classify_device

__all__ = ["ViewModeDriver"]

_log = logging.getLogger(__name__)


class ViewModeDriver(QObject):
    view_mode_changed = pyqtSignal(str)

    def __init__(
        self,
        selector: Optional[ResponsiveViewSelector] = None,
        parent: Optional[QObject] = None,
        *,
        settle_ms: Optional[int] = None,
        controller: Any = None,
    ) -> None:
        super().__init__(parent)
        self.selector = selector or ResponsiveViewSelector()
        self.controller = controller
        if settle_ms is None:
            settle_ms = TourSettings.instance.orientation_settle_ms
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, settle_ms))
        self._timer.timeout.connect(self._on_settled)  # type: ignore[attr-defined]
        self._window: Optional[QWidget] = None

    @property
    def view_mode(self) -> str:
        return self.selector.view_mode

    @property
    def is_settling(self) -> bool:
        return self._timer.isActive()

    def watch(self, window: QWidget) -> None:
        """Track ``window``; its current size is applied immediately."""
        self.unwatch()
        self._window = window
        window.installEventFilter(self)
        before = self.selector.view_mode
        self.selector.update_size(window.width(), window.height())
        self._publish(before)

    def unwatch(self) -> None:
        if self._window is not None:
            self._window.removeEventFilter(self)
        self._window = None
        self._timer.stop()

    def update_size(self, width: int, height: int) -> str:
        profile = classify_device(width, height)
        if profile.is_landscape != self.selector.profile.is_landscape:
            self.selector.begin_orientation_change()
        before = self.selector.view_mode
        self.selector.update_profile(profile)
        if self.selector.is_transitioning:
            self._timer.start()
        else:
            self._publish(before)
        return self.selector.view_mode

    def settle_now(self) -> str:
        self._timer.stop()
        self._on_settled()
        return self.selector.view_mode

    def _on_settled(self) -> None:
        if not self.selector.is_transitioning:
            return
        before = self.selector.view_mode
        self.selector.end_orientation_change()
        _log.debug("Orientation settled; view mode %s", self.selector.view_mode)
        self._publish(before)

    def _publish(self, before: str) -> None:
        if self.controller is not None:
            device_class = self.selector.profile.device_class
            if self.controller.device_class != device_class:
                self.controller.set_device_class(device_class)
        if self.selector.view_mode != before:
            self.view_mode_changed.emit(self.selector.view_mode)

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:  # noqa: N802 - Qt API
        if obj is self._window and event.type() == QEvent.Type.Resize:
            if isinstance(event, QResizeEvent):
                size = event.size()
                self.update_size(size.width(), size.height())
        return super().eventFilter(obj, event)
