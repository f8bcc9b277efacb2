"""Qt key event bridge for tour keyboard navigation.

Translates ``QKeyEvent`` objects into the key names used by
``design.keyboard_navigation`` and forwards them to a ``TourController``.
Installed on the ``QApplication``; an event is only handled for the widget
that currently has focus (or the active window when nothing has focus) so a
key press propagating up the parent chain is processed once.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from PyQt6.QtCore import QEvent, QObject, Qt
from PyQt6.QtGui import QKeyEvent
from PyQt6.QtWidgets import (
    QAbstractSpinBox,
    QApplication,
    QLineEdit,
    QPlainTextEdit,
    QTextEdit,
    QWidget,
)

from tourguide.services.tour_controller import NavigationOutcome

__all__ = ["key_name", "is_text_input", "dispatch_key_event", "TourKeyboardFilter"]

_KEY_NAMES: Dict[Qt.Key, str] = {
    Qt.Key.Key_Right: "ArrowRight",
    Qt.Key.Key_Left: "ArrowLeft",
    Qt.Key.Key_Up: "ArrowUp",
    Qt.Key.Key_Down: "ArrowDown",
    Qt.Key.Key_Return: "Enter",
    Qt.Key.Key_Enter: "Enter",
    Qt.Key.Key_Space: " ",
    Qt.Key.Key_Escape: "Escape",
    Qt.Key.Key_Home: "Home",
    Qt.Key.Key_End: "End",
    Qt.Key.Key_PageUp: "PageUp",
    Qt.Key.Key_PageDown: "PageDown",
    Qt.Key.Key_Question: "?",
}


def key_name(event: QKeyEvent) -> Optional[str]:
    try:
        key = Qt.Key(event.key())
    except ValueError:
        key = None
    if key is not None and key in _KEY_NAMES:
        return _KEY_NAMES[key]
    text = event.text()
    return text.lower() if len(text) == 1 and text.isprintable() else None


def is_text_input(widget: Optional[QWidget]) -> bool:
    return isinstance(widget, (QLineEdit, QTextEdit, QPlainTextEdit, QAbstractSpinBox))


def dispatch_key_event(controller: Any, event: QKeyEvent, focus_widget: Optional[QWidget] = None) -> Any:
    """Map ``event`` and hand it to ``controller.handle_key``; returns the outcome or None."""
    name = key_name(event)
    if name is None:
        return None
    mods = event.modifiers()
    return controller.handle_key(
        name,
        shift=bool(mods & Qt.KeyboardModifier.ShiftModifier),
        ctrl=bool(mods & Qt.KeyboardModifier.ControlModifier),
        meta=bool(mods & Qt.KeyboardModifier.MetaModifier),
        in_text_input=is_text_input(focus_widget),
    )


class TourKeyboardFilter(QObject):
    def __init__(self, controller: Any, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self._installed = False

    def install(self) -> None:
        app = QApplication.instance()
        if app is not None and not self._installed:
            app.installEventFilter(self)
            self._installed = True

    def uninstall(self) -> None:
        app = QApplication.instance()
        if app is not None and self._installed:
            app.removeEventFilter(self)
        self._installed = False

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:  # noqa: N802 - Qt API
        if event.type() != QEvent.Type.KeyPress or not isinstance(event, QKeyEvent):
            return False
        if not self._controller.is_active:
            return False
        focus = QApplication.focusWidget()
        target = focus if focus is not None else QApplication.activeWindow()
        if obj is not target:
            return False
        outcome = dispatch_key_event(self._controller, event, focus)
        return outcome is not None and outcome is not NavigationOutcome.IGNORED
