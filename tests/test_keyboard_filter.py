from PyQt6.QtCore import QEvent, Qt
from PyQt6.QtGui import QKeyEvent
from PyQt6.QtWidgets import QLineEdit, QPushButton, QSpinBox

from tourguide.components.tour_keyboard_filter import (
    TourKeyboardFilter,
    dispatch_key_event,
    is_text_input,
    key_name,
)
from tourguide.design.tour_steps import create_step, create_tour_path
from tourguide.services.tour_controller import NavigationOutcome, TourController


def _key(key, mods=Qt.KeyboardModifier.NoModifier, text=""):
    return QKeyEvent(QEvent.Type.KeyPress, key, mods, text)


def _controller():
    path = create_tour_path("p", "P", [create_step(s, s, s, s) for s in ("a", "b", "c", "d", "e")])
    ctl = TourController([path])
    ctl.start_tour("p")
    return ctl


def test_key_names(qtbot):
    assert key_name(_key(Qt.Key.Key_Right)) == "ArrowRight"
    assert key_name(_key(Qt.Key.Key_Enter)) == "Enter"
    assert key_name(_key(Qt.Key.Key_Return)) == "Enter"
    assert key_name(_key(Qt.Key.Key_Space, text=" ")) == " "
    assert key_name(_key(Qt.Key.Key_PageDown)) == "PageDown"
    assert key_name(_key(Qt.Key.Key_N, Qt.KeyboardModifier.ShiftModifier, "N")) == "n"
    assert key_name(_key(Qt.Key.Key_F5)) is None


def test_text_input_detection(qtbot):
    assert is_text_input(QLineEdit())
    assert is_text_input(QSpinBox())
    assert not is_text_input(QPushButton())
    assert not is_text_input(None)


def test_dispatch_drives_controller(qtbot):
    ctl = _controller()
    assert dispatch_key_event(ctl, _key(Qt.Key.Key_Right)) is NavigationOutcome.ADVANCED
    assert dispatch_key_event(ctl, _key(Qt.Key.Key_End)) is NavigationOutcome.JUMPED
    assert ctl.current_step == 4
    assert dispatch_key_event(ctl, _key(Qt.Key.Key_PageUp)) is NavigationOutcome.JUMPED
    assert ctl.current_step == 1
    assert dispatch_key_event(ctl, _key(Qt.Key.Key_F5)) is None


def test_dispatch_ignores_keys_in_text_fields(qtbot):
    ctl = _controller()
    field = QLineEdit()
    outcome = dispatch_key_event(ctl, _key(Qt.Key.Key_Right), field)
    assert outcome is NavigationOutcome.IGNORED
    assert ctl.current_step == 0


def test_ctrl_letter_not_mapped(qtbot):
    ctl = _controller()
    outcome = dispatch_key_event(ctl, _key(Qt.Key.Key_S, Qt.KeyboardModifier.ControlModifier, "s"))
    assert outcome is NavigationOutcome.IGNORED
    assert ctl.is_active


def test_filter_passes_through_when_inactive(qtbot):
    ctl = _controller()
    ctl.close()
    key_filter = TourKeyboardFilter(ctl)
    button = QPushButton()
    assert key_filter.eventFilter(button, _key(Qt.Key.Key_Right)) is False


def test_filter_install_uninstall(qtbot):
    key_filter = TourKeyboardFilter(_controller())
    key_filter.install()
    key_filter.install()
    key_filter.uninstall()
    key_filter.uninstall()
