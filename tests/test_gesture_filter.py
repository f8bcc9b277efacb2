from PyQt6.QtCore import QEvent, QPointF, Qt
from PyQt6.QtGui import QEventPoint, QPointingDevice, QTouchEvent
from PyQt6.QtWidgets import QWidget

from tourguide.components.tour_gesture_filter import TourGestureFilter
from tourguide.design.tour_steps import create_step, create_tour_path
from tourguide.services.tour_controller import NavigationOutcome, TourController


def _controller():
    path = create_tour_path("p", "P", [create_step(s, s, s, s) for s in ("a", "b", "c")])
    ctl = TourController([path])
    ctl.start_tour("p")
    return ctl


def _touch(kind, state, x, y):
    point = QEventPoint(0, state, QPointF(x, y), QPointF(x, y))
    device = QPointingDevice.primaryPointingDevice()
    return QTouchEvent(kind, device, Qt.KeyboardModifier.NoModifier, [point])


def test_drag_left_then_right(qtbot):
    ctl = _controller()
    gestures = TourGestureFilter(ctl)
    gestures.begin(300, 200)
    assert gestures.end(150, 210) is NavigationOutcome.ADVANCED
    assert ctl.current_step == 1
    gestures.begin(100, 200)
    assert gestures.end(220, 190) is NavigationOutcome.RETREATED
    assert ctl.current_step == 0


def test_tap_and_end_without_begin(qtbot):
    ctl = _controller()
    gestures = TourGestureFilter(ctl)
    assert gestures.end(10, 10) is None
    gestures.begin(100, 100)
    assert gestures.end(110, 105) is NavigationOutcome.IGNORED
    assert ctl.current_step == 0


def test_swipe_down_closes_unless_landscape(qtbot):
    ctl = _controller()
    gestures = TourGestureFilter(ctl)
    gestures.begin(100, 100)
    assert gestures.end(100, 200, landscape=True) is NavigationOutcome.IGNORED
    assert ctl.is_active
    gestures.begin(100, 100)
    assert gestures.end(100, 200) is NavigationOutcome.CLOSED
    assert not ctl.is_active


def test_inactive_controller_ignores_drags(qtbot):
    ctl = _controller()
    ctl.close()
    gestures = TourGestureFilter(ctl)
    gestures.begin(300, 100)
    assert gestures.end(100, 100) is None


def test_touch_events_drive_filter(qtbot):
    ctl = _controller()
    popup = QWidget()
    qtbot.addWidget(popup)
    popup.resize(400, 600)
    gestures = TourGestureFilter(ctl)
    gestures.install(popup)
    begin = _touch(QEvent.Type.TouchBegin, QEventPoint.State.Pressed, 300, 300)
    end = _touch(QEvent.Type.TouchEnd, QEventPoint.State.Released, 120, 310)
    assert gestures.eventFilter(popup, begin) is True
    assert gestures.eventFilter(popup, end) is True
    assert ctl.current_step == 1
    assert gestures.eventFilter(popup, QEvent(QEvent.Type.MouseMove)) is False
    gestures.uninstall()
