import pytest

from tourguide.design.gesture_navigation import (
    LANDSCAPE_SWIPE_THRESHOLD,
    SWIPE_THRESHOLD,
    SwipeDirection,
    classify_swipe,
    map_swipe,
    swipe_threshold,
)
from tourguide.design.keyboard_navigation import NavigationAction


@pytest.mark.parametrize(
    "dx,dy,expected",
    [
        (-120, 10, SwipeDirection.LEFT),
        (120, -10, SwipeDirection.RIGHT),
        (5, -90, SwipeDirection.UP),
        (-5, 90, SwipeDirection.DOWN),
        (40, 0, None),
        (0, -50, None),
        (0, 0, None),
    ],
)
def test_classify_swipe_by_dominant_axis(dx, dy, expected):
    assert classify_swipe(dx, dy) is expected


def test_landscape_threshold_is_lower():
    assert swipe_threshold(False) == SWIPE_THRESHOLD == 50
    assert swipe_threshold(True) == LANDSCAPE_SWIPE_THRESHOLD == 30
    assert classify_swipe(-40, 0, swipe_threshold(True)) is SwipeDirection.LEFT
    assert classify_swipe(-40, 0, swipe_threshold(False)) is None


def test_horizontal_swipes_map_to_navigation():
    assert map_swipe(SwipeDirection.LEFT) is NavigationAction.NEXT
    assert map_swipe(SwipeDirection.RIGHT) is NavigationAction.PREVIOUS


def test_rtl_swaps_horizontal_swipes():
    assert map_swipe(SwipeDirection.LEFT, rtl=True) is NavigationAction.PREVIOUS
    assert map_swipe(SwipeDirection.RIGHT, rtl=True) is NavigationAction.NEXT


def test_swipe_down_closes_in_portrait_only():
    assert map_swipe(SwipeDirection.DOWN) is NavigationAction.ESCAPE
    assert map_swipe(SwipeDirection.DOWN, landscape=True) is None
    assert map_swipe(SwipeDirection.UP) is None
    assert map_swipe(None) is None
