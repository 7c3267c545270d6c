"""Tests for turning press/move/release into taps, double taps and long presses."""
from __future__ import annotations

import pytest
from PyQt5 import QtCore

from geopins.gui.gestures import GestureDetector


@pytest.fixture
def detector(qapp):
    d = GestureDetector()
    d.events = []
    d.tap_up.connect(lambda pos: d.events.append(("tap_up", pos)))
    d.single_tap_confirmed.connect(lambda pos: d.events.append(("single_tap", pos)))
    d.double_tapped.connect(lambda pos: d.events.append(("double_tap", pos)))
    d.long_pressed.connect(lambda pos: d.events.append(("long_press", pos)))
    yield d
    d.cancel()


def test_tap_is_confirmed_when_tap_timer_fires(detector):
    detector.press((10.0, 10.0))
    detector.release((11.0, 10.0))
    assert detector.events == [("tap_up", (10.0, 10.0))]
    assert detector._tap_timer.isActive()

    detector._on_tap_timeout()
    assert detector.events == [("tap_up", (10.0, 10.0)), ("single_tap", (10.0, 10.0))]


def test_second_tap_nearby_is_a_double_tap(detector):
    detector.press((10.0, 10.0))
    detector.release((10.0, 10.0))
    detector.press((10.0 + detector.DOUBLE_TAP_SLOP_PX / 2, 12.0))
    assert not detector._tap_timer.isActive()
    detector.release((10.0 + detector.DOUBLE_TAP_SLOP_PX / 2, 12.0))

    assert detector.events == [
        ("tap_up", (10.0, 10.0)),
        ("double_tap", (10.0 + detector.DOUBLE_TAP_SLOP_PX / 2, 12.0)),
    ]
    assert not detector._tap_timer.isActive()


def test_second_tap_far_away_is_two_taps(detector):
    detector.press((10.0, 10.0))
    detector.release((10.0, 10.0))
    far = (10.0 + detector.DOUBLE_TAP_SLOP_PX * 2, 10.0)
    detector.press(far)
    detector.release(far)
    assert detector.events == [("tap_up", (10.0, 10.0)), ("tap_up", far)]


def test_hold_is_a_long_press_not_a_tap(detector):
    detector.press((5.0, 5.0))
    assert detector._long_press_timer.isActive()
    detector._on_long_press()
    detector.release((5.0, 5.0))

    assert detector.events == [("long_press", (5.0, 5.0))]
    assert not detector._tap_timer.isActive()


def test_moving_past_slop_is_a_drag(detector):
    detector.press((0.0, 0.0))
    detector.move((detector.TAP_SLOP_PX + 1, 0.0))
    assert detector.is_dragging
    assert not detector._long_press_timer.isActive()
    detector.release((40.0, 0.0))

    assert detector.events == []
    assert not detector.is_dragging


def test_small_jitter_is_still_a_tap(detector):
    detector.press((0.0, 0.0))
    detector.move((detector.TAP_SLOP_PX - 1, 0.0))
    assert not detector.is_dragging
    detector.release((detector.TAP_SLOP_PX - 1, 0.0))
    assert detector.events == [("tap_up", (0.0, 0.0))]


def test_cancel_stops_both_timers(detector):
    detector.press((0.0, 0.0))
    detector.release((0.0, 0.0))
    detector.press((200.0, 200.0))
    assert detector._tap_timer.isActive()
    assert detector._long_press_timer.isActive()

    detector.cancel()
    assert not detector._tap_timer.isActive()
    assert not detector._long_press_timer.isActive()
    detector.release((200.0, 200.0))
    assert detector.events == [("tap_up", (0.0, 0.0))]


def test_timers_fire_from_event_loop(detector):
    detector._tap_timer.setInterval(10)
    detector._long_press_timer.setInterval(10)

    detector.press((1.0, 2.0))
    loop = QtCore.QEventLoop()
    QtCore.QTimer.singleShot(100, loop.quit)
    loop.exec_()
    detector.release((1.0, 2.0))

    assert detector.events == [("long_press", (1.0, 2.0))]
