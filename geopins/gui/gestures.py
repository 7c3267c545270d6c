"""
Gesture detector — turns press/move/release into taps and presses.

Signals
───────
  tap_up(pos)                 button released without moving (every tap)
  single_tap_confirmed(pos)   no second tap followed within DOUBLE_TAP_MS
  double_tapped(pos)          second tap landed near the first in time
  long_pressed(pos)           button held still for LONG_PRESS_MS

Moving further than TAP_SLOP_PX turns the press into a drag and cancels
both the long press and the tap.
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

from PyQt5 import QtCore

log = logging.getLogger(__name__)

Pixel = Tuple[float, float]


class GestureDetector(QtCore.QObject):

    tap_up = QtCore.pyqtSignal(object)
    single_tap_confirmed = QtCore.pyqtSignal(object)
    double_tapped = QtCore.pyqtSignal(object)
    long_pressed = QtCore.pyqtSignal(object)

    TAP_SLOP_PX = 8.0
    DOUBLE_TAP_SLOP_PX = 40.0
    LONG_PRESS_MS = 500
    DOUBLE_TAP_MS = 300

    def __init__(self, parent: Optional[QtCore.QObject] = None):
        super().__init__(parent)
        self._down_pos: Optional[Pixel] = None
        self._last_tap_pos: Optional[Pixel] = None
        self._moved = False
        self._long_press_fired = False
        self._is_double_tap = False

        self._long_press_timer = QtCore.QTimer(self)
        self._long_press_timer.setSingleShot(True)
        self._long_press_timer.setInterval(self.LONG_PRESS_MS)
        self._long_press_timer.timeout.connect(self._on_long_press)

        self._tap_timer = QtCore.QTimer(self)
        self._tap_timer.setSingleShot(True)
        self._tap_timer.setInterval(self.DOUBLE_TAP_MS)
        self._tap_timer.timeout.connect(self._on_tap_timeout)

    @property
    def is_dragging(self) -> bool:
        return self._down_pos is not None and self._moved

    def press(self, pos: Pixel) -> None:
        self._down_pos = pos
        self._moved = False
        self._long_press_fired = False
        self._is_double_tap = (
            self._tap_timer.isActive()
            and self._last_tap_pos is not None
            and _distance(pos, self._last_tap_pos) <= self.DOUBLE_TAP_SLOP_PX
        )
        if self._is_double_tap:
            self._tap_timer.stop()
        self._long_press_timer.start()

    def move(self, pos: Pixel) -> None:
        if self._down_pos is None or self._moved:
            return
        if _distance(pos, self._down_pos) > self.TAP_SLOP_PX:
            self._moved = True
            self._is_double_tap = False
            self._long_press_timer.stop()

    def release(self, pos: Pixel) -> None:
        if self._down_pos is None:
            return
        self._long_press_timer.stop()
        down, self._down_pos = self._down_pos, None
        if self._long_press_fired or self._moved:
            return
        if self._is_double_tap:
            self._is_double_tap = False
            self._last_tap_pos = None
            log.debug("Double tap at (%.0f, %.0f)", down[0], down[1])
            self.double_tapped.emit(down)
            return
        self._last_tap_pos = down
        self.tap_up.emit(down)
        self._tap_timer.start()

    def cancel(self) -> None:
        self._down_pos = None
        self._is_double_tap = False
        self._long_press_timer.stop()
        self._tap_timer.stop()

    def _on_long_press(self) -> None:
        if self._down_pos is None:
            return
        self._long_press_fired = True
        self._tap_timer.stop()
        self.long_pressed.emit(self._down_pos)

    def _on_tap_timeout(self) -> None:
        if self._last_tap_pos is not None:
            self.single_tap_confirmed.emit(self._last_tap_pos)


def _distance(a: Pixel, b: Pixel) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])
