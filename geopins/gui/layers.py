"""
Overlay layers.

A layer is any object exposing the capability below; there is no base
class to inherit from.  Every ``on_*`` handler returns True when the layer
consumed the event.

    draw(painter, viewport)
    on_tap(pos, viewport) -> bool
    on_double_tap(pos, viewport) -> bool
    on_long_press(pos, viewport) -> bool
    on_touch(event, viewport) -> bool

Positions are ``(x, y)`` screen pixels.  ``on_touch`` receives the raw
press/move/release stream as :class:`TouchEvent`.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Tuple

from PyQt5 import QtCore, QtGui

from ..geo.annotation import GeoPoint
from ..geo.viewport import Projection

log = logging.getLogger(__name__)

Pixel = Tuple[float, float]


class TouchAction(enum.Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    CANCEL = "cancel"


@dataclass(frozen=True)
class TouchEvent:
    action: TouchAction
    x: float
    y: float

    @property
    def pos(self) -> Pixel:
        return (self.x, self.y)


class Layer(Protocol):
    def draw(self, painter: QtGui.QPainter, viewport: Projection) -> None: ...
    def on_tap(self, pos: Pixel, viewport: Projection) -> bool: ...
    def on_double_tap(self, pos: Pixel, viewport: Projection) -> bool: ...
    def on_long_press(self, pos: Pixel, viewport: Projection) -> bool: ...
    def on_touch(self, event: TouchEvent, viewport: Projection) -> bool: ...


class UserLocationLayer:
    """Blue dot at the user's current location with an accuracy halo.

    Taps on the dot are consumed and reported through
    ``on_location_clicked`` when set.
    """

    DOT_RADIUS_PX = 7.0
    HALO_RADIUS_PX = 22.0

    def __init__(self, on_location_clicked: Optional[Callable[[GeoPoint], None]] = None):
        self._location: Optional[GeoPoint] = None
        self.on_location_clicked = on_location_clicked

    @property
    def location(self) -> Optional[GeoPoint]:
        return self._location

    def set_location(self, point: Optional[GeoPoint]) -> None:
        self._location = point

    def draw(self, painter: QtGui.QPainter, viewport: Projection) -> None:
        if self._location is None:
            return
        x, y = viewport.project(self._location)
        center = QtCore.QPointF(x, y)
        painter.save()
        painter.setRenderHint(QtGui.QPainter.Antialiasing)
        painter.setPen(QtCore.Qt.NoPen)
        painter.setBrush(QtGui.QColor(40, 130, 255, 50))
        painter.drawEllipse(center, self.HALO_RADIUS_PX, self.HALO_RADIUS_PX)
        pen = QtGui.QPen(QtGui.QColor(255, 255, 255))
        pen.setWidthF(2.0)
        painter.setPen(pen)
        painter.setBrush(QtGui.QColor(40, 130, 255))
        painter.drawEllipse(center, self.DOT_RADIUS_PX, self.DOT_RADIUS_PX)
        painter.restore()

    def hit(self, pos: Pixel, viewport: Projection) -> bool:
        if self._location is None:
            return False
        x, y = viewport.project(self._location)
        r = self.DOT_RADIUS_PX * 2
        return abs(pos[0] - x) <= r and abs(pos[1] - y) <= r

    def on_tap(self, pos: Pixel, viewport: Projection) -> bool:
        if not self.hit(pos, viewport):
            return False
        log.debug("User location tapped at %s", self._location)
        if self.on_location_clicked is not None:
            self.on_location_clicked(self._location)
        return True

    def on_double_tap(self, pos: Pixel, viewport: Projection) -> bool:
        return False

    def on_long_press(self, pos: Pixel, viewport: Projection) -> bool:
        return False

    def on_touch(self, event: TouchEvent, viewport: Projection) -> bool:
        return False
