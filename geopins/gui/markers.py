"""
Marker glyphs — pixmaps with an anchor-relative pixel footprint.

A Marker pairs a pixmap with its bounds relative to the anchor point (the
projected coordinate of the annotation).  ``bound_marker_center_bottom``
gives the usual "pin" placement where the tip of the glyph touches the
coordinate; ``bound_marker_center`` suits badge-like glyphs.

``render_cluster_spot`` draws the glyph of a synthesized cluster annotation:
a filled disc (or a custom background image) with the member count on top.
It is a pure function of its arguments.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from PyQt5 import QtCore, QtGui

from ..cluster.config import ClusterSpot, ClusterTier


class Gravity(enum.IntFlag):
    LEFT = 0x01
    RIGHT = 0x02
    CENTER_HORIZONTAL = 0x04
    TOP = 0x10
    BOTTOM = 0x20
    CENTER_VERTICAL = 0x40

    CENTER = CENTER_HORIZONTAL | CENTER_VERTICAL
    CENTER_BOTTOM = CENTER_HORIZONTAL | BOTTOM


_HORIZONTAL_MASK = Gravity.LEFT | Gravity.RIGHT | Gravity.CENTER_HORIZONTAL
_VERTICAL_MASK = Gravity.TOP | Gravity.BOTTOM | Gravity.CENTER_VERTICAL


@dataclass(frozen=True)
class Marker:
    """A glyph and its footprint relative to the anchor pixel."""

    pixmap: QtGui.QPixmap
    bounds: QtCore.QRect

    @property
    def width(self) -> int:
        return self.bounds.width()

    @property
    def height(self) -> int:
        return self.bounds.height()

    def rect_at(self, x: float, y: float) -> QtCore.QRectF:
        """Screen rectangle covered by the glyph when anchored at (x, y)."""
        return QtCore.QRectF(self.bounds).translated(x, y)

    def draw(self, painter: QtGui.QPainter, x: float, y: float) -> None:
        painter.drawPixmap(self.rect_at(x, y), self.pixmap, QtCore.QRectF(self.pixmap.rect()))


def bound_marker(pixmap: QtGui.QPixmap, gravity: Gravity = Gravity.CENTER_BOTTOM) -> Marker:
    """Place *pixmap* so the anchor falls where *gravity* says.

    Raises ``ValueError`` when the pixmap has no positive width or height;
    that always means a broken asset on the caller's side.
    """
    width = pixmap.width()
    height = pixmap.height()
    if width <= 0 or height <= 0:
        raise ValueError(
            f"Marker glyph has no intrinsic size ({width}x{height})"
        )

    horizontal = gravity & _HORIZONTAL_MASK
    if horizontal == Gravity.LEFT:
        left = 0
    elif horizontal == Gravity.RIGHT:
        left = -width
    else:
        left = -(width // 2)

    vertical = gravity & _VERTICAL_MASK
    if vertical == Gravity.TOP:
        top = 0
    elif vertical == Gravity.CENTER_VERTICAL:
        top = -(height // 2)
    else:
        top = -height

    return Marker(pixmap, QtCore.QRect(left, top, width, height))


def bound_marker_center(pixmap: QtGui.QPixmap) -> Marker:
    return bound_marker(pixmap, Gravity.CENTER)


def bound_marker_center_bottom(pixmap: QtGui.QPixmap) -> Marker:
    return bound_marker(pixmap, Gravity.CENTER_BOTTOM)


def marker_from_file(path: str, gravity: Gravity = Gravity.CENTER_BOTTOM) -> Marker:
    return bound_marker(QtGui.QPixmap(path), gravity)


def default_pin_marker(color: str = "#2a7fff", width: int = 22, height: int = 34) -> Marker:
    """Draw a simple map pin: round head over a pointed tail."""
    pm = QtGui.QPixmap(width, height)
    pm.fill(QtCore.Qt.transparent)

    painter = QtGui.QPainter(pm)
    painter.setRenderHint(QtGui.QPainter.Antialiasing)
    fill = QtGui.QColor(color)
    pen = QtGui.QPen(fill.darker(150))
    pen.setWidthF(1.5)
    painter.setPen(pen)
    painter.setBrush(fill)

    r = (width - 2) / 2.0
    cx = width / 2.0
    tail = QtGui.QPolygonF([
        QtCore.QPointF(cx - r * 0.6, r * 1.5),
        QtCore.QPointF(cx + r * 0.6, r * 1.5),
        QtCore.QPointF(cx, height - 1),
    ])
    painter.drawPolygon(tail)
    painter.drawEllipse(QtCore.QPointF(cx, r + 1), r, r)

    # Hole in the head
    painter.setPen(QtCore.Qt.NoPen)
    painter.setBrush(QtGui.QColor(255, 255, 255, 220))
    painter.drawEllipse(QtCore.QPointF(cx, r + 1), r * 0.35, r * 0.35)
    painter.end()

    return bound_marker_center_bottom(pm)


def render_cluster_spot(tier: ClusterTier, total: int, spot: ClusterSpot) -> Marker:
    """Render the marker of a cluster with *total* members."""
    width, height = spot.width, spot.height
    if width <= 0 or height <= 0:
        raise ValueError(
            f"Cluster spot for tier {tier.value} has no size ({width}x{height})"
        )

    pm = QtGui.QPixmap(width, height)
    pm.fill(QtCore.Qt.transparent)
    rect = QtCore.QRectF(0, 0, width, height)

    painter = QtGui.QPainter(pm)
    painter.setRenderHint(QtGui.QPainter.Antialiasing)
    painter.setRenderHint(QtGui.QPainter.TextAntialiasing)

    background: Optional[QtGui.QPixmap] = None
    if spot.image_path:
        background = QtGui.QPixmap(spot.image_path)
        if background.isNull():
            background = None

    if background is not None:
        painter.drawPixmap(rect, background, QtCore.QRectF(background.rect()))
    else:
        base = QtGui.QColor(spot.color)
        grad = QtGui.QRadialGradient(rect.center(), min(width, height) / 2.0)
        grad.setColorAt(0.0, base.lighter(130))
        grad.setColorAt(0.75, base)
        grad.setColorAt(1.0, QtGui.QColor(base.red(), base.green(), base.blue(), 90))
        painter.setPen(QtCore.Qt.NoPen)
        painter.setBrush(QtGui.QBrush(grad))
        painter.drawEllipse(rect.adjusted(1, 1, -1, -1))

    font = painter.font()
    font.setPixelSize(max(1, spot.text_size))
    font.setBold(True)
    painter.setFont(font)
    painter.setPen(QtGui.QColor(spot.text_color))
    painter.drawText(rect, QtCore.Qt.AlignCenter, spot.title or str(total))
    painter.end()

    return bound_marker_center_bottom(pm)
