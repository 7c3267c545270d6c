"""
Map viewport — projection between geographic and screen coordinates.

The viewport is a Web Mercator (EPSG:3857) camera: a centre coordinate, a
fractional zoom level and a pixel size.  At zoom 0 one 256-px tile covers
the whole world; each zoom level halves the metres-per-pixel resolution.

Screen pixels have their origin at the top-left corner of the widget, x
growing right and y growing down.

Usage
-----
    vp = MapViewport(center=GeoPoint(46.5, 2.3), zoom=5, width=800, height=600)
    x, y = vp.project(GeoPoint(48.8566, 2.3510))
    vp.current_region()
"""
from __future__ import annotations

import math
from typing import Iterable, Optional, Protocol, Sequence, Tuple

import numpy as np
import pyproj

from .annotation import GeoPoint
from .region import CoordinateRegion

WGS84 = pyproj.CRS("EPSG:4326")
WEB_MERCATOR = pyproj.CRS("EPSG:3857")

_to_merc = pyproj.Transformer.from_crs(WGS84, WEB_MERCATOR, always_xy=True).transform
_to_lonlat = pyproj.Transformer.from_crs(WEB_MERCATOR, WGS84, always_xy=True).transform

INITIAL_RES = 156543.03392804097  # m/px at z=0 (3857, 256px)
MAX_LATITUDE = 85.05112878        # Web Mercator cut-off
MIN_ZOOM = 0.0
MAX_ZOOM = 21.0

Pixel = Tuple[float, float]


class Projection(Protocol):
    """What the clusterer and the overlays need from a viewport."""

    density: float

    def project(self, point: GeoPoint) -> Pixel: ...
    def unproject(self, pixel: Pixel) -> GeoPoint: ...


class MapViewport:
    """Mutable camera over a Web Mercator map."""

    def __init__(
        self,
        center: Optional[GeoPoint] = None,
        zoom: float = 2.0,
        width: int = 0,
        height: int = 0,
        density: float = 1.0,
    ):
        self._center = _clamp_point(center or GeoPoint(0.0, 0.0))
        self._zoom = _clamp_zoom(zoom)
        self.width = width
        self.height = height
        self.density = density

    # ── State ─────────────────────────────────────────────────────────

    @property
    def center(self) -> GeoPoint:
        return self._center

    @center.setter
    def center(self, point: GeoPoint) -> None:
        self._center = _clamp_point(point)

    @property
    def zoom(self) -> float:
        return self._zoom

    @zoom.setter
    def zoom(self, value: float) -> None:
        self._zoom = _clamp_zoom(value)

    @property
    def resolution(self) -> float:
        """Metres per screen pixel at the current zoom."""
        return INITIAL_RES / (2 ** self._zoom)

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    # ── Projection ────────────────────────────────────────────────────

    def project(self, point: GeoPoint) -> Pixel:
        """Geographic coordinate → screen pixel."""
        mx, my = _to_merc(point.lon, point.lat)
        cx, cy = _to_merc(self._center.lon, self._center.lat)
        res = self.resolution
        return (
            (mx - cx) / res + self.width / 2.0,
            (cy - my) / res + self.height / 2.0,
        )

    def project_many(self, points: Sequence[GeoPoint]) -> np.ndarray:
        """Project a batch of points; returns an ``(n, 2)`` float array."""
        if not points:
            return np.empty((0, 2), dtype=float)
        lons = np.fromiter((p.lon for p in points), dtype=float, count=len(points))
        lats = np.fromiter((p.lat for p in points), dtype=float, count=len(points))
        mx, my = _to_merc(lons, lats)
        cx, cy = _to_merc(self._center.lon, self._center.lat)
        res = self.resolution
        out = np.empty((len(points), 2), dtype=float)
        out[:, 0] = (np.asarray(mx) - cx) / res + self.width / 2.0
        out[:, 1] = (cy - np.asarray(my)) / res + self.height / 2.0
        return out

    def unproject(self, pixel: Pixel) -> GeoPoint:
        """Screen pixel → geographic coordinate."""
        px, py = pixel
        cx, cy = _to_merc(self._center.lon, self._center.lat)
        res = self.resolution
        mx = cx + (px - self.width / 2.0) * res
        my = cy - (py - self.height / 2.0) * res
        lon, lat = _to_lonlat(mx, my)
        return GeoPoint(lat, lon)

    def current_region(self) -> CoordinateRegion:
        """Snapshot of the visible area, rounded to microdegrees."""
        top_left = self.unproject((0.0, 0.0))
        bottom_right = self.unproject((float(self.width), float(self.height)))
        return CoordinateRegion(
            latitude=round(self._center.lat, 6),
            longitude=round(self._center.lon, 6),
            latitude_span=round(abs(top_left.lat - bottom_right.lat), 6),
            longitude_span=round(abs(bottom_right.lon - top_left.lon), 6),
        )

    # ── Navigation ────────────────────────────────────────────────────

    def pan_by(self, dx: float, dy: float) -> None:
        """Move the camera so the map content shifts by (-dx, -dy) pixels."""
        self.center = self.unproject((self.width / 2.0 + dx, self.height / 2.0 + dy))

    def zoom_by(self, delta: float, anchor: Optional[Pixel] = None) -> None:
        """Change zoom by *delta* levels keeping *anchor* fixed on screen."""
        if anchor is None:
            self.zoom = self._zoom + delta
            return
        fixed = self.unproject(anchor)
        self.zoom = self._zoom + delta
        ax, ay = self.project(fixed)
        self.pan_by(ax - anchor[0], ay - anchor[1])

    def zoom_to_span(self, points: Iterable[GeoPoint], padding_px: int = 32) -> None:
        """Centre on *points* and pick the largest zoom that shows them all."""
        pts = list(points)
        if not pts or self.width <= 0 or self.height <= 0:
            return
        lats = [p.lat for p in pts]
        lons = [p.lon for p in pts]
        self.center = GeoPoint((min(lats) + max(lats)) / 2.0, (min(lons) + max(lons)) / 2.0)
        x0, y0 = _to_merc(min(lons), min(lats))
        x1, y1 = _to_merc(max(lons), max(lats))
        span_m = max(abs(x1 - x0), abs(y1 - y0))
        usable = max(1, min(self.width, self.height) - 2 * padding_px)
        if span_m <= 0:
            return
        self.zoom = math.log2(INITIAL_RES * usable / span_m)


def _clamp_point(point: GeoPoint) -> GeoPoint:
    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, point.lat))
    lon = ((point.lon + 180.0) % 360.0) - 180.0
    if lat == point.lat and lon == point.lon:
        return point
    return GeoPoint(lat, lon)


def _clamp_zoom(zoom: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, float(zoom)))
