"""
Annotated map widget — pan/zoom map with clustered, selectable annotations.

Renders a Web Mercator viewport as a dark map with:
  - Lat/lon graticule (no tile imagery)
  - User location dot (when tracking is enabled)
  - Annotation markers, one layer, selectable one at a time
  - Caller-added layers on top
  - Callout bubble above the selected marker
  - Floating status line with centre, zoom and annotation count

Interaction: drag to pan, wheel to zoom under the cursor, tap a marker to
select it, tap the background to deselect, double tap to zoom in, long
press to report a coordinate.

The widget is the glue between the engine pieces: it feeds mouse input to
the GestureDetector, routes gestures through the OverlayContainer, turns
selection transitions of the AnnotationsOverlay into callout show/dismiss,
and runs the RegionChangeWatcher on every paint.
"""
from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

from PyQt5 import QtCore, QtGui, QtWidgets

from ..config import MapSettings
from ..geo.annotation import Annotation, GeoPoint
from ..geo.region import CoordinateRegion
from ..geo.viewport import MapViewport
from .annotations_overlay import INVALID_POSITION, AnnotationsOverlay
from .callout import CalloutView
from .gestures import GestureDetector
from .layers import Layer, TouchAction, TouchEvent, UserLocationLayer
from .markers import Marker
from .overlay_container import OverlayContainer
from .region_watcher import RegionChangeWatcher

log = logging.getLogger(__name__)

Pixel = Tuple[float, float]

_WHEEL_ZOOM_STEP = math.log2(1.12)
_GRATICULE_STEPS = (30.0, 10.0, 5.0, 2.0, 1.0, 0.5, 0.2, 0.1, 0.05, 0.02, 0.01)
_GRATICULE_MIN_PX = 90.0


class AnnotatedMapWidget(QtWidgets.QWidget):
    """Interactive map showing annotations with single selection.

    Signals
    -------
    region_changed(CoordinateRegion)
        Emitted while the visible region moves.
    region_confirmed(CoordinateRegion)
        Emitted once the region has settled (re-cluster here).
    annotation_selected(int, Annotation)
    annotation_deselected(int, Annotation)
    annotation_clicked(int, Annotation)
        Emitted when the callout of the selected annotation is clicked.
    background_tapped(tuple)
        Tap that no layer consumed (selection is cleared first).
    background_double_tapped(tuple)
    long_pressed(GeoPoint)
    user_location_clicked(GeoPoint)
    """

    region_changed = QtCore.pyqtSignal(object)
    region_confirmed = QtCore.pyqtSignal(object)
    annotation_selected = QtCore.pyqtSignal(int, object)
    annotation_deselected = QtCore.pyqtSignal(int, object)
    annotation_clicked = QtCore.pyqtSignal(int, object)
    background_tapped = QtCore.pyqtSignal(object)
    background_double_tapped = QtCore.pyqtSignal(object)
    long_pressed = QtCore.pyqtSignal(object)
    user_location_clicked = QtCore.pyqtSignal(object)

    def __init__(
        self,
        settings: Optional[MapSettings] = None,
        parent: Optional[QtWidgets.QWidget] = None,
    ):
        super().__init__(parent)
        self._settings = settings or MapSettings()
        self.setMouseTracking(False)
        self.setAttribute(QtCore.Qt.WA_OpaquePaintEvent, True)
        self.setMinimumSize(200, 150)

        self._viewport = MapViewport(
            center=GeoPoint(self._settings.center_lat, self._settings.center_lon),
            zoom=self._settings.zoom,
            width=self.width(),
            height=self.height(),
            density=self.logicalDpiX() / 96.0,
        )

        self._container = OverlayContainer(self)
        self._annotations_overlay: Optional[AnnotationsOverlay] = None
        self._location_layer: Optional[UserLocationLayer] = None
        self._actionable = True
        self._drag_last: Optional[Pixel] = None

        # Two callout views, used in turn
        self._callouts: List[Optional[CalloutView]] = [None, None]
        self._callout_index = 0

        self._gestures = GestureDetector(self)
        self._gestures.tap_up.connect(self._on_tap_up)
        self._gestures.single_tap_confirmed.connect(self._on_single_tap_confirmed)
        self._gestures.double_tapped.connect(self._on_double_tapped)
        self._gestures.long_pressed.connect(self._on_long_pressed)

        self._region_watcher = RegionChangeWatcher(
            self._viewport.current_region,
            delay_ms=self._settings.region_confirm_delay_ms,
            parent=self,
        )
        self._region_watcher.region_changed.connect(self._on_region_changed)
        self._region_watcher.region_confirmed.connect(self.region_confirmed)

        # ── Bottom floating status label ──
        self._overlay_bottom = QtWidgets.QWidget(self)
        self._overlay_bottom.setAttribute(QtCore.Qt.WA_TransparentForMouseEvents, True)
        self._overlay_bottom.setStyleSheet("background: transparent;")
        obl = QtWidgets.QVBoxLayout(self._overlay_bottom)
        obl.setContentsMargins(6, 0, 6, 4)
        obl.setSpacing(0)

        self._detail_label = QtWidgets.QLabel("")
        self._detail_label.setStyleSheet(
            "color: rgba(112,136,152,220); font-family: 'Helvetica Neue Mono'; "
            "font-size: 10px; padding: 1px 4px; background: transparent;"
        )
        obl.addWidget(self._detail_label)

        if self._settings.user_tracking:
            self.set_user_tracking_enabled(True)

    # ── Accessors ─────────────────────────────────────────────────────

    @property
    def viewport(self) -> MapViewport:
        return self._viewport

    @property
    def overlay_container(self) -> OverlayContainer:
        return self._container

    @property
    def annotations_overlay(self) -> Optional[AnnotationsOverlay]:
        return self._annotations_overlay

    @property
    def region_watcher(self) -> RegionChangeWatcher:
        return self._region_watcher

    @property
    def settings(self) -> MapSettings:
        return self._settings

    def coordinate_region(self) -> CoordinateRegion:
        return self._viewport.current_region()

    def is_actionable(self) -> bool:
        return self._actionable

    def set_actionable(self, actionable: bool) -> None:
        """When False the map ignores every mouse and wheel event."""
        self._actionable = actionable
        if not actionable:
            self._gestures.cancel()
            if self._drag_last is not None:
                # The release will be ignored, so close the press here
                self._drag_last = None
                self._region_watcher.end_gesture()

    # ── Annotations ───────────────────────────────────────────────────

    def set_annotations(
        self,
        annotations: Optional[Sequence[Annotation]],
        default_marker: Optional[Marker] = None,
    ) -> None:
        """Replace the annotations layer; ``None`` removes it.

        The new layer starts with nothing selected.  A callout still showing
        for the previous layer is dismissed first.
        """
        previous = self._annotations_overlay
        if previous is not None and previous.selected_index != INVALID_POSITION:
            self.dismiss_callout(previous.selected_index)

        if annotations is None:
            self._annotations_overlay = None
        else:
            if default_marker is None and previous is not None:
                default_marker = previous.default_marker
            self._annotations_overlay = AnnotationsOverlay(self, annotations, default_marker)
        self._container.set_annotations_layer(self._annotations_overlay)
        self._update_status()
        self.update()

    def selected_annotation_position(self) -> int:
        if self._annotations_overlay is not None:
            return self._annotations_overlay.selected_index
        return INVALID_POSITION

    def selected_annotation(self) -> Optional[Annotation]:
        if self._annotations_overlay is not None:
            return self._annotations_overlay.selected_annotation
        return None

    def set_selected_annotation(self, position: int) -> None:
        if self._annotations_overlay is not None:
            self._annotations_overlay.set_selected_index(position)

    # ── Caller layers ─────────────────────────────────────────────────

    def add_layer(self, layer: Layer, index: Optional[int] = None) -> None:
        self._container.add_layer(layer, index)
        self.update()

    def remove_layer(self, layer: Layer) -> None:
        self._container.remove_layer(layer)
        self.update()

    def remove_layer_at(self, index: int) -> None:
        self._container.remove_layer_at(index)
        self.update()

    def remove_all_layers(self) -> None:
        self._container.remove_all_layers()
        self.update()

    def index_of_layer(self, layer: Layer) -> int:
        return self._container.index_of_layer(layer)

    # ── User location ─────────────────────────────────────────────────

    def is_user_tracking_enabled(self) -> bool:
        return self._location_layer is not None

    def set_user_tracking_enabled(self, enabled: bool) -> None:
        if enabled == self.is_user_tracking_enabled():
            return
        if enabled:
            self._location_layer = UserLocationLayer(self.user_location_clicked.emit)
            self._container.set_user_location_layer(self._location_layer)
        else:
            self._container.set_user_location_layer(None)
            self._location_layer = None
        self.update()

    def set_user_location(self, point: Optional[GeoPoint]) -> None:
        if self._location_layer is None:
            return
        self._location_layer.set_location(point)
        self.update()

    def user_location(self) -> Optional[GeoPoint]:
        if self._location_layer is None:
            return None
        return self._location_layer.location

    def center_on_user_location(self) -> None:
        if self._location_layer is None:
            return
        location = self._location_layer.location
        if location is None:
            log.warning("Unable to center on user location: no fix yet")
            self._detail_label.setText("Unable to locate you")
            return
        self.set_center(location)

    # ── Viewport ──────────────────────────────────────────────────────

    def set_center(self, point: GeoPoint) -> None:
        self._viewport.center = point
        self.update()

    def set_zoom(self, zoom: float) -> None:
        self._viewport.zoom = zoom
        self.update()

    def scroll_by(self, dx: float, dy: float) -> None:
        """Scroll the map content by (dx, dy) pixels."""
        self._viewport.pan_by(dx, dy)
        self.update()

    def zoom_in_fixing(self, pos: Pixel) -> None:
        self._viewport.zoom_by(1.0, pos)
        self.update()

    def zoom_onto(self, annotation: Annotation) -> None:
        """Zoom so *annotation* (or all its members) fill the view."""
        if annotation.is_cluster:
            self._viewport.zoom_to_span(m.point for m in annotation.members)
        else:
            self._viewport.center = annotation.point
            self._viewport.zoom_by(2.0)
        self.update()

    # ── Selection callback (from AnnotationsOverlay) ──────────────────

    def dismiss_callout(self, position: int) -> None:
        overlay = self._annotations_overlay
        annotation = overlay.item_at(position) if overlay is not None else None
        if annotation is None:
            return
        callout = self._current_callout()
        if not callout.isHidden():
            callout.dismiss()
            self.annotation_deselected.emit(position, annotation)

    def show_callout(self, position: int) -> None:
        overlay = self._annotations_overlay
        annotation = overlay.item_at(position) if overlay is not None else None
        if annotation is None:
            return

        self.dismiss_callout(position)

        callout = self._next_callout()
        callout.set_data(annotation)
        callout.set_marker_height(overlay.marker_height(position))

        self.annotation_selected.emit(position, annotation)

        if callout.has_displayable_content():
            callout.show_at(self._viewport.project(annotation.point))

    def _callout(self, index: int) -> CalloutView:
        callout = self._callouts[index]
        if callout is None:
            callout = CalloutView(self)
            callout.clicked.connect(self._on_callout_clicked)
            callout.double_clicked.connect(self._on_callout_double_clicked)
            self._callouts[index] = callout
        return callout

    def _current_callout(self) -> CalloutView:
        return self._callout(self._callout_index)

    def _next_callout(self) -> CalloutView:
        self._callout_index = 1 - self._callout_index
        return self._callout(self._callout_index)

    def current_callout(self) -> Optional[CalloutView]:
        return self._callouts[self._callout_index]

    def _on_callout_clicked(self) -> None:
        position = self.selected_annotation_position()
        annotation = self.selected_annotation()
        if annotation is not None and position != INVALID_POSITION:
            self.annotation_clicked.emit(position, annotation)

    def _on_callout_double_clicked(self) -> None:
        annotation = self.selected_annotation()
        if annotation is not None:
            self.zoom_onto(annotation)

    # ── Container callback (gestures nobody consumed) ─────────────────

    def on_single_tap(self, pos: Pixel) -> None:
        self.set_selected_annotation(INVALID_POSITION)
        self.background_tapped.emit(pos)

    def on_double_tap(self, pos: Pixel) -> None:
        self.zoom_in_fixing(pos)
        self.background_double_tapped.emit(pos)

    def on_long_press(self, pos: Pixel) -> None:
        self.long_pressed.emit(self._viewport.unproject(pos))

    # ── Gesture routing ───────────────────────────────────────────────

    def _on_tap_up(self, pos: Pixel) -> None:
        self._container.dispatch_tap(pos, self._viewport)
        self.update()

    def _on_single_tap_confirmed(self, pos: Pixel) -> None:
        self._container.confirm_single_tap(pos)

    def _on_double_tapped(self, pos: Pixel) -> None:
        self._container.dispatch_double_tap(pos, self._viewport)

    def _on_long_pressed(self, pos: Pixel) -> None:
        self._container.dispatch_long_press(pos, self._viewport)

    def _on_region_changed(self, region: CoordinateRegion) -> None:
        self._update_status()
        self.region_changed.emit(region)

    # ── Qt events ─────────────────────────────────────────────────────

    def mousePressEvent(self, event):
        if not self._actionable or event.button() != QtCore.Qt.LeftButton:
            event.ignore()
            return
        pos = (event.localPos().x(), event.localPos().y())
        self._region_watcher.begin_gesture()
        self._gestures.press(pos)
        self._drag_last = pos
        self._container.dispatch_touch(TouchEvent(TouchAction.DOWN, *pos), self._viewport)
        event.accept()

    def mouseMoveEvent(self, event):
        if not self._actionable or self._drag_last is None:
            event.ignore()
            return
        pos = (event.localPos().x(), event.localPos().y())
        self._gestures.move(pos)
        if self._gestures.is_dragging:
            dx = self._drag_last[0] - pos[0]
            dy = self._drag_last[1] - pos[1]
            self._drag_last = pos
            self._viewport.pan_by(dx, dy)
            self.update()
        self._container.dispatch_touch(TouchEvent(TouchAction.MOVE, *pos), self._viewport)
        event.accept()

    def mouseReleaseEvent(self, event):
        if not self._actionable or self._drag_last is None:
            event.ignore()
            return
        pos = (event.localPos().x(), event.localPos().y())
        self._drag_last = None
        self._gestures.release(pos)
        self._container.dispatch_touch(TouchEvent(TouchAction.UP, *pos), self._viewport)
        self._region_watcher.end_gesture()
        event.accept()

    def wheelEvent(self, event):
        """Smooth zoom anchored under the mouse cursor."""
        if not self._actionable:
            event.ignore()
            return
        step = _WHEEL_ZOOM_STEP if event.angleDelta().y() > 0 else -_WHEEL_ZOOM_STEP
        pos = event.position() if hasattr(event, "position") else event.posF()
        self._viewport.zoom_by(step, (pos.x(), pos.y()))
        self.update()
        event.accept()

    def resizeEvent(self, event):
        """Keep the viewport size in sync and reposition the status line."""
        super().resizeEvent(event)
        self._viewport.resize(self.width(), self.height())
        self._overlay_bottom.setGeometry(0, self.height() - 24, self.width(), 24)
        self.update()

    def paintEvent(self, event):
        painter = QtGui.QPainter(self)
        painter.fillRect(self.rect(), QtGui.QColor(4, 8, 14))
        self._draw_graticule(painter)
        self._container.draw(painter, self._viewport)
        painter.end()

        self._follow_callout()
        self._region_watcher.check()

    def closeEvent(self, event):
        self._region_watcher.shutdown()
        self._gestures.cancel()
        super().closeEvent(event)

    # ── Drawing helpers ───────────────────────────────────────────────

    def _draw_graticule(self, painter: QtGui.QPainter) -> None:
        vp = self._viewport
        if vp.width <= 0 or vp.height <= 0:
            return
        px_per_deg = 256.0 * (2 ** vp.zoom) / 360.0
        step = _GRATICULE_STEPS[0]
        for s in _GRATICULE_STEPS:
            if s * px_per_deg < _GRATICULE_MIN_PX:
                break
            step = s

        region = vp.current_region()
        lat0 = region.latitude - region.latitude_span
        lat1 = region.latitude + region.latitude_span
        lon0 = region.longitude - region.longitude_span
        lon1 = region.longitude + region.longitude_span

        pen = QtGui.QPen(QtGui.QColor(30, 48, 70))
        pen.setCosmetic(True)
        painter.setPen(pen)

        lon = math.floor(lon0 / step) * step
        while lon <= lon1:
            x, _ = vp.project(GeoPoint(region.latitude, lon))
            painter.drawLine(QtCore.QLineF(x, 0, x, vp.height))
            lon += step
        lat = max(-85.0, math.floor(lat0 / step) * step)
        while lat <= min(85.0, lat1):
            _, y = vp.project(GeoPoint(lat, region.longitude))
            painter.drawLine(QtCore.QLineF(0, y, vp.width, y))
            lat += step

    def _follow_callout(self) -> None:
        """Keep the visible callout pinned to its annotation while panning."""
        callout = self._callouts[self._callout_index]
        if callout is None or callout.isHidden() or callout.annotation is None:
            return
        callout.show_at(self._viewport.project(callout.annotation.point))

    def _update_status(self) -> None:
        vp = self._viewport
        count = len(self._annotations_overlay) if self._annotations_overlay is not None else 0
        self._detail_label.setText(
            f"lat {vp.center.lat:.4f}  lon {vp.center.lon:.4f}  |  "
            f"zoom {vp.zoom:.1f}  |  {count} markers"
        )
