"""Tests for the map widget's selection, callout and gesture glue."""
from __future__ import annotations

import logging

import pytest
from PyQt5 import QtCore, QtGui

from geopins.config import MapSettings
from geopins.geo.annotation import Annotation, GeoPoint
from geopins.gui.annotations_overlay import INVALID_POSITION
from geopins.gui.map_widget import AnnotatedMapWidget

PARIS = Annotation(GeoPoint(48.8566, 2.3510), "Paris", "The city of love")
BORDEAUX = Annotation(GeoPoint(44.8374, -0.5761), "Bordeaux")
UNTITLED = Annotation(GeoPoint(43.6, 1.44))


class SignalLog:
    def __init__(self, widget):
        self.events = []
        widget.annotation_selected.connect(lambda i, a: self.events.append(("selected", i, a.title)))
        widget.annotation_deselected.connect(lambda i, a: self.events.append(("deselected", i, a.title)))
        widget.annotation_clicked.connect(lambda i, a: self.events.append(("clicked", i, a.title)))
        widget.background_tapped.connect(lambda pos: self.events.append(("background", pos)))
        widget.long_pressed.connect(lambda p: self.events.append(("long_press", p)))


@pytest.fixture
def widget(qapp):
    w = AnnotatedMapWidget(MapSettings(center_lat=46.5, center_lon=2.3, zoom=5))
    w.resize(800, 600)
    w.viewport.resize(800, 600)
    w.set_annotations([PARIS, BORDEAUX, UNTITLED])
    yield w
    w.close()
    w.deleteLater()


def test_selection_shows_callout(widget):
    log = SignalLog(widget)
    widget.set_selected_annotation(0)

    assert log.events == [("selected", 0, "Paris")]
    callout = widget.current_callout()
    assert not callout.isHidden()
    assert callout.title() == "Paris"
    assert callout.subtitle() == "The city of love"
    assert callout.marker_height == widget.annotations_overlay.marker_height(0)


def test_switching_selection_deselects_first(widget):
    log = SignalLog(widget)
    widget.set_selected_annotation(0)
    first = widget.current_callout()
    widget.set_selected_annotation(1)

    assert log.events == [
        ("selected", 0, "Paris"),
        ("deselected", 0, "Paris"),
        ("selected", 1, "Bordeaux"),
    ]
    assert first.isHidden()
    assert widget.current_callout() is not first
    assert widget.selected_annotation() == BORDEAUX


def test_callout_without_content_stays_hidden(widget):
    log = SignalLog(widget)
    widget.set_selected_annotation(2)
    assert log.events == [("selected", 2, None)]
    assert widget.current_callout().isHidden()


def test_background_tap_deselects(widget):
    log = SignalLog(widget)
    widget.set_selected_annotation(0)
    widget.on_single_tap((5.0, 5.0))

    assert widget.selected_annotation_position() == INVALID_POSITION
    assert log.events[-2:] == [("deselected", 0, "Paris"), ("background", (5.0, 5.0))]


def test_tap_on_marker_selects_it(widget):
    x, y = widget.viewport.project(BORDEAUX.point)
    pos = (x, y - 10)
    assert widget.overlay_container.dispatch_tap(pos, widget.viewport)
    widget.overlay_container.confirm_single_tap(pos)
    assert widget.selected_annotation_position() == 1


def test_callout_click_reports_selected(widget):
    log = SignalLog(widget)
    widget.set_selected_annotation(0)
    widget.current_callout().clicked.emit()
    assert log.events[-1] == ("clicked", 0, "Paris")


def test_replacing_annotations_dismisses_callout(widget):
    log = SignalLog(widget)
    widget.set_selected_annotation(1)
    widget.set_annotations([PARIS])

    assert log.events[-1] == ("deselected", 1, "Bordeaux")
    assert widget.selected_annotation_position() == INVALID_POSITION
    assert len(widget.annotations_overlay) == 1

    widget.set_annotations(None)
    assert widget.annotations_overlay is None
    assert widget.overlay_container.annotations_layer is None
    assert widget.selected_annotation() is None


def test_long_press_reports_coordinate(widget):
    log = SignalLog(widget)
    widget.on_long_press((400.0, 300.0))
    kind, point = log.events[-1]
    assert kind == "long_press"
    assert point.lat == pytest.approx(46.5)
    assert point.lon == pytest.approx(2.3)


def test_double_tap_zooms_in(widget):
    zoom = widget.viewport.zoom
    widget.on_double_tap((400.0, 300.0))
    assert widget.viewport.zoom == zoom + 1


def test_callout_double_click_zooms_onto_cluster(widget):
    cluster = Annotation(PARIS.point, "Cluster", "2 items", members=(PARIS, BORDEAUX))
    widget.set_annotations([cluster])
    widget.set_selected_annotation(0)
    widget.current_callout().double_clicked.emit()

    for member in cluster.members:
        x, y = widget.viewport.project(member.point)
        assert 0 <= x <= 800
        assert 0 <= y <= 600


def test_user_location(widget, caplog):
    widget.set_user_tracking_enabled(True)
    assert widget.overlay_container.user_location_layer is not None

    with caplog.at_level(logging.WARNING):
        widget.center_on_user_location()
    assert "Unable to center" in caplog.text

    home = GeoPoint(45.76, 4.84)
    widget.set_user_location(home)
    widget.center_on_user_location()
    assert widget.viewport.center == home

    widget.set_user_tracking_enabled(False)
    assert widget.overlay_container.user_location_layer is None
    assert widget.user_location() is None


def test_caller_layers(widget):
    class Noop:
        def draw(self, painter, viewport):
            pass

        def on_tap(self, pos, viewport):
            return False

        on_double_tap = on_long_press = on_tap

        def on_touch(self, event, viewport):
            return False

    layer = Noop()
    widget.add_layer(layer)
    assert widget.index_of_layer(layer) == 0
    widget.remove_layer(layer)
    assert widget.index_of_layer(layer) == -1


def test_close_stops_region_watcher(widget):
    widget.show()
    widget.close()
    assert not widget.region_watcher.check()


def mouse(kind, x, y):
    return QtGui.QMouseEvent(
        kind, QtCore.QPointF(x, y), QtCore.Qt.LeftButton, QtCore.Qt.LeftButton, QtCore.Qt.NoModifier
    )


def test_press_holds_region_confirmation(widget):
    watcher = widget.region_watcher
    watcher.check()
    assert watcher.is_pending

    widget.mousePressEvent(mouse(QtCore.QEvent.MouseButtonPress, 10, 10))
    assert watcher.in_gesture
    assert not watcher.is_pending

    widget.set_center(GeoPoint(10.0, 10.0))
    assert watcher.check()
    assert not watcher.is_pending

    widget.mouseReleaseEvent(mouse(QtCore.QEvent.MouseButtonRelease, 10, 10))
    assert not watcher.in_gesture
    assert watcher.is_pending


def test_disabling_mid_press_releases_region_watcher(widget):
    watcher = widget.region_watcher
    widget.mousePressEvent(mouse(QtCore.QEvent.MouseButtonPress, 10, 10))
    widget.set_actionable(False)
    assert not watcher.in_gesture

    widget.mouseReleaseEvent(mouse(QtCore.QEvent.MouseButtonRelease, 10, 10))
    widget.set_actionable(True)
    widget.set_center(GeoPoint(10.0, 10.0))
    assert watcher.check()
    assert watcher.is_pending


def test_drag_pans_map(widget):
    start = widget.viewport.center
    widget.mousePressEvent(mouse(QtCore.QEvent.MouseButtonPress, 400, 300))
    widget.mouseMoveEvent(mouse(QtCore.QEvent.MouseMove, 300, 300))
    widget.mouseReleaseEvent(mouse(QtCore.QEvent.MouseButtonRelease, 300, 300))
    assert widget.viewport.center.lon > start.lon
