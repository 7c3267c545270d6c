"""
geopins demo — clustered city annotations on an interactive map.

Shows a handful of city sets (France, northern Europe, both US coasts and
the UK) and re-clusters them every time the visible region settles.

    geopins-demo
    geopins-demo --settings my_map.json --log-level DEBUG
    geopins-demo --no-clustering
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from PyQt5 import QtCore, QtGui, QtWidgets

from .cluster.clusterer import Clusterer
from .config import MapSettings, load_settings
from .geo.annotation import Annotation, GeoPoint
from .geo.region import CoordinateRegion
from .gui.map_widget import AnnotatedMapWidget
from .gui.markers import default_pin_marker
from .logger import setup_logging

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

FRANCE = [
    Annotation(GeoPoint(48.6356, -1.5106), "Mont-Saint-Michel",
               "A rocky tidal island and a commune in Normandy"),
    Annotation(GeoPoint(48.8566, 2.3510), "Paris", "The city of love"),
    Annotation(GeoPoint(44.8374, -0.5761), "Bordeaux", "A port city in southwestern France"),
    Annotation(GeoPoint(48.5931, -0.6475), "Domfront",
               "A commune in the Orne department in north-western France"),
]

EUROPE = [
    Annotation(GeoPoint(55.7558, 37.6176), "Moscow"),
    Annotation(GeoPoint(59.3328, 18.0645), "Stockholm"),
    Annotation(GeoPoint(59.9390, 30.3158), "Saint Petersburg"),
    Annotation(GeoPoint(60.1698, 24.9382), "Helsinki"),
    Annotation(GeoPoint(60.4514, 22.2687), "Turku"),
    Annotation(GeoPoint(65.5842, 22.1547), "Luleå"),
    Annotation(GeoPoint(59.4389, 24.7545), "Tallinn"),
    Annotation(GeoPoint(66.4987, 25.7211), "Rovaniemi"),
]

USA_EAST_COAST = [
    Annotation(GeoPoint(40.7144, -74.0060), "New York City"),
    Annotation(GeoPoint(39.9523, -75.1638), "Philadelphia"),
    Annotation(GeoPoint(38.8951, -77.0364), "Washington"),
    Annotation(GeoPoint(41.3748, -83.6513), "Bowling Green"),
    Annotation(GeoPoint(42.3314, -83.0458), "Detroit"),
]

USA_WEST_COAST = [
    Annotation(GeoPoint(37.7749, -122.4194), "San Francisco"),
    Annotation(GeoPoint(37.7706, -119.5108), "Yosemite National Park"),
    Annotation(GeoPoint(36.8782, -121.9473), "Monterey Bay"),
    Annotation(GeoPoint(35.3658, -120.8499), "Morro Bay"),
    Annotation(GeoPoint(34.4208, -119.6982), "Santa Barbara"),
    Annotation(GeoPoint(34.0522, -118.2437), "Los Angeles"),
    Annotation(GeoPoint(32.7153, -117.1573), "San Diego"),
    Annotation(GeoPoint(36.1146, -115.1728), "Las Vegas"),
    Annotation(GeoPoint(36.2201, -116.8817), "Death Valley"),
    Annotation(GeoPoint(36.3552, -112.6612), "Grand Canyon"),
    Annotation(GeoPoint(37.2899, -113.0489), "Zion National Park"),
    Annotation(GeoPoint(37.6283, -112.1677), "Bryce Canyon"),
    Annotation(GeoPoint(36.9369, -111.4838), "Lake Powell"),
]

UK = [
    Annotation(GeoPoint(51.75222, -1.25596), "Oxford"),
    Annotation(GeoPoint(51.50249, -0.11579), "London"),
    Annotation(GeoPoint(52.48048, -1.89823), "Birmingham"),
    Annotation(GeoPoint(53.39763, -2.99205), "Liverpool"),
    Annotation(GeoPoint(55.94973, -3.19333), "Edinburgh"),
    Annotation(GeoPoint(55.86667, -4.25), "Glasgow"),
    Annotation(GeoPoint(50.46384, -3.51434), "Torquay"),
    Annotation(GeoPoint(54.58333, -5.93333), "Belfast"),
    Annotation(GeoPoint(53.48095, -2.23743), "Manchester"),
    Annotation(GeoPoint(53.81667, -3.05), "Blackpool"),
    Annotation(GeoPoint(50.82838, -0.13947), "Brighton"),
    Annotation(GeoPoint(52.2, 0.11667), "Cambridge"),
    Annotation(GeoPoint(50.72048, -1.8795), "Bournemouth"),
    Annotation(GeoPoint(50.90395, -1.40428), "Southampton"),
    Annotation(GeoPoint(50.79899, -1.09125), "Portsmouth"),
]


def sample_annotations() -> List[Annotation]:
    """Every sample city, each set with its own pin colour."""
    sets = (
        (FRANCE, "#2a7fff"),
        (EUROPE, "#28b464"),
        (USA_EAST_COAST, "#f0a028"),
        (USA_WEST_COAST, "#dc3c3c"),
        (UK, "#a050dc"),
    )
    out: List[Annotation] = []
    for annotations, color in sets:
        marker = default_pin_marker(color)
        out.extend(Annotation(a.point, a.title, a.snippet, marker) for a in annotations)
    return out


# No positioning source in the demo; "My location" uses this fixed fix
SAMPLE_USER_LOCATION = GeoPoint(45.7640, 4.8357)


# ---------------------------------------------------------------------------
# Main window
# ---------------------------------------------------------------------------

class MainWindow(QtWidgets.QMainWindow):

    def __init__(self, settings: Optional[MapSettings] = None):
        super().__init__()
        self._settings = settings or MapSettings()
        self.setWindowTitle("geopins")
        self.resize(1000, 700)

        self._map = AnnotatedMapWidget(self._settings)
        self._clusterer = Clusterer(
            self._map.viewport,
            self._settings.cluster,
            grid_size=self._settings.grid_size,
        )
        self._clusterer.add(sample_annotations())
        self._clustering = self._settings.clustering_enabled

        toolbar = self.addToolBar("Map")
        toolbar.setMovable(False)
        self._cluster_action = toolbar.addAction("Clustering")
        self._cluster_action.setCheckable(True)
        self._cluster_action.setChecked(self._clustering)
        self._cluster_action.toggled.connect(self._on_clustering_toggled)
        self._locate_action = toolbar.addAction("My location")
        self._locate_action.triggered.connect(self._on_locate)
        if self._map.is_user_tracking_enabled():
            self._map.set_user_location(SAMPLE_USER_LOCATION)

        self.setCentralWidget(self._map)

        self._map.region_confirmed.connect(self._on_region_confirmed)
        self._map.annotation_selected.connect(self._on_annotation_selected)
        self._map.annotation_deselected.connect(self._on_annotation_deselected)
        self._map.annotation_clicked.connect(self._on_annotation_clicked)
        self._map.long_pressed.connect(self._on_long_pressed)

        self._refresh_annotations()

    @property
    def map_widget(self) -> AnnotatedMapWidget:
        return self._map

    def _refresh_annotations(self) -> None:
        if self._clustering:
            self._map.set_annotations(self._clusterer.get_clusters())
        else:
            self._map.set_annotations(self._clusterer.annotations)

    # ── Slots ─────────────────────────────────────────────────────────

    def _on_locate(self) -> None:
        if not self._map.is_user_tracking_enabled():
            self._map.set_user_tracking_enabled(True)
        if self._map.user_location() is None:
            self._map.set_user_location(SAMPLE_USER_LOCATION)
        self._map.center_on_user_location()

    def _on_clustering_toggled(self, enabled: bool) -> None:
        self._clustering = enabled
        log.info("Clustering %s", "enabled" if enabled else "disabled")
        self._refresh_annotations()

    def _on_region_confirmed(self, region: CoordinateRegion) -> None:
        log.debug("Region confirmed: %s", region)
        if self._clustering:
            self._refresh_annotations()

    def _on_annotation_selected(self, position: int, annotation: Annotation) -> None:
        log.info("Selected #%d %s", position, annotation.title)

    def _on_annotation_deselected(self, position: int, annotation: Annotation) -> None:
        log.debug("Deselected #%d %s", position, annotation.title)

    def _on_annotation_clicked(self, position: int, annotation: Annotation) -> None:
        if annotation.is_cluster:
            names = ", ".join(m.title or "?" for m in annotation.members)
            self.statusBar().showMessage(f"{annotation.snippet}: {names}", 5000)
        else:
            self.statusBar().showMessage(annotation.title or "", 5000)

    def _on_long_pressed(self, point: GeoPoint) -> None:
        self.statusBar().showMessage(f"{point.lat:.5f}, {point.lon:.5f}", 5000)

    def closeEvent(self, ev):
        self._map.close()
        super().closeEvent(ev)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Clustered map annotations demo")
    parser.add_argument(
        "--settings",
        default=None,
        help="JSON settings file (defaults to $GEOPINS_SETTINGS)",
    )
    parser.add_argument(
        "--no-clustering",
        action="store_true",
        help="Start with clustering disabled",
    )
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file", default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    settings = load_settings(args.settings)
    if args.no_clustering:
        settings.clustering_enabled = False

    app = QtWidgets.QApplication(sys.argv)
    app.setStyle("Fusion")

    palette = QtGui.QPalette()
    palette.setColor(QtGui.QPalette.Window, QtGui.QColor("#060a10"))
    palette.setColor(QtGui.QPalette.WindowText, QtGui.QColor("#c0d0e0"))
    palette.setColor(QtGui.QPalette.Button, QtGui.QColor("#0c1624"))
    palette.setColor(QtGui.QPalette.ButtonText, QtGui.QColor("#c0d0e0"))
    palette.setColor(QtGui.QPalette.Highlight, QtGui.QColor("#00ccff"))
    app.setPalette(palette)

    win = MainWindow(settings)
    win.show()
    QtCore.QTimer.singleShot(0, win.map_widget.update)
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
