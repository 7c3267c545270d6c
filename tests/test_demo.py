"""Tests for the demo entry point wiring."""
from __future__ import annotations

from geopins.config import MapSettings
from geopins.demo import SAMPLE_USER_LOCATION, MainWindow, build_arg_parser, sample_annotations


def test_sample_data(qapp):
    annotations = sample_annotations()
    assert len(annotations) == 45
    assert all(a.marker is not None for a in annotations)


def test_arg_parser():
    args = build_arg_parser().parse_args(["--no-clustering", "--log-level", "DEBUG"])
    assert args.no_clustering
    assert args.log_level == "DEBUG"
    assert args.settings is None


def test_window_without_clustering_shows_everything(qapp):
    win = MainWindow(MapSettings(clustering_enabled=False))
    assert len(win.map_widget.annotations_overlay) == 45
    win.close()


def test_window_with_clustering_reduces_markers(qapp):
    win = MainWindow(MapSettings(zoom=2))
    overlay = win.map_widget.annotations_overlay
    assert 0 < len(overlay) < 45
    assert sum(len(a.members) for a in overlay.annotations) == 45
    win.close()


def test_locate_action_centers_on_sample_fix(qapp):
    win = MainWindow(MapSettings())
    win._locate_action.trigger()
    widget = win.map_widget
    assert widget.is_user_tracking_enabled()
    assert widget.user_location() == SAMPLE_USER_LOCATION
    assert widget.viewport.center == SAMPLE_USER_LOCATION
    win.close()
