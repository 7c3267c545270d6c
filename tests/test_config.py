"""Tests for settings loading."""
from __future__ import annotations

import json

import pytest

from geopins.config import SETTINGS_ENV, MapSettings, load_settings


def write(tmp_path, data):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_defaults(monkeypatch):
    monkeypatch.delenv(SETTINGS_ENV, raising=False)
    settings = load_settings()
    assert settings == MapSettings()
    assert settings.grid_size == 20
    assert settings.region_confirm_delay_ms == 160


def test_load_from_file(tmp_path):
    path = write(tmp_path, {"grid_size": 30, "cluster": {"low": 4, "medium": 8}})
    settings = load_settings(str(path))
    assert settings.grid_size == 30
    assert (settings.cluster.low, settings.cluster.medium) == (4, 8)
    assert settings.clustering_enabled


def test_env_variable_names_file(tmp_path, monkeypatch):
    path = write(tmp_path, {"user_tracking": True})
    monkeypatch.setenv(SETTINGS_ENV, str(path))
    assert load_settings().user_tracking


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(str(tmp_path / "nope.json"))


def test_unknown_key(tmp_path):
    with pytest.raises(ValueError):
        load_settings(str(write(tmp_path, {"grid": 3})))


def test_invalid_cluster_thresholds(tmp_path):
    with pytest.raises(ValueError):
        load_settings(str(write(tmp_path, {"cluster": {"low": 8, "medium": 8}})))
