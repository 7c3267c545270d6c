"""
Map settings — defaults plus optional JSON overrides.

Settings file (all keys optional)::

    {
      "grid_size": 20,
      "region_confirm_delay_ms": 160,
      "clustering_enabled": true,
      "user_tracking": false,
      "center_lat": 46.5, "center_lon": 2.3, "zoom": 4,
      "cluster": {"low": 4, "medium": 8,
                  "high_spot": {"color": "#000000", "title": "H"}}
    }

``load_settings()`` without a path reads the file named by the
``GEOPINS_SETTINGS`` environment variable, or returns the defaults.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .cluster.clusterer import DEFAULT_GRID_SIZE
from .cluster.config import ClusterConfig
from .gui.region_watcher import REGION_CONFIRM_DELAY_MS

log = logging.getLogger(__name__)

SETTINGS_ENV = "GEOPINS_SETTINGS"


@dataclass
class MapSettings:
    grid_size: int = DEFAULT_GRID_SIZE             # dp
    region_confirm_delay_ms: int = REGION_CONFIRM_DELAY_MS
    clustering_enabled: bool = True
    user_tracking: bool = False
    center_lat: float = 46.5
    center_lon: float = 2.3
    zoom: float = 4.0
    cluster: ClusterConfig = field(default_factory=ClusterConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MapSettings":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown settings keys: {sorted(unknown)}")
        kwargs = dict(data)
        if "cluster" in kwargs:
            kwargs["cluster"] = ClusterConfig.from_dict(kwargs["cluster"])
        return cls(**kwargs)


def load_settings(path: Optional[str] = None) -> MapSettings:
    """Load settings from *path* (or ``$GEOPINS_SETTINGS``)."""
    path = path or os.environ.get(SETTINGS_ENV)
    if not path:
        return MapSettings()
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)
    with p.open("r", encoding="utf-8") as f:
        data = json.load(f)
    settings = MapSettings.from_dict(data)
    log.info("Loaded map settings from %s", p)
    return settings
