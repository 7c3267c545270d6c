"""
Annotation data model.

An Annotation is a geo-located point of interest shown as a marker on the
map.  Annotations handed to the map by the caller carry no members; every
annotation produced by the clusterer carries the list of caller annotations
it stands for (a single one for an isolated marker, several for a cluster).

Coordinates are floating degrees throughout the package.

Example
-------
    paris = Annotation(GeoPoint(48.8566, 2.3510), "Paris", "The city of love")
    paris.is_cluster            # False
    paris.clustered_annotations # ()
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class GeoPoint:
    """WGS84 coordinate in degrees."""

    lat: float
    lon: float

    @classmethod
    def from_e6(cls, lat_e6: int, lon_e6: int) -> "GeoPoint":
        """Build from microdegrees (``48856600`` → ``48.8566``)."""
        return cls(lat_e6 / 1e6, lon_e6 / 1e6)

    @property
    def lat_e6(self) -> int:
        return int(round(self.lat * 1e6))

    @property
    def lon_e6(self) -> int:
        return int(round(self.lon * 1e6))


@dataclass(frozen=True)
class Annotation:
    """One point of interest.

    ``marker`` is an opaque glyph handle owned by the caller (in practice a
    :class:`geopins.gui.markers.Marker`).  Only its pixel footprint is ever
    read, never its pixels.  ``extra`` is a caller payload that is passed
    through untouched.
    """

    point: GeoPoint
    title: Optional[str] = None
    snippet: Optional[str] = None
    marker: Any = None
    extra: Any = None

    # Caller annotations this one stands for; set by the clusterer only.
    # Excluded from equality so a singleton output equals its input.
    members: Tuple["Annotation", ...] = field(default=(), compare=False, repr=False)

    @property
    def is_cluster(self) -> bool:
        return len(self.members) > 1

    @property
    def clustered_annotations(self) -> Tuple["Annotation", ...]:
        return self.members
