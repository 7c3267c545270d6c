"""
Coordinate region — a snapshot of the visible map area.

A region is the viewport centre plus its latitude/longitude spans.  Two
regions are equal when all four values are equal; that structural equality
is what the region watcher uses to decide whether the map moved.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CoordinateRegion:
    """Visible map area in degrees.  No range checking is performed."""

    latitude: float = 0.0
    longitude: float = 0.0
    latitude_span: float = 0.0
    longitude_span: float = 0.0

    @property
    def is_empty(self) -> bool:
        """True if at least one of the spans is <= 0."""
        return self.latitude_span <= 0 or self.longitude_span <= 0

    def __str__(self) -> str:
        return (
            f"CoordinateRegion({self.latitude:.6f}, {self.longitude:.6f} - "
            f"{self.latitude_span:.6f}, {self.longitude_span:.6f})"
        )


EMPTY_REGION = CoordinateRegion()
