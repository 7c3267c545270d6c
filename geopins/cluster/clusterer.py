"""
Screen-space grid clusterer.

Reduces a list of annotations to the set that can be drawn without markers
piling on top of each other at the current zoom.  Annotations whose
projected positions fall inside the same grid cell around a cluster's seed
are merged into one synthetic "cluster" annotation.

Algorithm (one pass, rebuilt from scratch on every call):

  1. Project every annotation to screen pixels.
  2. For each annotation in input order, scan the open clusters from the
     most recently created to the oldest and join the first one whose seed
     pixel lies within the grid half-width on both axes.
  3. If none matches, open a new cluster seeded at that annotation.

A cluster's seed is its first member's coordinate and is never recomputed.
Recently opened clusters absorb nearby points first, so the oldest cluster
does not keep growing.  Membership can chain: a member is only guaranteed
to be near its seed, not near the other members.

Usage
-----
    clusterer = Clusterer(viewport, ClusterConfig(low=4, medium=8))
    clusterer.add(annotations)
    map_widget.set_annotations(clusterer.get_clusters())
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Optional, Sequence

import numpy as np

from ..geo.annotation import Annotation, GeoPoint
from ..geo.viewport import Projection
from ..gui.markers import render_cluster_spot
from .config import ClusterConfig, ClusterSpot, ClusterTier

log = logging.getLogger(__name__)

DEFAULT_GRID_SIZE = 20  # dp
CLUSTER_TITLE = "Cluster"

GlyphRenderer = Callable[[ClusterTier, int, ClusterSpot], Any]


def cluster_snippet(total: int) -> str:
    """Pluralised member count shown under a cluster's title."""
    return f"{total} item" if total == 1 else f"{total} items"


@dataclass
class Cluster:
    """Working group of annotations for a single clustering pass."""

    seed: GeoPoint
    members: List[Annotation] = field(default_factory=list)

    @classmethod
    def start(cls, first: Annotation) -> "Cluster":
        return cls(seed=first.point, members=[first])

    def add(self, annotation: Annotation) -> None:
        self.members.append(annotation)


class Clusterer:
    """Groups overlapping annotations for the current projection."""

    def __init__(
        self,
        projection: Projection,
        config: Optional[ClusterConfig] = None,
        grid_size: int = DEFAULT_GRID_SIZE,
        density: Optional[float] = None,
        glyph_renderer: Optional[GlyphRenderer] = None,
        annotations: Optional[Sequence[Annotation]] = None,
    ):
        self._projection = projection
        self._config = config or ClusterConfig()
        self.grid_size = grid_size
        # Falls back to the projection's own density when not given
        self._density = density
        self._glyph_renderer = glyph_renderer or render_cluster_spot
        self._annotations: List[Annotation] = list(annotations or [])
        self._clusters: List[Cluster] = []

    # ── Configuration ─────────────────────────────────────────────────

    @property
    def config(self) -> ClusterConfig:
        return self._config

    @config.setter
    def config(self, config: Optional[ClusterConfig]) -> None:
        self._config = config or ClusterConfig()

    @property
    def density(self) -> float:
        if self._density is not None:
            return self._density
        return float(getattr(self._projection, "density", 1.0))

    @property
    def grid_half_width_px(self) -> int:
        return int(self.grid_size * self.density + 0.5)

    # ── Annotation cache ──────────────────────────────────────────────

    def add(self, items: Optional[Sequence[Annotation]]) -> None:
        """Replace the cached annotations with *items*."""
        self._annotations = list(items or [])

    def add_item(self, item: Annotation) -> None:
        self._annotations.append(item)

    def clear_annotations(self) -> None:
        self._clusters = []
        self._annotations = []

    @property
    def annotations(self) -> List[Annotation]:
        return list(self._annotations)

    # ── Clustering ────────────────────────────────────────────────────

    def get_clusters(self, items: Optional[Sequence[Annotation]] = None) -> List[Annotation]:
        """Run one clustering pass and return the reduced annotation list.

        If *items* is given it replaces the cached annotations first.
        """
        if items is not None:
            self.add(items)

        self._clusters = self._build_clusters(self._annotations)
        result = [self._to_annotation(c) for c in self._clusters]
        log.debug(
            "Clustered %d annotations into %d markers (half-width %d px)",
            len(self._annotations), len(result), self.grid_half_width_px,
        )
        return result

    def _build_clusters(self, annotations: Sequence[Annotation]) -> List[Cluster]:
        clusters: List[Cluster] = []
        if not annotations:
            return clusters

        pixels = self._project_all(annotations)
        half = self.grid_half_width_px
        # Seed pixels of the open clusters, in creation order
        seeds = np.empty_like(pixels)

        for i, annotation in enumerate(annotations):
            pos = pixels[i]
            k = len(clusters)
            if k:
                inside = np.all(np.abs(seeds[:k] - pos) <= half, axis=1)
                hits = np.flatnonzero(inside)
                if hits.size:
                    # Most recently created match wins
                    clusters[int(hits[-1])].add(annotation)
                    continue
            clusters.append(Cluster.start(annotation))
            seeds[k] = pos
        return clusters

    def _project_all(self, annotations: Sequence[Annotation]) -> np.ndarray:
        points = [a.point for a in annotations]
        project_many = getattr(self._projection, "project_many", None)
        if project_many is not None:
            return np.asarray(project_many(points), dtype=float).reshape(-1, 2)
        return np.array(
            [self._projection.project(p) for p in points], dtype=float
        ).reshape(-1, 2)

    def _to_annotation(self, cluster: Cluster) -> Annotation:
        members = tuple(cluster.members)
        total = len(members)
        if total == 1:
            return replace(members[0], members=members)

        tier = self._config.tier_for(total)
        marker = self._glyph_renderer(tier, total, self._config.spot_for(tier))
        return Annotation(
            point=cluster.seed,
            title=CLUSTER_TITLE,
            snippet=cluster_snippet(total),
            marker=marker,
            members=members,
        )

