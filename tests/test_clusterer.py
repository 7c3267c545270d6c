"""Tests for the screen-space grid clusterer."""
from __future__ import annotations

import numpy as np
import pytest

from geopins.cluster.clusterer import CLUSTER_TITLE, Clusterer, cluster_snippet
from geopins.cluster.config import ClusterConfig, ClusterTier
from geopins.geo.annotation import Annotation, GeoPoint


class PlaneProjection:
    """Maps (lat, lon) straight to pixel (lon, lat)."""

    density = 1.0

    def project(self, point):
        return (point.lon, point.lat)

    def unproject(self, pixel):
        return GeoPoint(pixel[1], pixel[0])


class RecordingRenderer:
    def __init__(self):
        self.calls = []

    def __call__(self, tier, total, spot):
        self.calls.append((tier, total))
        return ("glyph", tier, total)


def at(x, y, title=None):
    return Annotation(GeoPoint(y, x), title)


def make(grid_size=20, renderer=None, config=None):
    return Clusterer(
        PlaneProjection(),
        config or ClusterConfig(low=4, medium=8),
        grid_size=grid_size,
        glyph_renderer=renderer or RecordingRenderer(),
    )


def test_close_pair_merges_into_one_cluster():
    a, b = at(100, 100, "a"), at(105, 102, "b")
    result = make(grid_size=20).get_clusters([a, b])

    assert len(result) == 1
    cluster = result[0]
    assert cluster.is_cluster
    assert cluster.point == a.point
    assert cluster.members == (a, b)
    assert cluster.title == CLUSTER_TITLE
    assert cluster.snippet == "2 items"


def test_small_grid_keeps_singletons():
    a, b = at(100, 100, "a"), at(105, 102, "b")
    result = make(grid_size=2).get_clusters([a, b])

    assert result == [a, b]
    assert result[0].members == (a,)
    assert result[1].members == (b,)
    assert not result[0].is_cluster


def test_singleton_keeps_caller_fields():
    a = Annotation(GeoPoint(0, 0), "Paris", "The city of love", marker="pin", extra={"id": 7})
    (out,) = make().get_clusters([a])
    assert out.title == "Paris"
    assert out.snippet == "The city of love"
    assert out.marker == "pin"
    assert out.extra == {"id": 7}
    assert out.clustered_annotations == (a,)


@pytest.mark.parametrize(
    "count, tier",
    [(4, ClusterTier.LOW), (5, ClusterTier.MEDIUM), (8, ClusterTier.MEDIUM), (9, ClusterTier.HIGH)],
)
def test_tier_passed_to_renderer(count, tier):
    renderer = RecordingRenderer()
    items = [at(50, 50, str(i)) for i in range(count)]
    (cluster,) = make(renderer=renderer).get_clusters(items)
    assert renderer.calls == [(tier, count)]
    assert cluster.marker == ("glyph", tier, count)


def test_most_recent_cluster_wins():
    a, b, c = at(0, 0, "a"), at(30, 0, "b"), at(15, 0, "c")
    result = make(grid_size=20).get_clusters([a, b, c])

    assert len(result) == 2
    assert result[0] == a
    assert result[1].point == b.point
    assert result[1].members == (b, c)


def test_seed_is_first_member_not_centroid():
    items = [at(0, 0), at(20, 20), at(-20, 10)]
    (cluster,) = make(grid_size=20).get_clusters(items)
    assert cluster.point == items[0].point


def test_members_stay_within_half_width_of_seed():
    rng = np.random.RandomState(7)
    items = [at(float(x), float(y)) for x, y in rng.uniform(0, 300, size=(200, 2))]
    clusterer = make(grid_size=12)
    half = clusterer.grid_half_width_px

    seen = 0
    for out in clusterer.get_clusters(items):
        for member in out.members:
            assert abs(member.point.lon - out.point.lon) <= half
            assert abs(member.point.lat - out.point.lat) <= half
            seen += 1
    assert seen == len(items)


def test_same_input_gives_same_output():
    rng = np.random.RandomState(3)
    items = [at(float(x), float(y)) for x, y in rng.uniform(0, 200, size=(60, 2))]
    clusterer = make()
    first = clusterer.get_clusters(items)
    second = clusterer.get_clusters(items)
    assert first == second
    assert [o.members for o in first] == [o.members for o in second]


def test_empty_input():
    renderer = RecordingRenderer()
    clusterer = make(renderer=renderer)
    assert clusterer.get_clusters([]) == []
    assert clusterer.get_clusters() == []
    assert renderer.calls == []


def test_cached_annotations():
    clusterer = make(grid_size=2)
    clusterer.add([at(0, 0)])
    clusterer.add_item(at(100, 100))
    assert len(clusterer.get_clusters()) == 2

    clusterer.add(None)
    assert clusterer.annotations == []

    clusterer.add([at(0, 0)])
    clusterer.clear_annotations()
    assert clusterer.get_clusters() == []


def test_half_width_scales_with_density():
    assert Clusterer(PlaneProjection(), grid_size=20, density=2.0).grid_half_width_px == 40
    assert Clusterer(PlaneProjection(), grid_size=3, density=1.5).grid_half_width_px == 5
    assert Clusterer(PlaneProjection(), grid_size=20).grid_half_width_px == 20


def test_config_reset_to_default():
    clusterer = make()
    clusterer.config = None
    assert clusterer.config == ClusterConfig()


def test_cluster_snippet():
    assert cluster_snippet(1) == "1 item"
    assert cluster_snippet(12) == "12 items"


def test_default_renderer_draws_tier_spot(qapp):
    config = ClusterConfig(low=4, medium=8)
    clusterer = Clusterer(PlaneProjection(), config)
    (cluster,) = clusterer.get_clusters([at(10, 10), at(12, 10)])
    assert cluster.marker.width == config.low_spot.width
    assert cluster.marker.height == config.low_spot.height
