"""Tests for zoom-dependent marker clustering."""

import logging

import pytest

from floormap.clustering import (
    MarkerClusterer,
    SpatialIndex,
    project,
    should_cluster,
    unproject,
    zoom_for_scale,
)
from floormap.exceptions import ClusteringError
from floormap.models import ClusterItem, MarkerItem

logger = logging.getLogger(__name__)


def test_should_cluster_threshold():
    """Test the scale below which clustering kicks in."""
    assert should_cluster(0.5) is True
    assert should_cluster(0.84) is True
    assert should_cluster(0.85) is False
    assert should_cluster(1.0) is False


def test_zoom_for_scale():
    """Test mapping view scale to index zoom."""
    assert zoom_for_scale(0.5) == 4
    assert zoom_for_scale(1 / 32) == 0
    assert zoom_for_scale(0.001) == 0
    assert zoom_for_scale(10_000) == 15
    assert zoom_for_scale(0.1) == pytest.approx(1.678, abs=1e-3)

    with pytest.raises(ValueError):
        zoom_for_scale(0)


def test_projection_is_linear_and_invertible():
    """Test that the whole 0-100 range maps without folding."""
    assert unproject(project(0)) == pytest.approx(0)
    assert unproject(project(100)) == pytest.approx(100)
    assert project(95) > project(90) > project(85)


def test_no_clustering_at_full_scale(make_location):
    """Test that scale >= 0.85 yields one marker per location, in order."""
    locations = [make_location(f"loc-{i}", x=50, y=50) for i in range(4)]
    clusterer = MarkerClusterer()

    for scale in (1.0, 0.85, 2.5):
        items = clusterer.cluster(locations, scale)
        assert all(isinstance(item, MarkerItem) for item in items)
        assert [item.id for item in items] == [loc.id for loc in locations]


def test_identical_points_form_one_cluster(make_location):
    """Test that coincident markers collapse into a single cluster when zoomed out."""
    locations = [make_location(f"loc-{i}", x=30, y=30) for i in range(5)]

    items = MarkerClusterer().cluster(locations, 0.1)

    assert len(items) == 1
    cluster = items[0]
    assert isinstance(cluster, ClusterItem)
    assert cluster.count == 5
    assert cluster.id == f"cluster-{cluster.cluster_id}"
    assert cluster.x == pytest.approx(30)
    assert cluster.y == pytest.approx(30)


def test_near_points_cluster_far_point_stays(make_location):
    """Test that only nearby markers are merged."""
    a = make_location("a", x=10, y=10)
    b = make_location("b", x=10.5, y=10)
    c = make_location("c", x=90, y=90)

    items = MarkerClusterer().cluster([a, b, c], 0.8)

    assert len(items) == 2
    cluster, marker = items
    assert isinstance(cluster, ClusterItem)
    assert cluster.count == 2
    assert cluster.x == pytest.approx(10.25)
    assert cluster.y == pytest.approx(10)
    assert isinstance(marker, MarkerItem)
    assert marker.id == "c"


def test_cluster_counts_cover_every_location(make_location):
    """Test that markers plus cluster counts add up to the input size."""
    locations = [make_location(f"loc-{i}", x=(i * 7) % 100, y=(i * 13) % 100) for i in range(60)]
    clusterer = MarkerClusterer()

    for scale in (0.05, 0.2, 0.5, 0.8):
        items = clusterer.cluster(locations, scale)
        total = sum(item.count if isinstance(item, ClusterItem) else 1 for item in items)
        assert total == len(locations)


def _snapshot(items):
    return [
        (item.id, item.count, item.cluster_id, round(item.x, 9), round(item.y, 9))
        if isinstance(item, ClusterItem)
        else (item.id, 1, None, None, None)
        for item in items
    ]


def test_clustering_is_deterministic(make_location):
    """Test that the same locations and scale always give the same clusters."""
    locations = [make_location(f"loc-{i}", x=(i * 7) % 100, y=(i * 13) % 100) for i in range(60)]
    reused = MarkerClusterer()

    for scale in (0.05, 0.2, 0.5, 0.8):
        expected = _snapshot(MarkerClusterer().cluster(locations, scale))

        if scale == 0.05:
            assert any(count > 1 for _, count, _, _, _ in expected)
        assert _snapshot(MarkerClusterer().cluster(locations, scale)) == expected
        for _ in range(3):
            assert _snapshot(reused.cluster(locations, scale)) == expected

def test_points_near_bottom_edge_are_kept_apart(make_location):
    """Test that y values near 100% are not folded onto other rows."""
    top = make_location("top", x=50, y=5)
    bottom = make_location("bottom", x=50, y=95)

    items = MarkerClusterer().cluster([top, bottom], 0.8)

    assert [item.id for item in items] == ["top", "bottom"]


def test_invalid_coordinates_degrade_to_markers(make_location):
    """Test that a bad coordinate disables clustering for the pass instead of failing."""
    locations = [make_location("a", x=10, y=10), make_location("b", x=float("nan"), y=10)]

    items = MarkerClusterer().cluster(locations, 0.3)

    assert [item.id for item in items] == ["a", "b"]
    assert all(isinstance(item, MarkerItem) for item in items)


def test_zero_scale_degrades_to_markers(make_location):
    """Test that an unusable scale renders plain markers."""
    locations = [make_location("a"), make_location("b")]

    items = MarkerClusterer().cluster(locations, 0)

    assert [item.id for item in items] == ["a", "b"]


def test_missing_coordinates_are_clustered_at_origin(make_location):
    """Test that locations without coordinates cluster at (0, 0)."""
    locations = [make_location("a", x=None, y=None), make_location("b", x=None, y=None)]

    items = MarkerClusterer().cluster(locations, 0.1)

    assert len(items) == 1
    assert items[0].x == pytest.approx(0)
    assert items[0].y == pytest.approx(0)


def test_empty_input(make_location):
    """Test clustering an empty location set."""
    assert MarkerClusterer().cluster([], 0.3) == []
    assert MarkerClusterer().cluster([], 1.0) == []


def test_index_reused_across_scale_changes(make_location):
    """Test that only a new location set rebuilds the index."""
    locations = [make_location(f"loc-{i}", x=i, y=i) for i in range(10)]
    clusterer = MarkerClusterer()

    clusterer.cluster(locations, 0.5)
    first = clusterer._index
    clusterer.cluster(locations, 0.2)
    assert clusterer._index is first

    clusterer.cluster(list(locations), 0.2)
    assert clusterer._index is not first


def test_expand_cluster(make_location):
    """Test getting the locations behind a cluster."""
    locations = [make_location(f"loc-{i}", x=30, y=30) for i in range(3)]
    clusterer = MarkerClusterer()

    [cluster] = clusterer.cluster(locations, 0.1)
    leaves = clusterer.expand(cluster.cluster_id)

    assert sorted(loc.id for loc in leaves) == ["loc-0", "loc-1", "loc-2"]

    with pytest.raises(ClusteringError):
        clusterer.expand(cluster.cluster_id + 1_000_000)


def test_expand_before_clustering():
    """Test that expand without a clustering pass is an error."""
    with pytest.raises(ClusteringError):
        MarkerClusterer().expand(1)


def test_spatial_index_children(make_location):
    """Test that a cluster splits into its members one zoom level deeper."""
    a = make_location("a", x=10, y=10)
    b = make_location("b", x=10.5, y=10)
    index = SpatialIndex().load([a, b])

    [cluster] = index.get_clusters(4)
    children = index.get_children(cluster.cluster_id)

    assert sorted(child.id for child in children) == ["a", "b"]
    assert [loc.id for loc in index.get_leaves(cluster.cluster_id)] == ["a", "b"]


def test_spatial_index_zoom_limits(make_location):
    """Test that out-of-range zoom queries are limited to the indexed levels."""
    locations = [make_location("a", x=10, y=10), make_location("b", x=10, y=10)]
    index = SpatialIndex().load(locations)

    assert len(index.get_clusters(-3)) == 1
    # Above max zoom, every point is returned on its own
    assert [item.id for item in index.get_clusters(40)] == ["a", "b"]

    logger.info("Clustering tests passed")
