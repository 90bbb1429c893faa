"""Zoom-dependent marker clustering.

Locations are projected into a unit square, treating both percentage
coordinates as degrees of longitude the way a geospatial point index would
(an equirectangular projection, so the floor plan is not distorted).
Clusters are precomputed for every zoom level, from the finest level down to
the coarsest: each level merges the points of the level above that fall
within ``radius`` pixels of each other (greedily, in index order), placing
the cluster at the count-weighted centroid.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
from scipy.spatial import cKDTree

from .exceptions import ClusteringError
from .models import ClusterItem, Location, MarkerItem

logger = logging.getLogger(__name__)

# Below this scale markers start to overlap and are merged into clusters
CLUSTER_SCALE_THRESHOLD = 0.85

DEFAULT_RADIUS = 45
DEFAULT_EXTENT = 512
DEFAULT_MIN_ZOOM = 0
DEFAULT_MAX_ZOOM = 15
DEFAULT_MIN_POINTS = 2


def should_cluster(scale: float) -> bool:
    """Check whether markers are clustered at the given view scale."""
    return scale < CLUSTER_SCALE_THRESHOLD


def zoom_for_scale(scale: float, min_zoom: int = DEFAULT_MIN_ZOOM, max_zoom: int = DEFAULT_MAX_ZOOM) -> float:
    """Map a view scale to an index zoom level.

    scale 0.5 gives zoom 4, scale 0.1 gives zoom ~1.68.

    Raises:
        ValueError: If scale is not a positive number
    """
    if not scale > 0:
        raise ValueError(f"Scale must be positive, got {scale}")
    return max(min_zoom, min(max_zoom, math.log2(scale * 32)))


def project(percent: float) -> float:
    """Map a percentage coordinate into the unit square of the index."""
    return percent / 360 + 0.5


def unproject(value: float) -> float:
    """Map an index coordinate back to a percentage."""
    return (value - 0.5) * 360


@dataclass
class _Node:
    """Point or cluster in one zoom level of the index."""

    x: float
    y: float
    count: int = 1
    index: int = -1  # position in the source locations (points only)
    cluster_id: int | None = None
    zoom: int | None = None  # zoom a cluster was formed at
    children: list["_Node"] = field(default_factory=list)

    @property
    def is_cluster(self) -> bool:
        return self.cluster_id is not None


class SpatialIndex:
    """Hierarchical point clusters for zoom levels ``min_zoom``..``max_zoom``.

    Built once per location set with :meth:`load`; every query afterwards is a
    lookup in the precomputed level.
    """

    def __init__(
        self,
        radius: float = DEFAULT_RADIUS,
        extent: int = DEFAULT_EXTENT,
        min_zoom: int = DEFAULT_MIN_ZOOM,
        max_zoom: int = DEFAULT_MAX_ZOOM,
        min_points: int = DEFAULT_MIN_POINTS,
    ):
        """Initialize an empty index.

        Args:
            radius: Cluster radius in pixels at tile extent
            extent: Tile extent the radius is relative to
            min_zoom: Coarsest zoom level to build
            max_zoom: Finest zoom level at which points are still clustered
            min_points: Minimum number of points that form a cluster
        """
        self.radius = radius
        self.extent = extent
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom
        self.min_points = min_points

        self._locations: list[Location] = []
        self._levels: dict[int, list[_Node]] = {}
        self._clusters: dict[int, _Node] = {}

    def load(self, locations: Sequence[Location]) -> "SpatialIndex":
        """Build every zoom level from a location set, replacing any previous data.

        Raises:
            ClusteringError: If a location has non-finite coordinates
        """
        self._locations = list(locations)
        self._clusters = {}

        nodes = []
        for i, location in enumerate(self._locations):
            lng = 0.0 if location.x is None else location.x
            lat = 0.0 if location.y is None else location.y
            if not (math.isfinite(lng) and math.isfinite(lat)):
                raise ClusteringError(f"Location {location.id} has invalid coordinates ({lng}, {lat})")
            nodes.append(_Node(x=project(lng), y=project(lat), index=i))

        levels = {self.max_zoom + 1: nodes}
        for zoom in range(self.max_zoom, self.min_zoom - 1, -1):
            levels[zoom] = self._cluster(levels[zoom + 1], zoom)
        self._levels = levels

        logger.debug(
            f"Indexed {len(nodes)} points into {len(self._clusters)} clusters "
            f"across zoom {self.min_zoom}-{self.max_zoom}"
        )
        return self

    def _cluster(self, nodes: list[_Node], zoom: int) -> list[_Node]:
        if not nodes:
            return []

        r = self.radius / (self.extent * 2**zoom)
        tree = cKDTree(np.array([(n.x, n.y) for n in nodes], dtype=float))
        visited = np.zeros(len(nodes), dtype=bool)
        next_nodes = []

        for i, node in enumerate(nodes):
            if visited[i]:
                continue
            visited[i] = True

            neighbor_ids = sorted(tree.query_ball_point((node.x, node.y), r))
            fresh = [k for k in neighbor_ids if not visited[k]]
            num_points = node.count + sum(nodes[k].count for k in fresh)

            if num_points > node.count and num_points >= self.min_points:
                wx = node.x * node.count
                wy = node.y * node.count
                cluster_id = (i << 5) + (zoom + 1) + len(self._locations)
                children = [node]
                for k in fresh:
                    visited[k] = True
                    wx += nodes[k].x * nodes[k].count
                    wy += nodes[k].y * nodes[k].count
                    children.append(nodes[k])

                cluster = _Node(
                    x=wx / num_points,
                    y=wy / num_points,
                    count=num_points,
                    cluster_id=cluster_id,
                    zoom=zoom,
                    children=children,
                )
                self._clusters[cluster_id] = cluster
                next_nodes.append(cluster)
            else:
                next_nodes.append(node)
                if num_points > 1:
                    for k in fresh:
                        visited[k] = True
                        next_nodes.append(nodes[k])

        return next_nodes

    def _limit_zoom(self, zoom: float) -> int:
        return max(self.min_zoom, min(math.floor(zoom), self.max_zoom + 1))

    def get_clusters(self, zoom: float) -> list[MarkerItem | ClusterItem]:
        """Get render items covering the whole coordinate domain at a zoom level.

        Args:
            zoom: Zoom level; floored and limited to the indexed range

        Returns:
            Markers and clusters, in index order
        """
        level = self._levels.get(self._limit_zoom(zoom), [])
        items: list[MarkerItem | ClusterItem] = []
        for node in level:
            if node.is_cluster:
                items.append(
                    ClusterItem(
                        id=f"cluster-{node.cluster_id}",
                        cluster_id=node.cluster_id,
                        count=node.count,
                        x=unproject(node.x),
                        y=unproject(node.y),
                        zoom=zoom,
                    )
                )
            else:
                items.append(MarkerItem(location=self._locations[node.index]))
        return items

    def _get_cluster(self, cluster_id: int) -> _Node:
        try:
            return self._clusters[cluster_id]
        except KeyError:
            raise ClusteringError(f"No cluster with the specified id: {cluster_id}") from None

    def get_children(self, cluster_id: int) -> list[MarkerItem | ClusterItem]:
        """Get the items a cluster splits into at the next zoom level.

        Raises:
            ClusteringError: If the cluster id is unknown
        """
        cluster = self._get_cluster(cluster_id)
        items: list[MarkerItem | ClusterItem] = []
        for child in cluster.children:
            if child.is_cluster:
                items.append(
                    ClusterItem(
                        id=f"cluster-{child.cluster_id}",
                        cluster_id=child.cluster_id,
                        count=child.count,
                        x=unproject(child.x),
                        y=unproject(child.y),
                        zoom=cluster.zoom + 1,
                    )
                )
            else:
                items.append(MarkerItem(location=self._locations[child.index]))
        return items

    def get_leaves(self, cluster_id: int) -> list[Location]:
        """Get every location inside a cluster.

        Raises:
            ClusteringError: If the cluster id is unknown
        """
        leaves = []
        stack = [self._get_cluster(cluster_id)]
        while stack:
            node = stack.pop()
            if node.is_cluster:
                stack.extend(reversed(node.children))
            else:
                leaves.append(self._locations[node.index])
        return leaves


class MarkerClusterer:
    """Clustering stage: turns the location set and view scale into render items.

    The index is rebuilt only when a different location sequence object is
    passed in; scale changes re-query the existing index.
    """

    def __init__(
        self,
        radius: float = DEFAULT_RADIUS,
        min_zoom: int = DEFAULT_MIN_ZOOM,
        max_zoom: int = DEFAULT_MAX_ZOOM,
    ):
        self.radius = radius
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom
        self._source: Sequence[Location] | None = None
        self._index: SpatialIndex | None = None

    def _index_for(self, locations: Sequence[Location]) -> SpatialIndex:
        if self._index is None or locations is not self._source:
            logger.debug(f"Rebuilding spatial index for {len(locations)} locations")
            self._index = None
            index = SpatialIndex(radius=self.radius, min_zoom=self.min_zoom, max_zoom=self.max_zoom)
            index.load(locations)
            self._source = locations
            self._index = index
        return self._index

    def cluster(self, locations: Sequence[Location], scale: float) -> list[MarkerItem | ClusterItem]:
        """Get the render items for a location set at a view scale.

        Args:
            locations: Locations of the active floor
            scale: View scale (1.0 = 100%)

        Returns:
            One marker per location when clustering is inactive or fails,
            otherwise markers and clusters for the scale's zoom level
        """
        if not should_cluster(scale):
            return [MarkerItem(location=location) for location in locations]

        try:
            zoom = zoom_for_scale(scale, self.min_zoom, self.max_zoom)
            return self._index_for(locations).get_clusters(zoom)
        except Exception as e:
            logger.warning(f"Clustering failed, rendering {len(locations)} markers unclustered: {e}")
            return [MarkerItem(location=location) for location in locations]

    def expand(self, cluster_id: int) -> list[Location]:
        """Get the locations behind a cluster from the last clustering pass.

        Raises:
            ClusteringError: If no index is built or the cluster id is unknown
        """
        if self._index is None:
            raise ClusteringError("No clustering pass has been run yet")
        return self._index.get_leaves(cluster_id)
