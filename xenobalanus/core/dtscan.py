"""
DTSCAN attractor clustering.

DBSCAN over the Delaunay adjacency graph: a point's neighborhood is the set
of points joined to it by a mesh edge no longer than `max_closeness`,
instead of every point inside an epsilon ball.
"""

from collections import deque
from dataclasses import dataclass
from typing import List

import numpy as np
import structlog

from .errors import InvalidThresholdError, check_threshold
from .mesh_index import AnalysisMode, MeshIndex

logger = structlog.get_logger()

NOISE = -1


@dataclass
class ClusterResult:
    """Clusters plus per-point labels (-1 = noise) and the core mask."""
    clusters: List[List[int]]
    labels: np.ndarray
    core: np.ndarray

    @property
    def noise(self) -> np.ndarray:
        return np.flatnonzero(self.labels == NOISE)


class ClusterDetector:
    """Density-reachability clustering over a MeshIndex."""

    def __init__(self, mesh: MeshIndex, min_pts: int, max_closeness: float):
        """
        Args:
            mesh: Mesh index built with attractor tables (mode BOTH or ATTRACTORS)
            min_pts: Qualified neighbors needed for a core point
            max_closeness: Longest edge that still counts as a neighbor link

        Raises:
            InvalidThresholdError: min_pts < 1 or bad max_closeness
            MeshModeError: Mesh lacks the adjacency tables
        """
        if isinstance(min_pts, bool) or not isinstance(min_pts, (int, np.integer)):
            raise InvalidThresholdError(f"min_pts must be an integer, got {min_pts!r}")
        self.min_pts = int(check_threshold("min_pts", min_pts, minimum=1))
        self.max_closeness = check_threshold("max_closeness", max_closeness)
        mesh.require(AnalysisMode.ATTRACTORS)
        self.mesh = mesh

        self._qualified = mesh.neighbor_lengths <= self.max_closeness

    def qualified_neighbors(self, point: int) -> np.ndarray:
        """Adjacent points linked by an edge of length <= max_closeness."""
        mesh = self.mesh
        start, end = mesh.neighbor_offsets[point], mesh.neighbor_offsets[point + 1]
        return mesh.neighbor_indices[start:end][self._qualified[start:end]]

    def core_mask(self) -> np.ndarray:
        """True where a point has at least min_pts qualified neighbors."""
        owners = np.repeat(np.arange(self.mesh.n_points), np.diff(self.mesh.neighbor_offsets))
        counts = np.bincount(owners[self._qualified], minlength=self.mesh.n_points)
        return counts >= self.min_pts

    def detect(self) -> ClusterResult:
        """
        Run the clustering.

        Points are visited in ascending index order and expanded breadth
        first. A border point reachable from two clusters stays with the one
        that reached it first.
        """
        n = self.mesh.n_points
        core = self.core_mask()
        labels = np.full(n, NOISE, dtype=np.int64)
        visited = np.zeros(n, dtype=bool)
        clusters: List[List[int]] = []

        logger.info(
            "Clustering attractors",
            min_pts=self.min_pts,
            max_closeness=self.max_closeness,
            core_points=int(core.sum()),
        )

        for p in range(n):
            if visited[p] or labels[p] != NOISE:
                continue
            visited[p] = True
            if not core[p]:
                # Noise for now; a later core point may still absorb it
                continue

            cluster_id = len(clusters)
            labels[p] = cluster_id
            members = [p]
            queue = deque([p])

            while queue:
                current = queue.popleft()
                visited[current] = True
                if not core[current]:
                    continue  # border point, does not propagate
                for q in self.qualified_neighbors(current).tolist():
                    if labels[q] != NOISE:
                        continue
                    labels[q] = cluster_id
                    members.append(q)
                    queue.append(q)

            clusters.append(members)

        logger.info(
            "Attractors clustered",
            count=len(clusters),
            noise=int(np.count_nonzero(labels == NOISE)),
        )
        return ClusterResult(clusters=clusters, labels=labels, core=core)


def dtscan(mesh: MeshIndex, min_pts: int, max_closeness: float) -> List[List[int]]:
    """
    Cluster points by density-reachability over mesh edges.

    Args:
        mesh: Mesh index built with attractor tables
        min_pts: Minimum qualified neighbor count for a core point
        max_closeness: Maximum edge length for a qualified neighbor

    Returns:
        One list of point indices per cluster, in discovery order
    """
    return ClusterDetector(mesh, min_pts, max_closeness).detect().clusters
