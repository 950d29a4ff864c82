"""
DELFIN void detection.

Large triangles of a Delaunay mesh mark places where points are sparse.
This module:
- Seeds every triangle whose area reaches `min_area`
- Merges seeds that are adjacent, share a vertex, or have a vertex pair
  within `min_distance` of each other (nearest-vertex metric)
- Optionally absorbs neighbors whose terminal (longest) edge borders the
  region, following longest-edge chains outward
- Extracts each merged region's boundary: points on edges that belong to
  exactly one triangle of the region
"""

from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

import numpy as np
import structlog
from scipy.spatial import cKDTree

from .errors import check_threshold
from .mesh_index import NO_TRIANGLE, AnalysisMode, MeshIndex

logger = structlog.get_logger()


class DisjointSet:
    """Union-find over dense integer ids with path compression and union by size."""

    def __init__(self, size: int):
        self.parent = list(range(size))
        self.size = [1] * size

    def find(self, x: int) -> int:
        root = x
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[x] != root:
            self.parent[x], x = root, self.parent[x]
        return root

    def union(self, a: int, b: int) -> bool:
        """Merge the sets of a and b. Returns False if already joined."""
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return False
        # Larger set wins; equal sizes keep the lower id as root
        if self.size[ra] < self.size[rb] or (self.size[ra] == self.size[rb] and rb < ra):
            ra, rb = rb, ra
        self.parent[rb] = ra
        self.size[ra] += self.size[rb]
        return True


@dataclass
class VoidRegion:
    """One merged void: its triangles and boundary."""
    id: int
    triangles: List[int]
    boundary_edges: List[Tuple[int, int]] = field(default_factory=list)
    boundary_points: Set[int] = field(default_factory=set)
    area: float = 0.0
    on_hull: bool = False  # open void, reaches the convex hull


class VoidDetector:
    """Seed-and-grow void detection over a MeshIndex."""

    def __init__(
        self,
        mesh: MeshIndex,
        min_area: float,
        min_distance: float,
        absorb_terminal: bool = False,
    ):
        """
        Args:
            mesh: Mesh index built with void tables (mode BOTH or VOIDS)
            min_area: Minimum triangle area for a void seed
            min_distance: Max nearest-vertex gap for merging two seeds
            absorb_terminal: Grow regions into non-seed triangles whose
                terminal edge is shared with a region triangle

        Raises:
            InvalidThresholdError: Negative or non-finite threshold
            MeshModeError: Mesh lacks the void tables
        """
        self.min_area = check_threshold("min_area", min_area)
        self.min_distance = check_threshold("min_distance", min_distance)
        mesh.require(AnalysisMode.VOIDS)
        self.mesh = mesh
        self.absorb_terminal = absorb_terminal

    def seeds(self) -> np.ndarray:
        """Ascending indices of triangles with area >= min_area."""
        return np.flatnonzero(self.mesh.areas >= self.min_area)

    def detect(self) -> List[VoidRegion]:
        """Run DELFIN and return regions ordered by their lowest seed triangle."""
        seeds = self.seeds()
        logger.info(
            "Detecting voids",
            min_area=self.min_area,
            min_distance=self.min_distance,
            seeds=len(seeds),
        )
        if len(seeds) == 0:
            logger.info("Voids detected", count=0)
            return []

        dsu = self._grow(seeds)

        groups: Dict[int, List[int]] = {}
        for t in seeds.tolist():
            groups.setdefault(dsu.find(t), []).append(t)

        if self.absorb_terminal:
            claimed = np.zeros(self.mesh.n_triangles, dtype=bool)
            claimed[seeds] = True
            for triangles in groups.values():
                self._absorb(triangles, claimed)

        # dicts keep insertion order, so regions follow their first seed
        regions = [
            self._extract(region_id, triangles)
            for region_id, triangles in enumerate(groups.values())
        ]

        logger.info("Voids detected", count=len(regions))
        return regions

    def _grow(self, seeds: np.ndarray) -> DisjointSet:
        """Union seeds that are adjacent or within min_distance."""
        mesh = self.mesh
        dsu = DisjointSet(mesh.n_triangles)
        is_seed = np.zeros(mesh.n_triangles, dtype=bool)
        is_seed[seeds] = True

        for t in seeds.tolist():
            for u in mesh.triangle_neighbors[t].tolist():
                if u != NO_TRIANGLE and is_seed[u]:
                    dsu.union(t, u)

        # A shared vertex is a zero-distance gap
        first_seed: Dict[int, int] = {}
        for t in seeds.tolist():
            for p in mesh.triangles[t].tolist():
                if p in first_seed:
                    dsu.union(first_seed[p], t)
                else:
                    first_seed[p] = t

        seed_points = np.fromiter(first_seed.keys(), dtype=np.int64, count=len(first_seed))
        if len(seed_points) > 1:
            tree = cKDTree(mesh.points[seed_points])
            pairs = tree.query_pairs(r=self.min_distance, output_type="ndarray")
            for i, j in pairs.tolist():
                dsu.union(first_seed[int(seed_points[i])], first_seed[int(seed_points[j])])
            logger.debug("Proximity pairs", pairs=len(pairs))

        return dsu

    def _absorb(self, triangles: List[int], claimed: np.ndarray) -> None:
        """
        Extend a region in place along longest-edge chains.

        A neighbor joins when its terminal edge is the edge it shares with a
        region triangle. Each triangle has one terminal edge, so it can only
        ever be claimed from the single neighbor across that edge.
        """
        mesh = self.mesh
        stack = list(triangles)
        absorbed = 0
        while stack:
            t = stack.pop()
            for edge, u in zip(mesh.triangle_edges[t].tolist(), mesh.triangle_neighbors[t].tolist()):
                if u == NO_TRIANGLE or claimed[u] or mesh.terminal_edges[u] != edge:
                    continue
                claimed[u] = True
                triangles.append(u)
                stack.append(u)
                absorbed += 1
        triangles.sort()
        if absorbed:
            logger.debug("Absorbed terminal triangles", count=absorbed, first=triangles[0])

    def _extract(self, region_id: int, triangles: List[int]) -> VoidRegion:
        """Boundary edges are those used by exactly one triangle of the region."""
        mesh = self.mesh
        edge_ids = mesh.triangle_edges[triangles].ravel()
        unique, counts = np.unique(edge_ids, return_counts=True)
        boundary = unique[counts == 1]

        if len(boundary) == 0:
            # Cannot happen for a finite planar region; fall back to the hull
            logger.warning("Void region without boundary edges", region=region_id)
            boundary = mesh.boundary_edges()

        pairs = mesh.edges[boundary]
        return VoidRegion(
            id=region_id,
            triangles=triangles,
            boundary_edges=[(int(a), int(b)) for a, b in pairs],
            boundary_points=set(np.unique(pairs).tolist()),
            area=float(mesh.areas[triangles].sum()),
            on_hull=bool(mesh.hull_triangles[triangles].any()),
        )


def delfin(
    mesh: MeshIndex,
    min_area: float,
    min_distance: float,
    absorb_terminal: bool = False,
) -> List[Set[int]]:
    """
    Detect void polygons.

    Args:
        mesh: Mesh index built with void tables
        min_area: Minimum triangle area to seed a void
        min_distance: Nearest-vertex distance within which seeds merge
        absorb_terminal: Also grow along longest-edge chains

    Returns:
        One set of boundary point indices per void region
    """
    regions = VoidDetector(mesh, min_area, min_distance, absorb_terminal).detect()
    return [region.boundary_points for region in regions]
