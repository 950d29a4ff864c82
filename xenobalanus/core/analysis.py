"""
Point field analysis session.

Holds a point set, its triangulation and the mesh index, and runs both
detectors against the same index.
"""

from typing import List, Optional, Set, Tuple

import numpy as np
import structlog

from ..utils.random import random_points_in_circle, random_points_in_square
from .delfin import VoidDetector, VoidRegion
from .dtscan import ClusterDetector, ClusterResult
from .geometry import Point, as_points
from .hull import concave_hull
from .mesh_index import AnalysisMode, MeshIndex, build
from .triangulation import triangulate

logger = structlog.get_logger()


class SpatialAnalysis:
    """One analysis session over a planar point set."""

    def __init__(self, points=None, triangles=None):
        """
        Args:
            points: Optional (n, 2) coordinates
            triangles: Optional flat triangle index list for the points
        """
        self.points: np.ndarray = (
            as_points(points) if points is not None else np.empty((0, 2))
        )
        self.triangulation: np.ndarray = (
            np.asarray(triangles, dtype=np.int64).ravel()
            if triangles is not None
            else np.empty(0, dtype=np.int64)
        )
        self.mesh: Optional[MeshIndex] = None

    @classmethod
    def from_points(cls, points) -> "SpatialAnalysis":
        analysis = cls(points)
        analysis.triangulate()
        return analysis

    @classmethod
    def random_square(
        cls,
        center: Tuple[float, float],
        side_length: float,
        num_points: int,
        seed: Optional[int] = None,
    ) -> "SpatialAnalysis":
        return cls.from_points(random_points_in_square(center, side_length, num_points, seed))

    @classmethod
    def random_circle(
        cls,
        center: Tuple[float, float],
        radius: float,
        num_points: int,
        seed: Optional[int] = None,
    ) -> "SpatialAnalysis":
        return cls.from_points(random_points_in_circle(center, radius, num_points, seed))

    def set_points(self, points) -> None:
        """Replace the points; triangulation and mesh index are discarded."""
        self.points = as_points(points)
        self.triangulation = np.empty(0, dtype=np.int64)
        self.mesh = None

    def set_triangles(self, triangles) -> None:
        self.triangulation = np.asarray(triangles, dtype=np.int64).ravel()
        self.mesh = None

    def triangulate(self) -> np.ndarray:
        self.triangulation = triangulate(self.points)
        self.mesh = None
        return self.triangulation

    def preprocess(self, mode: AnalysisMode = AnalysisMode.BOTH, n_jobs: Optional[int] = None) -> MeshIndex:
        if self.triangulation.size == 0:
            self.triangulate()
        self.mesh = build(self.points, self.triangulation, mode, n_jobs=n_jobs)
        return self.mesh

    def _mesh_for(self, mode: AnalysisMode) -> MeshIndex:
        if self.mesh is None:
            return self.preprocess(AnalysisMode.BOTH)
        self.mesh.require(mode)
        return self.mesh

    def void_regions(
        self, min_area: float, min_distance: float, absorb_terminal: bool = False
    ) -> List[VoidRegion]:
        return VoidDetector(
            self._mesh_for(AnalysisMode.VOIDS), min_area, min_distance, absorb_terminal
        ).detect()

    def voids(
        self, min_area: float, min_distance: float, absorb_terminal: bool = False
    ) -> List[Set[int]]:
        """DELFIN boundary point sets."""
        return [
            r.boundary_points
            for r in self.void_regions(min_area, min_distance, absorb_terminal)
        ]

    def cluster_result(self, min_pts: int, max_closeness: float) -> ClusterResult:
        return ClusterDetector(
            self._mesh_for(AnalysisMode.ATTRACTORS), min_pts, max_closeness
        ).detect()

    def attractors(self, min_pts: int, max_closeness: float) -> List[List[int]]:
        """DTSCAN clusters."""
        return self.cluster_result(min_pts, max_closeness).clusters

    def concave_hull(self, indices, alpha: float) -> List[int]:
        return concave_hull(self.points, indices, alpha)

    def point(self, index: int) -> Point:
        x, y = self.points[index]
        return Point(float(x), float(y))

    def points_flat(self) -> np.ndarray:
        return self.points.ravel()

    def triangles_flat(self) -> np.ndarray:
        return self.triangulation.copy()

    def triangle_vertices(self) -> np.ndarray:
        return self.triangulation.reshape(-1, 3)

    def triangle_coordinates(self) -> np.ndarray:
        return self.points[self.triangle_vertices()]

    def edge_lengths(self) -> dict:
        """{(low, high): length} for every mesh edge."""
        mesh = self.mesh if self.mesh is not None else self.preprocess()
        return {
            (int(a), int(b)): float(length)
            for (a, b), length in zip(mesh.edges, mesh.edge_lengths)
        }
