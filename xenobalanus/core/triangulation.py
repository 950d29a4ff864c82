"""Delaunay triangulation adapter over scipy.spatial."""

from typing import Sequence

import numpy as np
import structlog
from scipy.spatial import Delaunay, QhullError

from .errors import DegenerateInputError, IndexOutOfRangeError
from .geometry import as_points

logger = structlog.get_logger()


def triangulate(points) -> np.ndarray:
    """
    Triangulate a planar point set.

    Args:
        points: (n, 2) array-like of coordinates

    Returns:
        Flat index array; every 3 consecutive entries form one triangle
    """
    pts = as_points(points)
    if len(pts) < 3:
        raise DegenerateInputError(f"Need at least 3 points to triangulate, got {len(pts)}")

    try:
        tri = Delaunay(pts)
    except QhullError as e:
        raise DegenerateInputError(f"Delaunay triangulation failed: {e}") from e

    simplices = np.asarray(tri.simplices, dtype=np.intp)
    logger.debug("Triangulated points", points=len(pts), triangles=len(simplices))
    return simplices.ravel()


def triangulate_subset(points, indices: Sequence[int]) -> np.ndarray:
    """
    Triangulate a subset of points and return global indices.

    The subset is triangulated on its own, then local indices are mapped
    back into the full point sequence.
    """
    pts = as_points(points)
    idx = np.asarray(indices, dtype=np.intp)
    if idx.size and (idx.min() < 0 or idx.max() >= len(pts)):
        raise IndexOutOfRangeError(
            f"Subset index out of range for {len(pts)} points"
        )

    local = triangulate(pts[idx])
    return idx[local]
