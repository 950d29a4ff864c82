"""
Geometry primitives.

Scalar helpers work on single points; the vectorized helpers take a
coordinate array plus index arrays, so callers never copy points around.
"""

import math
from typing import NamedTuple, Sequence

import numpy as np

from .errors import DegenerateInputError


class Point(NamedTuple):
    """Immutable 2D coordinate."""
    x: float
    y: float

    def distance(self, other: "Point") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def bearing(self, other: "Point") -> float:
        """Angle from this point to `other` in degrees, in [0, 360)."""
        angle = math.degrees(math.atan2(other.y - self.y, other.x - self.x))
        return angle % 360.0


class Edge(NamedTuple):
    """Unordered pair of point indices, stored low index first."""
    a: int
    b: int

    @classmethod
    def of(cls, u: int, v: int) -> "Edge":
        return cls(u, v) if u < v else cls(v, u)


def triangle_area(a: Sequence[float], b: Sequence[float], c: Sequence[float]) -> float:
    """Signed area of triangle abc (positive when counter-clockwise)."""
    return 0.5 * ((b[0] - a[0]) * (c[1] - a[1]) - (c[0] - a[0]) * (b[1] - a[1]))


def as_points(points) -> np.ndarray:
    """Coerce an array-like of [x, y] pairs into a float64 (n, 2) array."""
    try:
        arr = np.asarray(points, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise DegenerateInputError(f"Points are not numeric coordinates: {e}") from e

    if arr.ndim != 2 or arr.shape[1] != 2:
        raise DegenerateInputError(f"Expected an (n, 2) point array, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise DegenerateInputError("Points contain non-finite coordinates")
    return arr


def segment_lengths(points: np.ndarray, pairs: np.ndarray) -> np.ndarray:
    """Euclidean length of each (k, 2) index pair."""
    delta = points[pairs[:, 1]] - points[pairs[:, 0]]
    return np.hypot(delta[:, 0], delta[:, 1])


def signed_areas(points: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Signed shoelace area for each (m, 3) index triple."""
    a = points[triangles[:, 0]]
    b = points[triangles[:, 1]]
    c = points[triangles[:, 2]]
    return 0.5 * ((b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1])
                  - (c[:, 0] - a[:, 0]) * (b[:, 1] - a[:, 1]))
