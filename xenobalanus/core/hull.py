"""Concave (alpha) hulls of point subsets."""

from typing import Dict, List, Sequence, Tuple

import numpy as np

from .errors import DegenerateInputError, HullError, check_threshold
from .geometry import as_points, segment_lengths
from .triangulation import triangulate_subset


def order_hull_edges(edges: Sequence[Tuple[int, int]]) -> List[int]:
    """
    Chain unordered edges into one closed ring of point indices.

    The ring starts at the lowest index and heads to its lower neighbor.
    The first point is not repeated at the end.

    Raises:
        HullError: Edges are empty or do not form exactly one simple cycle
    """
    if len(edges) == 0:
        raise HullError("No edges provided")

    adjacency: Dict[int, List[int]] = {}
    for a, b in edges:
        a, b = int(a), int(b)
        adjacency.setdefault(a, []).append(b)
        adjacency.setdefault(b, []).append(a)

    for vertex, linked in adjacency.items():
        if len(linked) != 2:
            raise HullError(f"Point {vertex} has {len(linked)} hull edges, expected 2")

    start = min(adjacency)
    ring = [start]
    previous, current = start, min(adjacency[start])
    while current != start:
        ring.append(current)
        a, b = adjacency[current]
        previous, current = current, (b if a == previous else a)

    if len(ring) != len(adjacency):
        raise HullError("Hull edges form more than one ring")
    return ring


def concave_hull(points, indices: Sequence[int], alpha: float) -> List[int]:
    """
    Concave hull of a point subset.

    The subset is triangulated, triangles with any edge of length >= alpha
    are dropped, and the edges used by exactly one remaining triangle are
    chained into a ring.

    Args:
        points: Full (n, 2) point array
        indices: Indices of the subset
        alpha: Edge length cutoff

    Returns:
        Ordered ring of global point indices
    """
    alpha = check_threshold("alpha", alpha)
    pts = as_points(points)
    subset = np.unique(np.asarray(indices, dtype=np.int64))
    if len(subset) < 3:
        raise HullError(f"Need at least 3 points for a hull, got {len(subset)}")

    try:
        triangles = triangulate_subset(pts, subset).reshape(-1, 3)
    except DegenerateInputError as e:
        raise HullError(f"Triangulation of the subset failed: {e}") from e

    pairs = np.sort(
        np.stack([triangles[:, [0, 1]], triangles[:, [1, 2]], triangles[:, [2, 0]]], axis=1),
        axis=2,
    )
    lengths = segment_lengths(pts, pairs.reshape(-1, 2)).reshape(-1, 3)
    keep = np.all(lengths < alpha, axis=1)
    if not keep.any():
        raise HullError(f"No triangle has all edges shorter than alpha={alpha}")

    kept = pairs[keep].reshape(-1, 2)
    unique, counts = np.unique(kept, axis=0, return_counts=True)
    boundary = unique[counts == 1]
    if len(boundary) == 0:
        raise HullError("No edges meet the criteria for the concave hull")

    return order_hull_edges(boundary.tolist())
