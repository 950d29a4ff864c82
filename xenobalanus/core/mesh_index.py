"""
Mesh index built once from a triangulation.

This module turns a point set and its triangle index list into the lookup
tables both detectors read:
- Edge table (unique unordered pairs, lengths, owning triangles)
- Triangle table (areas, edges, neighbors across each edge)
- Point incidence and, for attractor analysis, point adjacency in CSR form

Everything is stored as dense integer-indexed numpy arrays. The arrays are
write-protected once the build finishes, so a MeshIndex can be shared by any
number of concurrent readers.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

import numpy as np
import structlog
from joblib import Parallel, delayed, effective_n_jobs

from ..config import settings
from .errors import DegenerateInputError, IndexOutOfRangeError, MeshModeError
from .geometry import as_points, segment_lengths, signed_areas

logger = structlog.get_logger()

NO_TRIANGLE = -1


class AnalysisMode(IntEnum):
    """Which classification tables the mesh index carries."""
    BOTH = 0
    ATTRACTORS = 1
    VOIDS = 2

    @property
    def has_voids(self) -> bool:
        return self in (AnalysisMode.BOTH, AnalysisMode.VOIDS)

    @property
    def has_attractors(self) -> bool:
        return self in (AnalysisMode.BOTH, AnalysisMode.ATTRACTORS)


@dataclass(frozen=True, eq=False)
class MeshIndex:
    """Immutable adjacency/incidence structure over one triangulation."""
    mode: AnalysisMode

    # Arena
    points: np.ndarray               # (n, 2) coordinates
    triangles: np.ndarray            # (m, 3) point indices
    areas: np.ndarray                # (m,) unsigned triangle areas

    # Edge table, sorted by (low, high) point index
    edges: np.ndarray                # (e, 2) point index pairs, low first
    edge_keys: np.ndarray            # (e,) low * n + high, ascending
    edge_lengths: np.ndarray         # (e,)
    edge_triangles: np.ndarray       # (e, 2) owning triangles, -1 on hull side

    # Triangle topology
    triangle_edges: np.ndarray       # (m, 3) edge ids: (v0,v1), (v1,v2), (v2,v0)
    triangle_neighbors: np.ndarray   # (m, 3) triangle across each edge, -1 if none

    # Point -> incident triangles (CSR)
    incidence_offsets: np.ndarray    # (n + 1,)
    incidence_triangles: np.ndarray  # (3m,)

    # Void tags (modes BOTH / VOIDS)
    terminal_edges: Optional[np.ndarray] = None   # (m,) longest edge of each triangle
    hull_triangles: Optional[np.ndarray] = None   # (m,) has an edge on the convex hull

    # Attractor tags (modes BOTH / ATTRACTORS), point -> neighbors (CSR)
    neighbor_offsets: Optional[np.ndarray] = None   # (n + 1,)
    neighbor_indices: Optional[np.ndarray] = None   # (2e,) sorted per point
    neighbor_lengths: Optional[np.ndarray] = None   # (2e,)

    @property
    def n_points(self) -> int:
        return len(self.points)

    @property
    def n_triangles(self) -> int:
        return len(self.triangles)

    @property
    def n_edges(self) -> int:
        return len(self.edges)

    def supports(self, mode: AnalysisMode) -> bool:
        """Check whether the tables needed for `mode` were built."""
        mode = AnalysisMode(mode)
        if mode == AnalysisMode.BOTH:
            return self.mode == AnalysisMode.BOTH
        if mode == AnalysisMode.VOIDS:
            return self.mode.has_voids
        return self.mode.has_attractors

    def require(self, mode: AnalysisMode) -> None:
        if not self.supports(mode):
            raise MeshModeError(
                f"Mesh index was built in mode {self.mode.name}, "
                f"which lacks the tables for {AnalysisMode(mode).name}"
            )

    def neighbors(self, point: int) -> np.ndarray:
        """Adjacent point indices of `point`, ascending."""
        self.require(AnalysisMode.ATTRACTORS)
        start, end = self.neighbor_offsets[point], self.neighbor_offsets[point + 1]
        return self.neighbor_indices[start:end]

    def neighbor_lengths_of(self, point: int) -> np.ndarray:
        """Edge lengths to `point`'s neighbors, aligned with neighbors()."""
        self.require(AnalysisMode.ATTRACTORS)
        start, end = self.neighbor_offsets[point], self.neighbor_offsets[point + 1]
        return self.neighbor_lengths[start:end]

    def incident_triangles(self, point: int) -> np.ndarray:
        start, end = self.incidence_offsets[point], self.incidence_offsets[point + 1]
        return self.incidence_triangles[start:end]

    def edge_id(self, u: int, v: int) -> Optional[int]:
        """Edge id for the pair (u, v), or None if they are not connected."""
        if u == v:
            return None
        lo, hi = (u, v) if u < v else (v, u)
        key = lo * self.n_points + hi
        pos = int(np.searchsorted(self.edge_keys, key))
        if pos < len(self.edge_keys) and self.edge_keys[pos] == key:
            return pos
        return None

    def edge_length(self, u: int, v: int) -> float:
        eid = self.edge_id(u, v)
        if eid is None:
            raise KeyError(f"({u}, {v}) is not an edge of the mesh")
        return float(self.edge_lengths[eid])

    def triangles_of_edge(self, u: int, v: int) -> Tuple[int, ...]:
        """One triangle for hull edges, two for interior edges."""
        eid = self.edge_id(u, v)
        if eid is None:
            raise KeyError(f"({u}, {v}) is not an edge of the mesh")
        return tuple(int(t) for t in self.edge_triangles[eid] if t != NO_TRIANGLE)

    def boundary_edges(self) -> np.ndarray:
        """Ids of edges owned by a single triangle (the convex hull)."""
        return np.flatnonzero(self.edge_triangles[:, 1] == NO_TRIANGLE)

    def hull_points(self) -> np.ndarray:
        return np.unique(self.edges[self.boundary_edges()])

    def triangle_coordinates(self) -> np.ndarray:
        """(m, 3, 2) coordinates of every triangle's vertices."""
        return self.points[self.triangles]

    def edge_law_holds(self) -> bool:
        """Each edge has 1 or 2 triangles and 3m = 2 * interior + boundary."""
        owners = (self.edge_triangles != NO_TRIANGLE).sum(axis=1)
        if np.any((owners < 1) | (owners > 2)):
            return False
        interior = int(np.count_nonzero(owners == 2))
        boundary = int(np.count_nonzero(owners == 1))
        return 3 * self.n_triangles == 2 * interior + boundary


def _as_triangles(triangles, n_points: int) -> np.ndarray:
    """Validate a flat or (m, 3) triangle index list."""
    try:
        arr = np.asarray(triangles)
    except (TypeError, ValueError) as e:
        raise DegenerateInputError(f"Triangles are not an index list: {e}") from e
    if arr.size == 0:
        raise DegenerateInputError("Triangle list is empty")
    if not np.issubdtype(arr.dtype, np.integer):
        raise DegenerateInputError(f"Triangle indices must be integers, got {arr.dtype}")

    if arr.ndim == 1:
        if arr.size % 3 != 0:
            raise DegenerateInputError(
                f"Flat triangle list length {arr.size} is not a multiple of 3"
            )
        arr = arr.reshape(-1, 3)
    elif arr.ndim != 2 or arr.shape[1] != 3:
        raise DegenerateInputError(f"Expected (m, 3) triangles, got shape {arr.shape}")

    arr = arr.astype(np.int64)

    out_of_range = (arr < 0) | (arr >= n_points)
    if out_of_range.any():
        t = int(np.flatnonzero(out_of_range.any(axis=1))[0])
        raise IndexOutOfRangeError(
            f"Triangle {t} {arr[t].tolist()} references a point outside 0..{n_points - 1}"
        )

    repeated = (arr[:, 0] == arr[:, 1]) | (arr[:, 1] == arr[:, 2]) | (arr[:, 0] == arr[:, 2])
    if repeated.any():
        t = int(np.flatnonzero(repeated)[0])
        raise DegenerateInputError(f"Triangle {t} {arr[t].tolist()} repeats a vertex")

    return arr


def _scan_partition(points: np.ndarray, triangles: np.ndarray):
    """
    Per-triangle local attributes for one contiguous partition.

    Returns signed areas, the three edge pairs of each triangle (low index
    first, in (v0,v1), (v1,v2), (v2,v0) order) and their lengths.
    """
    areas = signed_areas(points, triangles)
    pairs = np.stack(
        [triangles[:, [0, 1]], triangles[:, [1, 2]], triangles[:, [2, 0]]], axis=1
    ).reshape(-1, 2)
    pairs = np.sort(pairs, axis=1)
    lengths = segment_lengths(points, pairs)
    return areas, pairs, lengths


def _scan(points: np.ndarray, triangles: np.ndarray, n_jobs: int, min_parallel: int):
    """Run the triangle pass, split across joblib workers for large inputs."""
    workers = effective_n_jobs(n_jobs)
    if workers <= 1 or len(triangles) < min_parallel:
        return _scan_partition(points, triangles)

    parts = np.array_split(triangles, workers)
    logger.debug("Parallel triangle pass", workers=workers, partitions=len(parts))
    results = Parallel(n_jobs=workers, prefer="threads")(
        delayed(_scan_partition)(points, part) for part in parts
    )
    # Concatenating in partition order reproduces the serial layout exactly
    return tuple(np.concatenate(column) for column in zip(*results))


def _csr(keys: np.ndarray, values: np.ndarray, size: int):
    """Group values by key; within a key, values are ascending."""
    order = np.lexsort((values, keys))
    offsets = np.zeros(size + 1, dtype=np.int64)
    np.cumsum(np.bincount(keys, minlength=size), out=offsets[1:])
    return offsets, order


def _freeze(*arrays) -> None:
    for arr in arrays:
        if arr is not None:
            arr.setflags(write=False)


def build(
    points,
    triangles,
    mode: AnalysisMode = AnalysisMode.BOTH,
    n_jobs: Optional[int] = None,
    area_tolerance: Optional[float] = None,
    min_parallel_triangles: Optional[int] = None,
) -> MeshIndex:
    """
    Build the mesh index for a triangulated point set.

    Args:
        points: (n, 2) array-like of coordinates
        triangles: Flat index list (3 per triangle) or (m, 3) array
        mode: 0 = both analyses, 1 = attractors only, 2 = voids only
        n_jobs: joblib workers for the triangle pass (default from settings)
        area_tolerance: |area| at or below this marks a degenerate triangle
        min_parallel_triangles: Triangle count below which the pass stays serial

    Returns:
        Immutable MeshIndex

    Raises:
        DegenerateInputError: Too few points, repeated vertices, zero-area
            triangles or an edge shared by more than two triangles
        IndexOutOfRangeError: A triangle references a missing point
    """
    try:
        mode = AnalysisMode(mode)
    except ValueError as e:
        raise MeshModeError(f"Unknown analysis mode {mode!r}") from e

    pts = as_points(points).copy()
    n = len(pts)
    if n < 3:
        raise DegenerateInputError(f"Need at least 3 points, got {n}")

    tris = _as_triangles(triangles, n)
    m = len(tris)

    n_jobs = settings.build_workers if n_jobs is None else n_jobs
    tolerance = settings.degenerate_area_tolerance if area_tolerance is None else area_tolerance
    min_parallel = (
        settings.parallel_min_triangles if min_parallel_triangles is None else min_parallel_triangles
    )

    logger.info("Building mesh index", points=n, triangles=m, mode=mode.name)

    signed, pairs, lengths = _scan(pts, tris, n_jobs, min_parallel)

    flat = np.abs(signed) <= tolerance
    if flat.any():
        t = int(np.flatnonzero(flat)[0])
        raise DegenerateInputError(
            f"Triangle {t} {tris[t].tolist()} has zero area (collinear vertices)"
        )
    areas = np.abs(signed)

    # Edge table
    keys = pairs[:, 0] * n + pairs[:, 1]
    edge_keys, first, inverse, counts = np.unique(
        keys, return_index=True, return_inverse=True, return_counts=True
    )
    inverse = inverse.reshape(-1)
    if counts.max() > 2:
        e = int(np.flatnonzero(counts > 2)[0])
        raise DegenerateInputError(
            f"Edge ({edge_keys[e] // n}, {edge_keys[e] % n}) is shared by "
            f"{counts[e]} triangles"
        )

    edges = np.column_stack([edge_keys // n, edge_keys % n])
    edge_lengths = lengths[first]
    triangle_edges = inverse.reshape(m, 3)

    owner = np.repeat(np.arange(m, dtype=np.int64), 3)
    order = np.argsort(inverse, kind="stable")
    sorted_owner = owner[order]
    first_pos = np.concatenate([[0], np.cumsum(counts)[:-1]])
    edge_triangles = np.full((len(edges), 2), NO_TRIANGLE, dtype=np.int64)
    edge_triangles[:, 0] = sorted_owner[first_pos]
    interior = counts == 2
    edge_triangles[interior, 1] = sorted_owner[first_pos[interior] + 1]

    # Neighbor across each edge is the edge's other owner
    sides = edge_triangles[triangle_edges]
    own = np.arange(m)[:, None]
    triangle_neighbors = np.where(sides[:, :, 0] == own, sides[:, :, 1], sides[:, :, 0])

    # Point -> incident triangles
    corner = tris.ravel()
    incidence_offsets, order = _csr(corner, owner, n)
    incidence_triangles = owner[order]

    terminal_edges = hull_triangles = None
    if mode.has_voids:
        longest = np.argmax(edge_lengths[triangle_edges], axis=1)
        terminal_edges = triangle_edges[np.arange(m), longest]
        hull_triangles = (triangle_neighbors == NO_TRIANGLE).any(axis=1)

    neighbor_offsets = neighbor_indices = neighbor_lengths = None
    if mode.has_attractors:
        src = np.concatenate([edges[:, 0], edges[:, 1]])
        dst = np.concatenate([edges[:, 1], edges[:, 0]])
        both_lengths = np.concatenate([edge_lengths, edge_lengths])
        neighbor_offsets, order = _csr(src, dst, n)
        neighbor_indices = dst[order]
        neighbor_lengths = both_lengths[order]

    _freeze(
        pts, tris, areas, edges, edge_keys, edge_lengths, edge_triangles, triangle_edges,
        triangle_neighbors, incidence_offsets, incidence_triangles, terminal_edges,
        hull_triangles, neighbor_offsets, neighbor_indices, neighbor_lengths,
    )

    mesh = MeshIndex(
        mode=mode,
        points=pts,
        triangles=tris,
        areas=areas,
        edges=edges,
        edge_keys=edge_keys,
        edge_lengths=edge_lengths,
        edge_triangles=edge_triangles,
        triangle_edges=triangle_edges,
        triangle_neighbors=triangle_neighbors,
        incidence_offsets=incidence_offsets,
        incidence_triangles=incidence_triangles,
        terminal_edges=terminal_edges,
        hull_triangles=hull_triangles,
        neighbor_offsets=neighbor_offsets,
        neighbor_indices=neighbor_indices,
        neighbor_lengths=neighbor_lengths,
    )

    logger.info(
        "Mesh index built",
        edges=mesh.n_edges,
        boundary_edges=int(np.count_nonzero(~interior)),
    )
    return mesh
