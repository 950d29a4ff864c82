"""Shared point sets for the test suite."""

import numpy as np
import pytest

from xenobalanus.utils.random import random_points_in_square

# Dense 5x4 jittered grid (indices 0-19) inside a sparse 5-point ring (20-24)
DENSE_COUNT = 20
RING_INDICES = list(range(20, 25))
DENSE_INTERIOR = [6, 7, 8, 11, 12, 13]


def ring_and_cluster_points() -> np.ndarray:
    rng = np.random.default_rng(7)
    gx, gy = np.meshgrid(np.arange(5) * 0.25, np.arange(4) * 0.25)
    dense = np.column_stack([gx.ravel(), gy.ravel()])
    dense = dense + rng.uniform(-0.03, 0.03, dense.shape)

    angles = np.pi / 2 + 2 * np.pi * np.arange(5) / 5
    ring = np.column_stack([0.5 + 20 * np.cos(angles), 0.375 + 20 * np.sin(angles)])
    return np.vstack([dense, ring])


@pytest.fixture
def unit_square():
    """Unit square split along the 0-2 diagonal."""
    points = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    triangles = [0, 1, 2, 0, 2, 3]
    return points, triangles


@pytest.fixture
def ring_and_cluster():
    return ring_and_cluster_points()


@pytest.fixture
def random_cloud():
    return random_points_in_square((0.0, 0.0), 100.0, 400, seed=42)


@pytest.fixture
def terminal_fan():
    """
    Large triangle 0 ringed by three smaller neighbors.

    Triangles 1 and 2 have their longest edge on triangle 0; triangle 3's
    longest edge lies on the convex hull.
    """
    points = np.array([
        [0.0, 0.0], [10.0, 0.0], [0.0, 10.0], [6.0, 6.0], [5.0, -1.0], [-7.0, 12.0],
    ])
    triangles = [0, 1, 2, 1, 2, 3, 0, 4, 1, 0, 2, 5]
    return points, triangles
