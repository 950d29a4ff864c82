"""Tests for the Delaunay adapter."""

import numpy as np
import pytest

from xenobalanus.core.errors import DegenerateInputError, IndexOutOfRangeError
from xenobalanus.core.mesh_index import build
from xenobalanus.core.triangulation import triangulate, triangulate_subset


class TestTriangulate:
    """Test whole point set triangulation."""

    def test_flat_output(self, random_cloud):
        """Test that output is a flat list of valid indices."""
        flat = triangulate(random_cloud)
        assert flat.ndim == 1
        assert len(flat) % 3 == 0
        assert flat.min() >= 0
        assert flat.max() < len(random_cloud)

    def test_output_builds_mesh(self, random_cloud):
        """Test that the output is accepted by the mesh index."""
        mesh = build(random_cloud, triangulate(random_cloud))
        assert mesh.edge_law_holds()

    def test_square_gives_two_triangles(self, unit_square):
        """Test that four corners give two triangles."""
        points, _ = unit_square
        assert len(triangulate(points)) == 6

    def test_too_few_points(self):
        """Test that two points cannot be triangulated."""
        with pytest.raises(DegenerateInputError):
            triangulate([[0.0, 0.0], [1.0, 1.0]])

    def test_collinear_points(self):
        """Test that collinear points are rejected."""
        with pytest.raises(DegenerateInputError):
            triangulate([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0], [3.0, 3.0]])


class TestTriangulateSubset:
    """Test triangulation of an index subset."""

    def test_returns_global_indices(self):
        """Test that subset triangles refer to the full point array."""
        points = np.array([
            [50.0, 50.0], [0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0], [-40.0, 7.0]
        ])
        flat = triangulate_subset(points, [1, 2, 3, 4])
        assert set(flat.tolist()) == {1, 2, 3, 4}

    def test_out_of_range(self):
        """Test that a missing point index is rejected."""
        with pytest.raises(IndexOutOfRangeError):
            triangulate_subset(np.zeros((3, 2)), [0, 1, 5])
