"""Tests for the SpatialAnalysis session."""

import numpy as np
import pytest

from conftest import DENSE_COUNT, RING_INDICES
from xenobalanus.core.analysis import SpatialAnalysis
from xenobalanus.core.errors import MeshModeError
from xenobalanus.core.geometry import Point
from xenobalanus.core.mesh_index import AnalysisMode


class TestSession:
    """Test session state and accessors."""

    def test_from_points_triangulates(self, unit_square):
        """Test that construction from points triangulates eagerly."""
        points, _ = unit_square
        analysis = SpatialAnalysis.from_points(points)
        assert len(analysis.triangles_flat()) == 6
        assert analysis.triangle_vertices().shape == (2, 3)
        assert analysis.triangle_coordinates().shape == (2, 3, 2)
        assert analysis.mesh is None

    def test_supplied_triangles(self, unit_square):
        """Test accessors over caller-supplied triangles."""
        analysis = SpatialAnalysis(*unit_square)
        assert analysis.triangles_flat().tolist() == [0, 1, 2, 0, 2, 3]
        assert analysis.point(2) == Point(1.0, 1.0)
        assert analysis.points_flat().tolist() == [0.0, 0.0, 1.0, 0.0, 1.0, 1.0, 0.0, 1.0]

    def test_lazy_preprocess(self, unit_square):
        """Test that detectors build the mesh index on first use."""
        analysis = SpatialAnalysis(*unit_square)
        clusters = analysis.attractors(3, float(np.hypot(1.0, 1.0)))
        assert analysis.mesh is not None
        assert analysis.mesh.mode == AnalysisMode.BOTH
        assert sorted(clusters[0]) == [0, 1, 2, 3]
        assert analysis.voids(0.5, 0.0) == [{0, 1, 2, 3}]

    def test_mode_mismatch(self, unit_square):
        """Test that a void-only index refuses attractor analysis."""
        analysis = SpatialAnalysis(*unit_square)
        analysis.preprocess(AnalysisMode.VOIDS)
        assert analysis.voids(0.5, 0.0) == [{0, 1, 2, 3}]
        with pytest.raises(MeshModeError):
            analysis.attractors(2, 1.0)

    def test_set_points_resets(self, unit_square):
        """Test that new points discard the triangulation and index."""
        analysis = SpatialAnalysis(*unit_square)
        analysis.preprocess()
        analysis.set_points([[0, 0], [2, 0], [0, 2]])
        assert analysis.mesh is None
        assert analysis.triangles_flat().size == 0
        analysis.preprocess()
        assert analysis.mesh.n_triangles == 1

    def test_edge_lengths(self, unit_square):
        """Test the edge length mapping."""
        lengths = SpatialAnalysis(*unit_square).edge_lengths()
        assert lengths[(0, 1)] == pytest.approx(1.0)
        assert lengths[(0, 2)] == pytest.approx(np.sqrt(2))
        assert len(lengths) == 5

    def test_concave_hull(self, unit_square):
        """Test the hull helper on the session's points."""
        analysis = SpatialAnalysis(*unit_square)
        assert analysis.concave_hull([0, 1, 2, 3], 2.0) == [0, 1, 2, 3]

    def test_terminal_absorption(self, terminal_fan):
        """Test that void absorption passes through the session."""
        analysis = SpatialAnalysis(*terminal_fan)
        assert analysis.voids(40.0, 0.0) == [{0, 1, 2}]
        assert analysis.voids(40.0, 0.0, absorb_terminal=True) == [{0, 1, 2, 3, 4}]


class TestPipeline:
    """Test end-to-end runs."""

    def test_ring_and_cluster(self, ring_and_cluster):
        """Test both detectors on the ring and dense group."""
        analysis = SpatialAnalysis.from_points(ring_and_cluster)
        analysis.preprocess(AnalysisMode.BOTH, n_jobs=1)
        voids = analysis.voids(0.5, 0.0)
        clusters = analysis.attractors(2, 0.5)
        assert len(voids) == 1 and set(RING_INDICES) <= voids[0]
        assert len(clusters) == 1 and sorted(clusters[0]) == list(range(DENSE_COUNT))

    def test_random_square(self):
        """Test a session over random square points."""
        analysis = SpatialAnalysis.random_square((0.0, 0.0), 100.0, 300, seed=3)
        assert analysis.points.shape == (300, 2)
        mesh = analysis.preprocess()
        assert mesh.edge_law_holds()

    def test_random_circle_reproducible(self):
        """Test that seeded sessions reproduce triangulation and clusters."""
        a = SpatialAnalysis.random_circle((5.0, 5.0), 10.0, 200, seed=11)
        b = SpatialAnalysis.random_circle((5.0, 5.0), 10.0, 200, seed=11)
        np.testing.assert_array_equal(a.triangles_flat(), b.triangles_flat())
        assert a.attractors(4, 1.5) == b.attractors(4, 1.5)
