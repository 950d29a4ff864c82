"""Tests for concave hulls and hull edge ordering."""

import numpy as np
import pytest

from xenobalanus.core.errors import HullError
from xenobalanus.core.hull import concave_hull, order_hull_edges


class TestOrderHullEdges:
    """Test chaining unordered edges into a ring."""

    def test_square_ring(self):
        """Test an already ordered square."""
        assert order_hull_edges([(0, 1), (1, 2), (2, 3), (3, 0)]) == [0, 1, 2, 3]

    def test_shuffled_edges(self):
        """Test that edge order and direction do not matter."""
        assert order_hull_edges([(2, 3), (3, 0), (2, 1), (1, 0)]) == [0, 1, 2, 3]

    def test_starts_at_lowest_index(self):
        """Test that the ring starts at its lowest point index."""
        assert order_hull_edges([(7, 5), (5, 9), (9, 7)]) == [5, 7, 9]

    def test_empty(self):
        """Test that no edges is an error."""
        with pytest.raises(HullError):
            order_hull_edges([])

    def test_open_path(self):
        """Test that an open chain is rejected."""
        with pytest.raises(HullError):
            order_hull_edges([(0, 1), (1, 2)])

    def test_two_rings(self):
        """Test that disjoint rings are rejected."""
        with pytest.raises(HullError):
            order_hull_edges([(0, 1), (1, 2), (2, 0), (3, 4), (4, 5), (5, 3)])


class TestConcaveHull:
    """Test alpha-filtered hulls of point subsets."""

    POINTS = np.array([
        [50.0, 50.0], [0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0], [-40.0, 7.0],
    ])

    def test_square_subset(self):
        """Test that the hull uses global indices of the subset."""
        assert concave_hull(self.POINTS, [4, 3, 2, 1], alpha=2.0) == [1, 2, 3, 4]

    def test_alpha_drops_long_edges(self):
        """Test that a spike only joins the hull once alpha admits its edges."""
        # Unit square with a spike; the spike triangle has edges of ~2.06
        points = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0], [0.5, 3.0]])
        assert concave_hull(points, range(5), alpha=2.0) == [0, 1, 2, 3]
        assert concave_hull(points, range(5), alpha=3.0) == [0, 1, 2, 4, 3]

    def test_alpha_too_small(self):
        """Test that an alpha below every edge length fails."""
        with pytest.raises(HullError):
            concave_hull(self.POINTS, [1, 2, 3, 4], alpha=0.5)

    def test_too_few_points(self):
        """Test that two points cannot form a hull."""
        with pytest.raises(HullError):
            concave_hull(self.POINTS, [1, 2], alpha=2.0)

    def test_collinear_subset(self):
        """Test that a collinear subset fails as a hull error."""
        points = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]])
        with pytest.raises(HullError):
            concave_hull(points, [0, 1, 2], alpha=5.0)
