"""Tests for geometry primitives."""

import math

import numpy as np
import pytest

from xenobalanus.core.errors import DegenerateInputError
from xenobalanus.core.geometry import (
    Edge, Point, as_points, segment_lengths, signed_areas, triangle_area
)


class TestPoint:
    """Test scalar point helpers."""

    def test_distance(self):
        """Test Euclidean distance between two points."""
        assert Point(0.0, 0.0).distance(Point(3.0, 4.0)) == pytest.approx(5.0)

    def test_bearing_quadrants(self):
        """Test that bearings cover all four quadrants in degrees."""
        origin = Point(0.0, 0.0)
        assert origin.bearing(Point(1.0, 0.0)) == pytest.approx(0.0)
        assert origin.bearing(Point(0.0, 1.0)) == pytest.approx(90.0)
        assert origin.bearing(Point(-1.0, 0.0)) == pytest.approx(180.0)
        assert origin.bearing(Point(0.0, -1.0)) == pytest.approx(270.0)


class TestEdge:
    """Test unordered edge keys."""

    def test_normalized_order(self):
        """Test that the lower index always comes first."""
        assert Edge.of(5, 2) == Edge(2, 5)
        assert Edge.of(2, 5) == Edge(2, 5)

    def test_hashable_as_unordered_pair(self):
        """Test that both directions hash to the same edge."""
        seen = {Edge.of(1, 3)}
        assert Edge.of(3, 1) in seen


class TestAreas:
    """Test triangle areas and segment lengths."""

    def test_signed_area_orientation(self):
        """Test that counter-clockwise triangles have positive area."""
        assert triangle_area((0, 0), (1, 0), (0, 1)) == pytest.approx(0.5)
        assert triangle_area((0, 0), (0, 1), (1, 0)) == pytest.approx(-0.5)

    def test_collinear_is_zero(self):
        """Test that collinear vertices give zero area."""
        assert triangle_area((0, 0), (1, 1), (2, 2)) == 0.0

    def test_vectorized_matches_scalar(self):
        """Test that the array version agrees with the scalar one."""
        points = np.array([[0.0, 0.0], [2.0, 0.0], [0.0, 3.0], [2.0, 3.0]])
        triangles = np.array([[0, 1, 2], [1, 3, 2]])
        areas = signed_areas(points, triangles)
        expected = [triangle_area(*points[t]) for t in triangles]
        np.testing.assert_allclose(areas, expected)

    def test_segment_lengths(self):
        """Test lengths of index pairs."""
        points = np.array([[0.0, 0.0], [3.0, 4.0], [3.0, 0.0]])
        lengths = segment_lengths(points, np.array([[0, 1], [0, 2]]))
        np.testing.assert_allclose(lengths, [5.0, 3.0])


class TestAsPoints:
    """Test point array coercion."""

    def test_accepts_lists(self):
        """Test that nested lists become a float64 (n, 2) array."""
        arr = as_points([(0, 0), (1, 2)])
        assert arr.shape == (2, 2)
        assert arr.dtype == np.float64

    @pytest.mark.parametrize("bad", [[1, 2, 3], [[1, 2, 3]], [["a", "b"]]])
    def test_rejects_bad_shapes(self, bad):
        """Test that non-(n, 2) or non-numeric input is rejected."""
        with pytest.raises(DegenerateInputError):
            as_points(bad)

    def test_rejects_non_finite(self):
        """Test that NaN coordinates are rejected."""
        with pytest.raises(DegenerateInputError):
            as_points([[0.0, math.nan], [1.0, 1.0]])
