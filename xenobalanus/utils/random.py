"""
Seeded random point generation.

Generators are created per call from the given seed so repeated calls with
the same seed return identical point sets.
"""

from typing import Optional, Tuple

import numpy as np


def get_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Return a numpy Generator for the seed (fresh entropy when None)."""
    return np.random.default_rng(seed)


def random_points_in_square(
    center: Tuple[float, float],
    side_length: float,
    num_points: int,
    seed: Optional[int] = None,
) -> np.ndarray:
    """
    Uniform points in an axis-aligned square.

    Args:
        center: (x, y) center of the square
        side_length: Length of each side
        num_points: Number of points
        seed: Random seed for reproducibility

    Returns:
        (num_points, 2) array of coordinates
    """
    rng = get_rng(seed)
    half = side_length / 2.0
    low = np.array([center[0] - half, center[1] - half])
    return low + rng.random((num_points, 2)) * side_length


def random_points_in_circle(
    center: Tuple[float, float],
    radius: float,
    num_points: int,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Uniform points in a disc (radius drawn as sqrt of a uniform sample)."""
    rng = get_rng(seed)
    angle = rng.uniform(0.0, 2.0 * np.pi, num_points)
    r = np.sqrt(rng.random(num_points)) * radius
    return np.column_stack([center[0] + r * np.cos(angle), center[1] + r * np.sin(angle)])
