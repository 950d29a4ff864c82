"""
Core triangulation analysis functionality.
"""

from .errors import (
    AnalysisError,
    DegenerateInputError,
    IndexOutOfRangeError,
    InvalidThresholdError,
    MeshModeError,
    HullError,
)
from .geometry import Point, Edge
from .triangulation import triangulate
from .mesh_index import AnalysisMode, MeshIndex, build
from .delfin import VoidDetector, VoidRegion, delfin
from .dtscan import ClusterDetector, ClusterResult, dtscan
from .hull import concave_hull
from .analysis import SpatialAnalysis

__all__ = ['AnalysisError', 'DegenerateInputError', 'IndexOutOfRangeError',
           'InvalidThresholdError', 'MeshModeError', 'HullError',
           'Point', 'Edge', 'triangulate', 'AnalysisMode', 'MeshIndex', 'build',
           'VoidDetector', 'VoidRegion', 'delfin',
           'ClusterDetector', 'ClusterResult', 'dtscan',
           'concave_hull', 'SpatialAnalysis']
