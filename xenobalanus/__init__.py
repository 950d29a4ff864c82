"""Void and attractor detection over Delaunay triangulations of planar point sets."""

__version__ = "0.1.0"
