"""
GeoPandas export for detection results.

Void regions are dissolved from their triangles into polygons; clusters are
wrapped in a hull polygon. No CRS is assigned: coordinates are whatever
planar units the points came in.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

import geopandas as gpd
import numpy as np
import pandas as pd
import structlog
from shapely.geometry import MultiPoint, Polygon
from shapely.ops import unary_union

from .core.delfin import VoidRegion
from .core.errors import HullError
from .core.hull import concave_hull
from .core.mesh_index import MeshIndex

logger = structlog.get_logger()

VOID_COLUMNS = ["void_id", "triangle_count", "boundary_point_count", "area", "on_hull"]
CLUSTER_COLUMNS = ["cluster_id", "point_count"]


def _frame(records: List[Dict[str, Any]], columns: List[str], geometries: list) -> gpd.GeoDataFrame:
    data = pd.DataFrame.from_records(records, columns=columns)
    return gpd.GeoDataFrame(data, geometry=gpd.GeoSeries(geometries, index=data.index))


def voids_to_geodataframe(mesh: MeshIndex, regions: Sequence[VoidRegion]) -> gpd.GeoDataFrame:
    """One row per void region, geometry is the union of its triangles."""
    records = []
    geometries = []
    for region in regions:
        triangles = mesh.points[mesh.triangles[region.triangles]]
        geometries.append(unary_union([Polygon(tri) for tri in triangles]))
        records.append({
            "void_id": region.id,
            "triangle_count": len(region.triangles),
            "boundary_point_count": len(region.boundary_points),
            "area": region.area,
            "on_hull": region.on_hull,
        })

    logger.info("Exported void regions", count=len(records))
    return _frame(records, VOID_COLUMNS, geometries)


def _cluster_geometry(mesh: MeshIndex, cluster: Sequence[int], alpha: Optional[float]):
    if alpha is not None:
        try:
            ring = concave_hull(mesh.points, cluster, alpha)
            return Polygon(mesh.points[ring])
        except HullError as e:
            logger.debug("Concave hull unavailable, using convex hull", reason=str(e))
    return MultiPoint(mesh.points[list(cluster)]).convex_hull


def clusters_to_geodataframe(
    mesh: MeshIndex,
    clusters: Sequence[Sequence[int]],
    alpha: Optional[float] = None,
) -> gpd.GeoDataFrame:
    """
    One row per cluster with a hull geometry.

    Args:
        mesh: Mesh index the clusters were computed on
        clusters: Point index sequences
        alpha: Concave hull edge cutoff; convex hull when None or when the
            concave hull cannot be formed
    """
    records = []
    geometries = []
    for cluster_id, cluster in enumerate(clusters):
        geometries.append(_cluster_geometry(mesh, cluster, alpha))
        records.append({"cluster_id": cluster_id, "point_count": len(cluster)})

    logger.info("Exported clusters", count=len(records))
    return _frame(records, CLUSTER_COLUMNS, geometries)


def point_labels_frame(mesh: MeshIndex, labels: np.ndarray) -> pd.DataFrame:
    """Point coordinates with their cluster label (-1 = noise)."""
    return pd.DataFrame({
        "x": mesh.points[:, 0],
        "y": mesh.points[:, 1],
        "cluster": np.asarray(labels, dtype=np.int64),
    })


def to_geojson(frame: gpd.GeoDataFrame) -> Dict[str, Any]:
    """GeoJSON FeatureCollection as a plain dict."""
    return json.loads(frame.to_json())
