"""FastAPI main application."""

from typing import Any, Dict, List, Literal, Optional, Tuple

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .. import __version__
from ..config import settings
from ..core.analysis import SpatialAnalysis
from ..core.errors import AnalysisError
from ..core.mesh_index import AnalysisMode
from ..export import clusters_to_geodataframe, to_geojson, voids_to_geodataframe
from ..log import configure_logging

configure_logging(settings.log_level, settings.log_format)

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="Xenobalanus API",
    description="Void (DELFIN) and attractor (DTSCAN) detection over Delaunay triangulations",
    version=__version__,
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response models
class Thresholds(BaseModel):
    """Detector thresholds; omitted values fall back to settings."""

    mode: int = Field(0, ge=0, le=2, description="0 = both, 1 = attractors only, 2 = voids only")
    min_area: float = Field(default_factory=lambda: settings.default_min_area, ge=0)
    min_distance: float = Field(default_factory=lambda: settings.default_min_distance, ge=0)
    absorb_terminal: bool = Field(False, description="Grow voids along longest-edge chains")
    min_pts: int = Field(default_factory=lambda: settings.default_min_pts, ge=1)
    max_closeness: float = Field(default_factory=lambda: settings.default_max_closeness, ge=0)


class AnalyzeRequest(Thresholds):
    """Analyze a caller-supplied point set."""

    points: List[Tuple[float, float]] = Field(..., min_length=3, description="[x, y] pairs")


class RandomAnalyzeRequest(Thresholds):
    """Generate random points and analyze them."""

    shape: Literal["square", "circle"] = Field("square", description="Sampling region")
    center: Tuple[float, float] = Field((0.0, 0.0), description="Region center")
    size: float = Field(10000.0, gt=0, description="Side length (square) or radius (circle)")
    num_points: int = Field(10000, ge=3, description="Number of points")
    seed: Optional[int] = Field(None, description="Random seed for reproducible points")


class AnalyzeResponse(BaseModel):
    """Detection results as point index groups."""

    points_count: int
    triangles_count: int
    voids: Optional[List[List[int]]] = None
    clusters: Optional[List[List[int]]] = None
    noise_count: Optional[int] = None


def _check_size(count: int) -> None:
    if count > settings.max_points:
        raise HTTPException(
            status_code=413,
            detail=f"{count} points exceeds the limit of {settings.max_points}",
        )


def _run(analysis: SpatialAnalysis, request: Thresholds) -> AnalyzeResponse:
    mode = AnalysisMode(request.mode)
    mesh = analysis.preprocess(mode)
    response = AnalyzeResponse(points_count=mesh.n_points, triangles_count=mesh.n_triangles)

    if mode.has_voids:
        voids = analysis.voids(request.min_area, request.min_distance, request.absorb_terminal)
        response.voids = [sorted(polygon) for polygon in voids]
    if mode.has_attractors:
        result = analysis.cluster_result(request.min_pts, request.max_closeness)
        response.clusters = result.clusters
        response.noise_count = len(result.noise)

    logger.info(
        "Analysis complete",
        points=response.points_count,
        voids=None if response.voids is None else len(response.voids),
        clusters=None if response.clusters is None else len(response.clusters),
    )
    return response


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Xenobalanus API",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.post("/analyze", response_model=AnalyzeResponse)
def analyze(request: AnalyzeRequest):
    """Triangulate the points and run the detectors selected by `mode`."""
    _check_size(len(request.points))
    logger.info("Analysis requested", points=len(request.points), mode=request.mode)
    try:
        analysis = SpatialAnalysis.from_points(request.points)
        return _run(analysis, request)
    except AnalysisError as e:
        logger.warning("Analysis rejected", error=str(e))
        raise HTTPException(status_code=422, detail=str(e))


@app.post("/analyze/random", response_model=AnalyzeResponse)
def analyze_random(request: RandomAnalyzeRequest):
    """Generate random points, then analyze them like /analyze."""
    _check_size(request.num_points)
    logger.info("Random analysis requested", shape=request.shape, points=request.num_points)
    try:
        if request.shape == "circle":
            analysis = SpatialAnalysis.random_circle(
                request.center, request.size, request.num_points, request.seed
            )
        else:
            analysis = SpatialAnalysis.random_square(
                request.center, request.size, request.num_points, request.seed
            )
        return _run(analysis, request)
    except AnalysisError as e:
        logger.warning("Analysis rejected", error=str(e))
        raise HTTPException(status_code=422, detail=str(e))


@app.post("/analyze/geojson")
def analyze_geojson(request: AnalyzeRequest) -> Dict[str, Any]:
    """Like /analyze, but returns voids and clusters as GeoJSON FeatureCollections."""
    _check_size(len(request.points))
    try:
        analysis = SpatialAnalysis.from_points(request.points)
        mode = AnalysisMode(request.mode)
        mesh = analysis.preprocess(mode)

        result: Dict[str, Any] = {}
        if mode.has_voids:
            regions = analysis.void_regions(
                request.min_area, request.min_distance, request.absorb_terminal
            )
            result["voids"] = to_geojson(voids_to_geodataframe(mesh, regions))
        if mode.has_attractors:
            clusters = analysis.attractors(request.min_pts, request.max_closeness)
            result["clusters"] = to_geojson(clusters_to_geodataframe(mesh, clusters))
        return result
    except AnalysisError as e:
        logger.warning("Analysis rejected", error=str(e))
        raise HTTPException(status_code=422, detail=str(e))


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
