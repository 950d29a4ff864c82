"""Configuration management."""

import os
from pathlib import Path

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env for local/dev environments only for values missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    for key, value in file_env.items():
        if key not in os.environ and value is not None:
            os.environ[key] = value


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(env_prefix="XENOBALANUS_", extra="ignore")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (json or console)")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Enable debug mode")
    allowed_origins: str = Field(default="*", description="CORS allowed origins, comma separated")
    max_points: int = Field(default=200_000, ge=3, description="Max points accepted per request")

    # Mesh Index Configuration
    build_workers: int = Field(default=1, description="joblib workers for the triangle pass (-1 = all cores)")
    parallel_min_triangles: int = Field(
        default=50_000, ge=1, description="Triangle count below which the build stays serial"
    )
    degenerate_area_tolerance: float = Field(
        default=0.0, ge=0.0, description="Triangles with |area| at or below this are degenerate"
    )

    # Default detector thresholds
    default_min_area: float = Field(default=1000.0, ge=0.0, description="DELFIN seed area")
    default_min_distance: float = Field(default=200.0, ge=0.0, description="DELFIN merge distance")
    default_min_pts: int = Field(default=5, ge=1, description="DTSCAN core neighbor count")
    default_max_closeness: float = Field(default=100.5, ge=0.0, description="DTSCAN max edge length")

    @property
    def origins(self) -> list:
        """CORS origins as a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


# Instantiate singleton settings object
settings = Settings()
