from pathlib import Path
from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

import os

BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_PREFIX = "WORLDBUILDER_"


def load_env_file(env_file: Path) -> None:
    """Copy values from a .env file into os.environ, never overriding real env vars."""
    if not env_file.exists():
        return
    file_env = dotenv_values(env_file)
    for key, value in file_env.items():
        if key not in os.environ and value is not None:
            os.environ[key] = value


load_env_file(BASE_DIR / ".env")


class Settings(BaseSettings):
    """Application settings pulled from WORLDBUILDER_* environment variables."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Enable debug mode")
    allowed_origins: str = Field(default="*", description="Comma separated CORS allowed origins")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (json or console)")

    # Land generation defaults
    continent_count: int = Field(default=3, ge=1, description="Blobs per land generation")
    circles_per_continent: int = Field(default=18, ge=1, description="Circles unioned per blob")
    base_radius_meters: float = Field(default=55000.0, gt=0, description="Mean blob circle radius")
    land_circle_steps: int = Field(default=56, ge=3, description="Vertices per land circle")

    # Erase brush defaults
    erase_radius_meters: float = Field(default=20000.0, gt=0, description="Erase brush radius")
    erase_circle_steps: int = Field(default=48, ge=3, description="Vertices per erase circle")

    # Region partitioning defaults
    region_count: int = Field(default=90, ge=1, description="Target number of regions")
    min_seeds: int = Field(default=10, ge=1, description="Minimum seeds for a partition")
    attempts_per_seed: int = Field(default=2000, ge=1, description="Sampling tries per requested seed")

    @property
    def cors_origins(self) -> list:
        """Allowed CORS origins as a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


settings = Settings()
