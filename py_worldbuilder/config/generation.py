"""
Caller-supplied parameters for the procedural operations.

Defaults are taken from the application settings so a deployment can tune
them through the environment; individual requests may override any field.
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from .config import Settings, settings as default_settings


class GenerationParameters(BaseModel):
    """Parameters for land generation, erasing and region partitioning."""

    region_count: int = Field(default=90, ge=1, description="Target number of regions")
    continent_count: int = Field(default=3, ge=1, description="Number of land blobs")
    circles_per_continent: int = Field(default=18, ge=1, description="Circles per blob")
    base_radius_meters: float = Field(default=55000.0, gt=0, description="Mean circle radius in meters")
    erase_radius_meters: float = Field(default=20000.0, gt=0, description="Erase brush radius in meters")
    land_circle_steps: int = Field(default=56, ge=3, description="Vertices per generated land circle")
    erase_circle_steps: int = Field(default=48, ge=3, description="Vertices per erase brush circle")
    min_seeds: int = Field(default=10, ge=1, description="Minimum region seeds for a valid partition")
    attempts_per_seed: int = Field(default=2000, ge=1, description="Rejection sampling tries per target seed")

    @model_validator(mode="after")
    def check_region_count(self) -> "GenerationParameters":
        if self.region_count < self.min_seeds:
            raise ValueError(
                f"region_count ({self.region_count}) must be at least min_seeds ({self.min_seeds})"
            )
        return self


def default_parameters(config: Optional[Settings] = None) -> GenerationParameters:
    """Build GenerationParameters from the application settings."""
    config = config or default_settings
    return GenerationParameters(
        region_count=config.region_count,
        continent_count=config.continent_count,
        circles_per_continent=config.circles_per_continent,
        base_radius_meters=config.base_radius_meters,
        erase_radius_meters=config.erase_radius_meters,
        land_circle_steps=config.land_circle_steps,
        erase_circle_steps=config.erase_circle_steps,
        min_seeds=config.min_seeds,
        attempts_per_seed=config.attempts_per_seed,
    )
