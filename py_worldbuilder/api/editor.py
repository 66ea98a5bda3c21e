"""
Editing API endpoints for the land and region layers.

The client owns the feature collection: every request carries the current
features and every successful response carries the complete replacement
collection. Failed operations return an error status and no features, so
the client's collection stays as it was.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import structlog
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..config.generation import GenerationParameters, default_parameters
from ..core.editor import (
    EditResult,
    apply_edit,
    commit_selection_to_land,
    erase_land_at,
    generate_land,
    generate_regions,
    update_feature_properties,
)
from ..core.exceptions import (
    FeatureNotFoundError,
    InsufficientSeedsError,
    NoLandError,
    StructuralGeometryError,
    WorldbuilderError,
)
from ..core.features import Feature, InMemoryFeatureStore
from ..core.land import Bounds
from ..utils.random import make_random_source

logger = structlog.get_logger()

router = APIRouter(prefix="/editor", tags=["Editor"])

ERROR_STATUS = {
    StructuralGeometryError: 400,
    FeatureNotFoundError: 404,
    NoLandError: 409,
    InsufficientSeedsError: 422,
}


class EditRequest(BaseModel):
    """Base request carrying the client's current features."""

    features: List[Feature] = Field(default_factory=list, description="Current feature collection")


class CommitLandRequest(EditRequest):
    selected_id: Union[str, int] = Field(description="Id of the drawn polygon to merge into land")


class EraseLandRequest(EditRequest):
    point: Tuple[float, float] = Field(description="Brush centre as [lng, lat]")
    radius_meters: Optional[float] = Field(default=None, gt=0, description="Brush radius, defaults to settings")


class BoundsModel(BaseModel):
    west: float
    south: float
    east: float
    north: float


class GenerateLandRequest(EditRequest):
    bounds: BoundsModel = Field(description="Region to generate land in, usually the viewport")
    parameters: Optional[GenerationParameters] = Field(default=None, description="Generation parameters")
    seed: Optional[int] = Field(default=None, description="Seed for reproducible output")


class GenerateRegionsRequest(EditRequest):
    parameters: Optional[GenerationParameters] = Field(default=None, description="Generation parameters")
    seed: Optional[int] = Field(default=None, description="Seed for reproducible output")


class PropertiesRequest(EditRequest):
    feature_id: Union[str, int] = Field(description="Feature to update")
    patch: Dict[str, Any] = Field(description="Properties to merge")


class EditResponse(BaseModel):
    """Standard response for editing operations."""

    success: bool = Field(description="Whether the operation succeeded")
    message: str = Field(description="Human-readable message")
    affected_count: int = Field(default=0, description="Number of items affected")
    features: List[Feature] = Field(default_factory=list, description="Complete new feature collection")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional details")


def _run(request: EditRequest, operation: Callable[..., EditResult], *args, **kwargs) -> EditResponse:
    store = InMemoryFeatureStore(request.features)
    try:
        result = apply_edit(store, operation, *args, **kwargs)
    except WorldbuilderError as e:
        status = ERROR_STATUS.get(type(e), 400)
        raise HTTPException(status_code=status, detail=str(e))

    return EditResponse(
        success=True,
        message=result.message,
        affected_count=result.affected_count,
        features=store.snapshot(),
        details=result.details or None,
    )


@router.post("/land/commit", response_model=EditResponse, response_model_exclude_none=True)
async def commit_land(request: CommitLandRequest):
    """Merge a drawn polygon into the land and remove the drawing."""
    logger.info("Commit to land requested", selected_id=request.selected_id)
    return _run(request, commit_selection_to_land, request.selected_id)


@router.post("/land/erase", response_model=EditResponse, response_model_exclude_none=True)
async def erase_land(request: EraseLandRequest):
    """Erase a circular brush stroke from the land."""
    params = default_parameters()
    radius = request.radius_meters or params.erase_radius_meters
    logger.info("Erase requested", point=request.point, radius=radius)
    return _run(request, erase_land_at, request.point, radius, steps=params.erase_circle_steps)


@router.post("/land/generate", response_model=EditResponse, response_model_exclude_none=True)
async def generate_land_endpoint(request: GenerateLandRequest):
    """Replace the land with generated blobs; existing regions are dropped."""
    bounds = Bounds(request.bounds.west, request.bounds.south, request.bounds.east, request.bounds.north)
    params = request.parameters or default_parameters()
    logger.info("Land generation requested", bounds=tuple(bounds), seed=request.seed)
    return _run(request, generate_land, bounds, params, make_random_source(request.seed))


@router.post("/regions/generate", response_model=EditResponse, response_model_exclude_none=True)
async def generate_regions_endpoint(request: GenerateRegionsRequest):
    """Replace the regions with a Voronoi partition of the land."""
    params = request.parameters or default_parameters()
    logger.info("Region generation requested", region_count=params.region_count, seed=request.seed)
    return _run(request, generate_regions, params, make_random_source(request.seed))


@router.post("/features/properties", response_model=EditResponse, response_model_exclude_none=True)
async def update_properties(request: PropertiesRequest):
    """Merge properties (name, type, ...) into one feature."""
    return _run(request, update_feature_properties, request.feature_id, request.patch)
