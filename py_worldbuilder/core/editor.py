"""
Editor operations over a feature collection.

Each operation takes the current features (a snapshot) plus its parameters
and returns an EditResult holding the complete new collection. Nothing is
mutated in place and nothing is kept between calls; ``apply_edit`` is the
only place that writes back to a FeatureStore, exactly once per successful
operation.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import structlog

from ..config.generation import GenerationParameters, default_parameters
from ..utils.random import RandomSource, make_random_source
from .exceptions import FeatureNotFoundError, StructuralGeometryError, WorldbuilderError
from .features import (
    LAND_PROPERTIES,
    LAND_LAYER,
    REGIONS_LAYER,
    Feature,
    FeatureId,
    FeatureStore,
    find_feature,
    find_land,
    from_multipolygon_coords,
    is_polygonal,
    remove_by_layer,
    to_multipolygon_coords,
)
from .geometry import circle_polygon
from .land import Bounds, add_to_land, erase_from_land, generate_land_blobs
from .regions import partition_regions

logger = structlog.get_logger()


@dataclass
class EditResult:
    """Outcome of an editor operation."""
    features: List[Feature]
    message: str
    affected_count: int = 0
    details: Dict[str, Any] = field(default_factory=dict)


def _without(features: Sequence[Feature], *excluded: Optional[Feature]) -> List[Feature]:
    drop = {id(f) for f in excluded if f is not None}
    return [f for f in features if id(f) not in drop]


def _land_feature(coords: List) -> Optional[Feature]:
    return from_multipolygon_coords(coords, LAND_PROPERTIES)


def commit_selection_to_land(features: Sequence[Feature], selected_id: FeatureId) -> EditResult:
    """
    Merge the selected polygon into the land.

    The drawn polygon is consumed: it is removed from the collection once its
    area is part of the land.

    Raises:
        FeatureNotFoundError: If no feature has ``selected_id``
        StructuralGeometryError: If the selected feature is not a polygon
    """
    selected = find_feature(features, selected_id)
    if selected is None:
        raise FeatureNotFoundError(selected_id)
    if not is_polygonal(selected):
        raise StructuralGeometryError("Selected feature is not a polygon.")

    land = find_land(features)
    if land is selected:
        return EditResult(features=list(features), message="Selected feature is already land")

    land_coords = to_multipolygon_coords(land) if land is not None else None
    merged = add_to_land(land_coords, to_multipolygon_coords(selected))

    next_features = _without(features, land, selected)
    next_land = _land_feature(merged)
    if next_land is not None:
        next_features.append(next_land)

    logger.info("Selection committed to land", feature_id=selected_id, land_polygons=len(merged))
    return EditResult(
        features=next_features,
        message="Added selected polygon to Land",
        affected_count=1,
    )


def erase_land_at(
    features: Sequence[Feature],
    point: Sequence[float],
    radius_meters: float,
    steps: int = 48,
) -> EditResult:
    """
    Erase a circular brush from the land.

    Without land this is a no-op. When the brush removes all remaining land
    the land feature is deleted.
    """
    land = find_land(features)
    if land is None:
        return EditResult(features=list(features), message="No land to erase")

    brush = circle_polygon(point, radius_meters, steps=steps, properties={"layer": "erase"})
    remaining = erase_from_land(to_multipolygon_coords(land), to_multipolygon_coords(brush))

    next_features = _without(features, land)
    if remaining is None:
        logger.info("Land fully erased", point=tuple(point), radius=radius_meters)
        return EditResult(
            features=next_features,
            message="Land erased completely",
            affected_count=1,
            details={"land_removed": True},
        )

    next_features.append(_land_feature(remaining))
    return EditResult(
        features=next_features,
        message="Erased land",
        affected_count=1,
        details={"land_removed": False},
    )


def generate_land(
    features: Sequence[Feature],
    bounds: Bounds,
    params: Optional[GenerationParameters] = None,
    rng: Optional[RandomSource] = None,
) -> EditResult:
    """
    Replace the land with freshly generated blobs.

    Existing regions are dropped because they no longer match the land;
    every other feature is kept.
    """
    params = params or default_parameters()
    rng = rng if rng is not None else make_random_source()

    land_coords = generate_land_blobs(bounds, params, rng)

    next_features = remove_by_layer(features, LAND_LAYER)
    next_features = remove_by_layer(next_features, REGIONS_LAYER)
    next_features.append(_land_feature(land_coords))

    return EditResult(
        features=next_features,
        message="Generated land",
        affected_count=len(land_coords),
        details={"polygons": len(land_coords)},
    )


def generate_regions(
    features: Sequence[Feature],
    params: Optional[GenerationParameters] = None,
    rng: Optional[RandomSource] = None,
) -> EditResult:
    """
    Replace all regions with a fresh Voronoi partition of the land.

    Raises:
        NoLandError: If there is no land feature
        InsufficientSeedsError: If too few seeds fit inside the land
    """
    params = params or default_parameters()
    rng = rng if rng is not None else make_random_source()

    land = find_land(features)
    land_coords = to_multipolygon_coords(land) if land is not None else None

    partition = partition_regions(
        land_coords,
        params.region_count,
        rng,
        min_seeds=params.min_seeds,
        attempts_per_seed=params.attempts_per_seed,
    )

    next_features = remove_by_layer(features, REGIONS_LAYER)
    next_features.extend(partition.features)

    return EditResult(
        features=next_features,
        message=f"Generated regions ({partition.count})",
        affected_count=partition.count,
        details={
            "requested": partition.requested,
            "seeds": len(partition.seeds),
            "skipped_cells": partition.skipped_cells,
        },
    )


def update_feature_properties(
    features: Sequence[Feature], feature_id: FeatureId, patch: Dict[str, Any]
) -> EditResult:
    """Merge a property patch into one feature."""
    target = find_feature(features, feature_id)
    if target is None:
        raise FeatureNotFoundError(feature_id)

    updated = target.model_copy(update={"properties": {**target.properties, **patch}})
    next_features = [updated if f is target else f for f in features]
    return EditResult(features=next_features, message="Updated feature properties", affected_count=1)


def apply_edit(store: FeatureStore, operation: Callable[..., EditResult], *args, **kwargs) -> EditResult:
    """
    Run an operation against a store's snapshot and write the result back.

    The store is replaced exactly once on success and left untouched when the
    operation raises.
    """
    snapshot = store.snapshot()
    try:
        result = operation(snapshot, *args, **kwargs)
    except WorldbuilderError as e:
        logger.warning("Edit failed", operation=operation.__name__, error=str(e))
        raise

    store.replace(result.features)
    logger.info(
        "Edit applied",
        operation=operation.__name__,
        message=result.message,
        features=len(result.features),
    )
    return result
