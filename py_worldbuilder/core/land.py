"""
Land accumulation.

Land is a single MultiPolygon built up by repeated union: a committed
drawing, an erase brush stroke or a whole batch of generated blobs all end
up as one new MultiPolygon that replaces the previous one.
"""

from typing import Iterable, List, NamedTuple, Optional, Sequence

import structlog

from ..config.generation import GenerationParameters
from ..utils.random import RandomSource, uniform
from .boolean_ops import difference, from_shape, to_shape, union
from .exceptions import StructuralGeometryError
from .features import LAND_LAYER, to_multipolygon_coords
from .geometry import circle_polygon

logger = structlog.get_logger()

# Blob circles are scattered within this fraction of the region extent
# (centred on the blob centre), and their radius scaled by a factor drawn
# from [RADIUS_MIN_FACTOR, RADIUS_MIN_FACTOR + RADIUS_SPREAD).
JITTER_FRACTION = 0.20
RADIUS_MIN_FACTOR = 0.55
RADIUS_SPREAD = 0.9


class Bounds(NamedTuple):
    """Rectangular map region, typically the current viewport."""
    west: float
    south: float
    east: float
    north: float

    @property
    def width(self) -> float:
        return self.east - self.west

    @property
    def height(self) -> float:
        return self.north - self.south

    def validate(self) -> None:
        if not (self.east > self.west and self.north > self.south):
            raise StructuralGeometryError(f"Degenerate bounds: {tuple(self)}")


def add_to_land(land: Optional[Sequence], shape: Sequence) -> List:
    """
    Union a shape into the land.

    Args:
        land: Current land MultiPolygon, or None when there is no land yet
        shape: MultiPolygon to add

    Returns:
        New land MultiPolygon (the normalized shape when land was absent)
    """
    if land is None:
        return from_shape(to_shape(shape))
    return union(land, shape)


def erase_from_land(land: Sequence, eraser: Sequence) -> Optional[List]:
    """
    Cut a shape out of the land.

    Returns:
        The remaining land, or None when nothing is left so the caller can
        delete the land feature instead of storing an empty geometry
    """
    remaining = difference(land, eraser)
    if not remaining:
        return None
    return remaining


def accumulate_land(shapes: Iterable[Sequence], land: Optional[Sequence] = None) -> Optional[List]:
    """Fold shapes into the land by repeated union."""
    for shape in shapes:
        land = add_to_land(land, shape)
    return land


def generate_land_blobs(
    bounds: Bounds, params: GenerationParameters, rng: RandomSource
) -> List:
    """
    Generate continent-like land inside a region.

    Each blob gets a centre sampled uniformly in ``bounds``; around it
    ``circles_per_continent`` circles with jittered centres and randomized
    radii are unioned into one running accumulator.

    Args:
        bounds: Region to scatter blob centres in
        params: Blob counts and base radius
        rng: Random source

    Returns:
        Land MultiPolygon
    """
    bounds.validate()
    logger.info(
        "Generating land blobs",
        bounds=tuple(bounds),
        continents=params.continent_count,
        circles_per_continent=params.circles_per_continent,
        base_radius=params.base_radius_meters,
    )

    land = None
    for _ in range(params.continent_count):
        cx = uniform(rng, bounds.west, bounds.east)
        cy = uniform(rng, bounds.south, bounds.north)

        for _ in range(params.circles_per_continent):
            jitter_x = (rng.random() - 0.5) * bounds.width * JITTER_FRACTION
            jitter_y = (rng.random() - 0.5) * bounds.height * JITTER_FRACTION
            radius = params.base_radius_meters * (RADIUS_MIN_FACTOR + rng.random() * RADIUS_SPREAD)

            circle = circle_polygon(
                (cx + jitter_x, cy + jitter_y),
                radius,
                steps=params.land_circle_steps,
                properties={"layer": LAND_LAYER},
            )
            land = add_to_land(land, to_multipolygon_coords(circle))

    logger.info("Land blobs generated", polygons=len(land))
    return land
