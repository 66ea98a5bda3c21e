"""
Boolean algebra over MultiPolygon coordinates.

The overlay itself is done by GEOS through shapely. This module owns what
goes in and what comes out:

- every ring is checked for at least 3 distinct vertices before GEOS sees it
- results are reduced to their polygonal parts (touching operands can yield
  stray points and lines) with zero-area parts dropped
- output rings are explicitly closed and oriented by the GeoJSON right-hand
  rule (exterior counter-clockwise, holes clockwise)

Operands are never modified; an empty list is a valid operand and a valid
result.
"""

from typing import Callable, List, Sequence

import structlog
from shapely.errors import GEOSException
from shapely.geometry import GeometryCollection, MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient

from .exceptions import StructuralGeometryError
from .geometry import close_ring, distinct_vertex_count

logger = structlog.get_logger()


def validate_multipolygon(multipolygon: Sequence) -> None:
    """
    Check MultiPolygon coordinates structurally.

    Raises:
        StructuralGeometryError: For a polygon without rings or a ring with
            fewer than 3 distinct vertices
    """
    for p_idx, polygon in enumerate(multipolygon):
        if not polygon:
            raise StructuralGeometryError(f"Polygon {p_idx} has no rings")
        for r_idx, ring in enumerate(polygon):
            if distinct_vertex_count(ring) < 3:
                raise StructuralGeometryError(
                    f"Ring {r_idx} of polygon {p_idx} has fewer than 3 distinct vertices"
                )


def to_shape(multipolygon: Sequence) -> MultiPolygon:
    """Convert validated MultiPolygon coordinates to a shapely MultiPolygon."""
    validate_multipolygon(multipolygon)
    polygons = [
        Polygon(close_ring(polygon[0]), [close_ring(hole) for hole in polygon[1:]])
        for polygon in multipolygon
    ]
    return MultiPolygon(polygons)


def _polygonal_parts(geom: BaseGeometry) -> List[Polygon]:
    if geom.is_empty:
        return []
    if isinstance(geom, Polygon):
        return [geom]
    if isinstance(geom, MultiPolygon):
        return list(geom.geoms)
    if isinstance(geom, GeometryCollection):
        parts = []
        for part in geom.geoms:
            parts.extend(_polygonal_parts(part))
        return parts
    # Points and lines carry no area
    return []


def _ring_coords(ring) -> List[List[float]]:
    return close_ring([[x, y] for x, y, *_ in ring.coords])


def from_shape(geom: BaseGeometry) -> List:
    """Convert a shapely geometry to normalized MultiPolygon coordinates."""
    result = []
    for polygon in _polygonal_parts(geom):
        if polygon.area <= 0:
            continue
        polygon = orient(polygon, sign=1.0)
        rings = [_ring_coords(polygon.exterior)]
        rings.extend(_ring_coords(interior) for interior in polygon.interiors)
        result.append(rings)
    return result


def _overlay(name: str, op: Callable, a: Sequence, b: Sequence) -> List:
    shape_a = to_shape(a)
    shape_b = to_shape(b)
    try:
        result = op(shape_a, shape_b)
    except GEOSException as e:
        logger.warning("Polygon overlay failed", operation=name, error=str(e))
        raise StructuralGeometryError(f"{name} failed on invalid geometry: {e}") from e
    return from_shape(result)


def union(a: Sequence, b: Sequence) -> List:
    """Area covered by either operand."""
    return _overlay("union", lambda x, y: x.union(y), a, b)


def difference(a: Sequence, b: Sequence) -> List:
    """Area of ``a`` not covered by ``b``."""
    return _overlay("difference", lambda x, y: x.difference(y), a, b)


def intersection(a: Sequence, b: Sequence) -> List:
    """Area covered by both operands."""
    return _overlay("intersection", lambda x, y: x.intersection(y), a, b)


def area(multipolygon: Sequence) -> float:
    """Planar area in square coordinate units."""
    return to_shape(multipolygon).area
