"""
Planar geometry primitives over GeoJSON-style coordinate lists.

Coordinates are nested lists as they appear in GeoJSON:
ring = [[x, y], ...], polygon = [outer, *holes], multipolygon = [polygon, ...].
x is longitude-like and y latitude-like, both in degrees.
"""

import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .exceptions import StructuralGeometryError
from .features import Feature, Geometry

# Meters per degree of latitude (and of longitude at the equator)
METERS_PER_DEGREE = 111320.0

# Endpoints closer than this are treated as the same point when closing rings
RING_CLOSE_TOLERANCE = 1e-12

BBox = Tuple[float, float, float, float]
EMPTY_BBOX: BBox = (math.inf, math.inf, -math.inf, -math.inf)


def bounding_box(multipolygon: Sequence) -> BBox:
    """
    Compute the axis-aligned bounding box of MultiPolygon coordinates.

    Every vertex of every ring is scanned, holes included.

    Args:
        multipolygon: MultiPolygon coordinates

    Returns:
        (min_x, min_y, max_x, max_y), or EMPTY_BBOX when there are no vertices
    """
    vertices = [point[:2] for polygon in multipolygon for ring in polygon for point in ring]
    if not vertices:
        return EMPTY_BBOX

    coords = np.asarray(vertices, dtype=float)
    min_x, min_y = coords.min(axis=0)
    max_x, max_y = coords.max(axis=0)
    return float(min_x), float(min_y), float(max_x), float(max_y)


def bbox_is_empty(bbox: BBox) -> bool:
    min_x, min_y, max_x, max_y = bbox
    return min_x > max_x or min_y > max_y


def point_in_ring(point: Sequence[float], ring: Sequence[Sequence[float]]) -> bool:
    """
    Even-odd ray casting test against a closed ring.

    Points exactly on an edge get whatever the crossing test yields for them;
    the answer is consistent but not specified.
    """
    x, y = point[0], point[1]
    inside = False
    j = len(ring) - 1
    for i in range(len(ring)):
        xi, yi = ring[i][0], ring[i][1]
        xj, yj = ring[j][0], ring[j][1]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def point_in_polygon(point: Sequence[float], polygon: Sequence) -> bool:
    """True if the point is inside the outer ring and outside every hole."""
    if not polygon or not point_in_ring(point, polygon[0]):
        return False
    return not any(point_in_ring(point, hole) for hole in polygon[1:])


def point_in_multipolygon(point: Sequence[float], multipolygon: Sequence) -> bool:
    return any(point_in_polygon(point, polygon) for polygon in multipolygon)


def points_in_ring(xs: np.ndarray, ys: np.ndarray, ring: Sequence[Sequence[float]]) -> np.ndarray:
    """Vectorized point_in_ring over arrays of x and y coordinates."""
    coords = np.asarray(ring, dtype=float)[:, :2]
    inside = np.zeros(len(xs), dtype=bool)
    if len(coords) == 0:
        return inside
    prev = np.roll(coords, 1, axis=0)
    with np.errstate(divide="ignore", invalid="ignore"):
        for (xi, yi), (xj, yj) in zip(coords, prev):
            straddles = (yi > ys) != (yj > ys)
            if not straddles.any():
                continue
            crossing_x = (xj - xi) * (ys - yi) / (yj - yi) + xi
            inside ^= straddles & (xs < crossing_x)
    return inside


def points_in_multipolygon(xs: np.ndarray, ys: np.ndarray, multipolygon: Sequence) -> np.ndarray:
    """Vectorized point_in_multipolygon; same even-odd rule as the scalar tests."""
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)
    result = np.zeros(len(xs), dtype=bool)
    for polygon in multipolygon:
        if not polygon:
            continue
        in_polygon = points_in_ring(xs, ys, polygon[0])
        for hole in polygon[1:]:
            in_polygon &= ~points_in_ring(xs, ys, hole)
        result |= in_polygon
    return result


def _same_point(a: Sequence[float], b: Sequence[float], tolerance: float) -> bool:
    return abs(a[0] - b[0]) <= tolerance and abs(a[1] - b[1]) <= tolerance


def close_ring(ring: Sequence[Sequence[float]], tolerance: float = RING_CLOSE_TOLERANCE) -> List[List[float]]:
    """
    Return a closed copy of a ring.

    The first point is appended unless the last point already matches it
    within ``tolerance``.
    """
    closed = [[float(p[0]), float(p[1])] for p in ring]
    if closed and not _same_point(closed[0], closed[-1], tolerance):
        closed.append(list(closed[0]))
    return closed


def distinct_vertex_count(ring: Sequence[Sequence[float]]) -> int:
    """Number of distinct vertices in a ring (closure point not double counted)."""
    return len({(float(p[0]), float(p[1])) for p in ring})


def circle_polygon(
    center: Sequence[float],
    radius_meters: float,
    steps: int = 48,
    properties: Optional[Dict[str, Any]] = None,
) -> Feature:
    """
    Approximate a circle on the map as a regular polygon.

    The radius is converted to degrees with an equirectangular approximation:
    111320 m per degree of latitude, and longitude degrees shrunk by the
    cosine of the centre latitude. This is only good for radii that are
    small relative to the planet at moderate latitudes; it degrades towards
    the poles and is not a geodesic circle.

    Args:
        center: (lng, lat) of the circle centre
        radius_meters: Circle radius in meters
        steps: Number of polygon sides (at least 3)
        properties: Feature properties

    Returns:
        Polygon feature whose ring has ``steps + 1`` points, first == last
    """
    if steps < 3:
        raise StructuralGeometryError(f"Circle needs at least 3 steps, got {steps}")
    if not radius_meters > 0:
        raise StructuralGeometryError(f"Circle radius must be positive, got {radius_meters}")

    lng, lat = float(center[0]), float(center[1])
    d_lat = radius_meters / METERS_PER_DEGREE
    d_lng = radius_meters / (METERS_PER_DEGREE * math.cos(math.radians(lat)))

    angles = np.arange(steps) * (2.0 * math.pi / steps)
    xs = lng + np.cos(angles) * d_lng
    ys = lat + np.sin(angles) * d_lat
    ring = np.column_stack([xs, ys]).tolist()
    ring.append(list(ring[0]))

    return Feature(
        properties=dict(properties or {}),
        geometry=Geometry(type="Polygon", coordinates=[ring]),
    )


def equirectangular_distance_meters(a: Sequence[float], b: Sequence[float]) -> float:
    """Distance in meters between two (lng, lat) points, using the same
    approximation as circle_polygon (longitude scaled at a's latitude)."""
    dx = (b[0] - a[0]) * METERS_PER_DEGREE * math.cos(math.radians(a[1]))
    dy = (b[1] - a[1]) * METERS_PER_DEGREE
    return math.hypot(dx, dy)
