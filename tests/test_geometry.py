"""Tests for planar geometry primitives."""

import math

import numpy as np
import pytest

from py_worldbuilder.core.exceptions import StructuralGeometryError
from py_worldbuilder.core.geometry import (
    EMPTY_BBOX,
    bbox_is_empty,
    bounding_box,
    circle_polygon,
    close_ring,
    distinct_vertex_count,
    equirectangular_distance_meters,
    point_in_multipolygon,
    point_in_polygon,
    point_in_ring,
    points_in_multipolygon,
)


def square(x0, y0, x1, y1):
    return [[x0, y0], [x1, y0], [x1, y1], [x0, y1], [x0, y0]]


SQUARE_WITH_HOLE = [square(0, 0, 10, 10), square(4, 4, 6, 6)]


class TestBoundingBox:
    """Test bounding box computation."""

    def test_single_polygon(self):
        assert bounding_box([[square(1, 2, 3, 5)]]) == (1, 2, 3, 5)

    def test_multipolygon_spans_all_parts(self):
        mp = [[square(0, 0, 1, 1)], [square(5, -3, 6, 2)]]
        assert bounding_box(mp) == (0, -3, 6, 2)

    def test_holes_are_scanned(self):
        """A (malformed) hole poking out of the shell still counts."""
        mp = [[square(0, 0, 1, 1), square(0.5, 0.5, 3, 3)]]
        assert bounding_box(mp) == (0, 0, 3, 3)

    def test_empty_returns_sentinel(self):
        bbox = bounding_box([])
        assert bbox == EMPTY_BBOX
        assert bbox_is_empty(bbox)
        assert not bbox_is_empty((0, 0, 1, 1))


class TestPointInRing:
    """Test even-odd ray casting."""

    def test_inside_and_outside(self):
        ring = square(0, 0, 10, 10)
        assert point_in_ring((5, 5), ring)
        assert not point_in_ring((15, 5), ring)
        assert not point_in_ring((-1, -1), ring)

    def test_concave_ring(self):
        # U shape opening upwards
        ring = [[0, 0], [3, 0], [3, 3], [2, 3], [2, 1], [1, 1], [1, 3], [0, 3], [0, 0]]
        assert point_in_ring((0.5, 2), ring)
        assert not point_in_ring((1.5, 2), ring)
        assert point_in_ring((1.5, 0.5), ring)

    def test_outside_bbox_is_never_inside(self):
        """Points outside the ring's bounding box are always outside."""
        rng = np.random.default_rng(7)
        ring = [[0, 0], [4, 1], [5, 5], [2, 3], [-1, 4], [0, 0]]
        min_x, min_y, max_x, max_y = bounding_box([[ring]])
        for _ in range(200):
            x, y = rng.uniform(-20, 20, size=2)
            if min_x <= x <= max_x and min_y <= y <= max_y:
                continue
            assert not point_in_ring((x, y), ring)

    def test_edge_classification_is_consistent(self):
        ring = square(0, 0, 10, 10)
        first = point_in_ring((0, 5), ring)
        assert all(point_in_ring((0, 5), ring) == first for _ in range(5))


class TestPointInPolygon:
    """Test polygon and multipolygon containment."""

    def test_hole_excludes_points(self):
        assert point_in_polygon((2, 2), SQUARE_WITH_HOLE)
        assert not point_in_polygon((5, 5), SQUARE_WITH_HOLE)
        assert not point_in_polygon((11, 5), SQUARE_WITH_HOLE)

    def test_multipolygon_any_part(self):
        mp = [[square(0, 0, 1, 1)], [square(5, 5, 6, 6)]]
        assert point_in_multipolygon((0.5, 0.5), mp)
        assert point_in_multipolygon((5.5, 5.5), mp)
        assert not point_in_multipolygon((3, 3), mp)
        assert not point_in_multipolygon((0.5, 0.5), [])

    def test_vectorized_matches_scalar(self):
        rng = np.random.default_rng(42)
        mp = [SQUARE_WITH_HOLE, [[[12, 0], [16, 2], [13, 6], [12, 0]]]]
        xs = rng.uniform(-2, 18, size=500)
        ys = rng.uniform(-2, 12, size=500)

        vectorized = points_in_multipolygon(xs, ys, mp)
        scalar = [point_in_multipolygon((x, y), mp) for x, y in zip(xs, ys)]

        np.testing.assert_array_equal(vectorized, scalar)


class TestRings:
    """Test ring normalization helpers."""

    def test_close_open_ring(self):
        ring = [[0, 0], [1, 0], [1, 1]]
        closed = close_ring(ring)
        assert closed == [[0, 0], [1, 0], [1, 1], [0, 0]]
        assert len(ring) == 3  # input untouched

    def test_closed_ring_unchanged(self):
        ring = square(0, 0, 1, 1)
        assert close_ring(ring) == ring

    def test_nearly_closed_ring_within_tolerance(self):
        ring = [[0, 0], [1, 0], [1, 1], [1e-14, 0]]
        assert len(close_ring(ring)) == 4

    def test_distinct_vertex_count(self):
        assert distinct_vertex_count(square(0, 0, 1, 1)) == 4
        assert distinct_vertex_count([[0, 0], [1, 1], [0, 0]]) == 2


class TestCirclePolygon:
    """Test circle approximation."""

    @pytest.mark.parametrize("steps", [3, 12, 48, 56])
    def test_vertex_count_and_closure(self, steps):
        feature = circle_polygon((10.0, 45.0), 5000, steps)
        ring = feature.geometry.coordinates[0]

        assert feature.geometry.type == "Polygon"
        assert len(ring) == steps + 1
        assert ring[0] == ring[-1]

    def test_vertices_on_radius(self):
        center = (-91.874, 42.76)
        radius = 20000
        ring = circle_polygon(center, radius, 48).geometry.coordinates[0]

        for vertex in ring:
            assert equirectangular_distance_meters(center, vertex) <= radius * (1 + 1e-9)
            assert equirectangular_distance_meters(center, vertex) == pytest.approx(radius, rel=1e-9)

    def test_longitude_stretch_with_latitude(self):
        ring = circle_polygon((0.0, 60.0), 111320, 4).geometry.coordinates[0]
        xs = [p[0] for p in ring]
        ys = [p[1] for p in ring]
        assert max(ys) - min(ys) == pytest.approx(2.0)
        assert max(xs) - min(xs) == pytest.approx(2.0 / math.cos(math.radians(60)))

    def test_properties_copied(self):
        props = {"layer": "erase"}
        feature = circle_polygon((0, 0), 100, 8, props)
        assert feature.properties == {"layer": "erase"}
        assert feature.properties is not props

    def test_invalid_parameters(self):
        with pytest.raises(StructuralGeometryError):
            circle_polygon((0, 0), 100, 2)
        with pytest.raises(StructuralGeometryError):
            circle_polygon((0, 0), 0, 12)
