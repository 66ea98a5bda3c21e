"""Tests for Voronoi region partitioning."""

import numpy as np
import pytest
from shapely.geometry import Point

from py_worldbuilder.core.boolean_ops import area, intersection, to_shape
from py_worldbuilder.core.exceptions import InsufficientSeedsError, NoLandError
from py_worldbuilder.core.features import to_multipolygon_coords
from py_worldbuilder.core.geometry import bounding_box, point_in_multipolygon
from py_worldbuilder.core.regions import (
    REGION_HUES,
    get_frame_points,
    partition_regions,
    region_fill,
    sample_seeds,
    voronoi_cells,
)
from py_worldbuilder.utils.random import make_random_source


def square(x0, y0, x1, y1):
    return [[x0, y0], [x1, y0], [x1, y1], [x0, y1], [x0, y0]]


SQUARE_LAND = [[square(0, 0, 10, 10)]]
HOLED_LAND = [[square(0, 0, 10, 10), square(3, 3, 7, 7)]]
# Two specks at opposite corners of a 100 x 100 box
SPECK_LAND = [[square(0, 0, 0.01, 0.01)], [square(99.99, 99.99, 100, 100)]]


class TestSeeding:
    """Test rejection sampling of seeds."""

    def test_reaches_target(self):
        seeds = sample_seeds(HOLED_LAND, 40, make_random_source(1))
        assert seeds.shape == (40, 2)
        for x, y in seeds:
            assert point_in_multipolygon((x, y), HOLED_LAND)

    def test_budget_bounds_sampling(self):
        seeds = sample_seeds(SPECK_LAND, 90, make_random_source(1), attempts_per_seed=2)
        assert len(seeds) < 90
        assert seeds.shape[1] == 2

    def test_stops_at_target(self):
        """No more than the target is ever returned, even from a full batch."""
        seeds = sample_seeds(SQUARE_LAND, 3, make_random_source(5))
        assert len(seeds) == 3

    def test_reproducible(self):
        a = sample_seeds(SQUARE_LAND, 10, make_random_source(9))
        b = sample_seeds(SQUARE_LAND, 10, make_random_source(9))
        np.testing.assert_array_equal(a, b)


class TestVoronoiCells:
    """Test the bounded Voronoi diagram."""

    def test_frame_points_outside_bbox(self):
        bbox = (0, 0, 10, 5)
        frame = get_frame_points(bbox)
        inside = (
            (frame[:, 0] >= 0) & (frame[:, 0] <= 10) & (frame[:, 1] >= 0) & (frame[:, 1] <= 5)
        )
        assert not inside.any()
        assert len(np.unique(frame, axis=0)) == len(frame)

    def test_one_cell_per_seed(self):
        seeds = sample_seeds(SQUARE_LAND, 25, make_random_source(2))
        cells = voronoi_cells(seeds, (0, 0, 10, 10))

        assert len(cells) == len(seeds)
        total = 0.0
        for seed, ring in zip(seeds, cells):
            assert ring is not None
            assert ring[0] == ring[-1]
            polygon = to_shape([[ring]])
            assert polygon.buffer(1e-9).contains(Point(seed))
            min_x, min_y, max_x, max_y = bounding_box([[ring]])
            assert min_x >= -1e-9 and min_y >= -1e-9
            assert max_x <= 10 + 1e-9 and max_y <= 10 + 1e-9
            total += polygon.area

        assert total == pytest.approx(100.0)


class TestPartition:
    """Test region partitioning end to end."""

    def test_partition_covers_square_land(self):
        partition = partition_regions(SQUARE_LAND, 30, make_random_source(4))

        assert partition.count == 30
        assert partition.skipped_cells == 0
        total = sum(area(to_multipolygon_coords(f)) for f in partition.features)
        assert total == pytest.approx(100.0)

    def test_regions_are_clipped_to_land(self):
        """Re-clipping a region to the land gives back the region."""
        land = HOLED_LAND
        partition = partition_regions(land, 30, make_random_source(8))

        assert 0 < partition.count <= 30
        land_shape = to_shape(land)
        for feature in partition.features:
            region = to_multipolygon_coords(feature)
            reclipped = intersection(land, region)
            assert to_shape(reclipped).symmetric_difference(to_shape(region)).area < 1e-9
            assert to_shape(region).difference(land_shape).area < 1e-9

    def test_region_properties(self):
        partition = partition_regions(SQUARE_LAND, 12, make_random_source(6))
        names = set()
        for feature in partition.features:
            props = feature.properties
            assert props["layer"] == "regions"
            assert props["name"].startswith("Region ")
            index = int(props["name"].split()[1]) - 1
            assert props["fill"] == region_fill(index)
            assert props["stroke"] == "rgba(0,0,0,.45)"
            names.add(props["name"])
        assert len(names) == partition.count

    def test_palette_cycles(self):
        assert region_fill(0) == region_fill(len(REGION_HUES))
        assert region_fill(0) != region_fill(1)
        assert region_fill(0) == "hsl(18 70% 75%)"

    @pytest.mark.parametrize("land", [None, []])
    def test_no_land(self, land):
        with pytest.raises(NoLandError):
            partition_regions(land, 90, make_random_source(1))

    def test_zero_area_land(self):
        flat = [[[[0, 0], [1, 1], [2, 2], [0, 0]]]]
        with pytest.raises(NoLandError):
            partition_regions(flat, 90, make_random_source(1))

    def test_insufficient_seeds_terminates(self):
        """A land covering a tiny share of its bbox exhausts the budget."""
        with pytest.raises(InsufficientSeedsError) as excinfo:
            partition_regions(SPECK_LAND, 90, make_random_source(1))
        assert excinfo.value.required == 10
        assert excinfo.value.found < 10

    def test_coincident_seeds_make_one_region(self):
        """Seeds that all land on the same point share a single cell."""

        class ConstantRandom:
            def random(self):
                return 0.5

        partition = partition_regions(SQUARE_LAND, 20, ConstantRandom())

        assert len(partition.seeds) == 20
        assert partition.count == 1
        assert partition.skipped_cells == 19
        total = sum(area(to_multipolygon_coords(f)) for f in partition.features)
        assert total == pytest.approx(100.0)
