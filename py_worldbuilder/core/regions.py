"""
Region partitioning of the land.

Regions are Voronoi cells of random seed points, cut down to the land:

1. rejection-sample seeds inside the land (bounded attempt budget)
2. build a Voronoi diagram of the seeds over the land's bounding box
3. intersect every cell with the land, dropping degenerate and empty cells

The resulting features replace any previous regions wholesale.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np
import structlog
from scipy.spatial import Voronoi
from shapely.geometry import MultiPoint, Polygon, box

from ..utils.random import RandomSource
from .boolean_ops import area, intersection
from .exceptions import InsufficientSeedsError, NoLandError
from .features import REGIONS_LAYER, Feature, from_multipolygon_coords
from .geometry import (
    BBox,
    bbox_is_empty,
    bounding_box,
    close_ring,
    distinct_vertex_count,
    points_in_multipolygon,
)

logger = structlog.get_logger()

DEFAULT_MIN_SEEDS = 10
DEFAULT_ATTEMPTS_PER_SEED = 2000
SAMPLE_BATCH = 1024

REGION_STROKE = "rgba(0,0,0,.45)"
REGION_HUES = [18, 40, 80, 140, 190, 220, 260, 300, 330]


def region_fill(index: int) -> str:
    """Pastel fill colour for a region, cycling through a fixed palette."""
    hue = REGION_HUES[index % len(REGION_HUES)]
    return f"hsl({hue} 70% 75%)"


@dataclass
class RegionPartition:
    """Result of partitioning the land into regions."""
    requested: int
    seeds: np.ndarray
    features: List[Feature] = field(default_factory=list)
    skipped_cells: int = 0

    @property
    def count(self) -> int:
        return len(self.features)


def sample_seeds(
    land: Sequence,
    target: int,
    rng: RandomSource,
    attempts_per_seed: int = DEFAULT_ATTEMPTS_PER_SEED,
    bbox: Optional[BBox] = None,
) -> np.ndarray:
    """
    Rejection-sample points inside the land.

    Candidates are drawn uniformly in the land's bounding box (x then y per
    try) and kept when they fall inside the land. Sampling stops once
    ``target`` seeds are collected or ``target * attempts_per_seed`` tries
    have been spent, whichever comes first.

    Args:
        land: Land MultiPolygon
        target: Number of seeds wanted
        rng: Random source
        attempts_per_seed: Try budget per wanted seed
        bbox: Precomputed bounding box of ``land``

    Returns:
        Array of shape (n, 2) with n <= target
    """
    min_x, min_y, max_x, max_y = bbox or bounding_box(land)
    budget = target * attempts_per_seed
    seeds = []
    tries = 0

    while len(seeds) < target and tries < budget:
        batch = min(SAMPLE_BATCH, budget - tries)
        xs = np.empty(batch)
        ys = np.empty(batch)
        for i in range(batch):
            xs[i] = min_x + rng.random() * (max_x - min_x)
            ys[i] = min_y + rng.random() * (max_y - min_y)

        accepted = np.flatnonzero(points_in_multipolygon(xs, ys, land))
        needed = target - len(seeds)
        if len(accepted) >= needed:
            accepted = accepted[:needed]
            tries += int(accepted[-1]) + 1
        else:
            tries += batch
        seeds.extend(zip(xs[accepted].tolist(), ys[accepted].tolist()))

    logger.info("Seeds sampled", seeds=len(seeds), target=target, tries=tries)
    return np.array(seeds, dtype=float).reshape(-1, 2)


def get_frame_points(bbox: BBox, per_side: int = 4) -> np.ndarray:
    """
    Points on a rectangle one full extent outside the bounding box.

    Adding these to the diagram makes the cell of every seed inside the box
    finite, so no cell has to be rebuilt from infinite ridges.
    """
    min_x, min_y, max_x, max_y = bbox
    margin = max(max_x - min_x, max_y - min_y, 1e-9)
    left, right = min_x - margin, max_x + margin
    bottom, top = min_y - margin, max_y + margin

    points = []
    for t in np.linspace(0.0, 1.0, per_side + 1)[:-1]:
        x = left + (right - left) * t
        y = bottom + (top - bottom) * t
        points.append([x, bottom])
        points.append([right - (x - left), top])
        points.append([left, top - (y - bottom)])
        points.append([right, y])
    return np.array(points)


def voronoi_cells(seeds: np.ndarray, bbox: BBox) -> List[Optional[List[List[float]]]]:
    """
    Voronoi cell of every seed, limited to the bounding box.

    The box is only the extent of the diagram; cells are not clipped to the
    land here.

    Returns:
        One closed ring per seed, in seed order, or None for seeds that have
        no usable cell
    """
    n_seeds = len(seeds)
    frame = get_frame_points(bbox)
    vor = Voronoi(np.vstack([seeds, frame]))
    extent = box(*bbox)

    logger.info("Voronoi diagram calculated", seeds=n_seeds, vertices=len(vor.vertices))

    cells = []
    # Coincident seeds share one Qhull region; only the first keeps it
    used_regions = set()
    for i in range(n_seeds):
        region_idx = int(vor.point_region[i])
        region = vor.regions[region_idx] if region_idx >= 0 else []
        if not region or -1 in region or region_idx in used_regions:
            cells.append(None)
            continue
        used_regions.add(region_idx)

        # Voronoi cells are convex, so the hull orders the vertices
        cell = MultiPoint(vor.vertices[region]).convex_hull.intersection(extent)
        if not isinstance(cell, Polygon) or cell.is_empty:
            cells.append(None)
            continue
        cells.append(close_ring([[x, y] for x, y in cell.exterior.coords]))

    return cells


def partition_regions(
    land: Optional[Sequence],
    target: int,
    rng: RandomSource,
    min_seeds: int = DEFAULT_MIN_SEEDS,
    attempts_per_seed: int = DEFAULT_ATTEMPTS_PER_SEED,
) -> RegionPartition:
    """
    Partition the land into Voronoi regions.

    Args:
        land: Land MultiPolygon (None or empty means no land)
        target: Desired number of regions
        rng: Random source for seed placement
        min_seeds: Fewest seeds worth partitioning with
        attempts_per_seed: Rejection sampling budget per wanted seed

    Returns:
        RegionPartition with one feature per non-empty clipped cell

    Raises:
        NoLandError: If there is no land or it has no area
        InsufficientSeedsError: If fewer than ``min_seeds`` seeds were placed
    """
    if not land or area(land) <= 0:
        raise NoLandError()

    bbox = bounding_box(land)
    if bbox_is_empty(bbox):
        raise NoLandError()

    seeds = sample_seeds(land, target, rng, attempts_per_seed, bbox=bbox)
    if len(seeds) < min_seeds:
        logger.warning("Not enough region seeds", found=len(seeds), required=min_seeds)
        raise InsufficientSeedsError(found=len(seeds), required=min_seeds)

    partition = RegionPartition(requested=target, seeds=seeds)
    for i, ring in enumerate(voronoi_cells(seeds, bbox)):
        if ring is None or distinct_vertex_count(ring) < 3:
            partition.skipped_cells += 1
            continue

        clipped = intersection(land, [[ring]])
        region = from_multipolygon_coords(
            clipped,
            {
                "layer": REGIONS_LAYER,
                "name": f"Region {i + 1}",
                "fill": region_fill(i),
                "stroke": REGION_STROKE,
            },
        )
        if region is None:
            partition.skipped_cells += 1
            continue
        partition.features.append(region)

    logger.info(
        "Regions partitioned",
        requested=target,
        added=partition.count,
        skipped=partition.skipped_cells,
    )
    return partition
