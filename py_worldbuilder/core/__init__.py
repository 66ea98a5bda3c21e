"""
Core terrain and region geometry engine.
"""

from .exceptions import (
    WorldbuilderError,
    StructuralGeometryError,
    NoLandError,
    InsufficientSeedsError,
    FeatureNotFoundError,
)
from .features import Feature, FeatureStore, InMemoryFeatureStore, find_land, remove_by_layer
from .boolean_ops import union, difference, intersection
from .land import Bounds, add_to_land, erase_from_land, generate_land_blobs
from .regions import partition_regions, RegionPartition
from .editor import (
    EditResult,
    apply_edit,
    commit_selection_to_land,
    erase_land_at,
    generate_land,
    generate_regions,
    update_feature_properties,
)

__all__ = ['WorldbuilderError', 'StructuralGeometryError', 'NoLandError',
           'InsufficientSeedsError', 'FeatureNotFoundError',
           'Feature', 'FeatureStore', 'InMemoryFeatureStore', 'find_land', 'remove_by_layer',
           'union', 'difference', 'intersection',
           'Bounds', 'add_to_land', 'erase_from_land', 'generate_land_blobs',
           'partition_regions', 'RegionPartition',
           'EditResult', 'apply_edit', 'commit_selection_to_land', 'erase_land_at',
           'generate_land', 'generate_regions', 'update_feature_properties']
