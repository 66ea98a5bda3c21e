"""
Feature collection contract shared with the editor.

The editor (drawing tools, persistence, rendering) owns the canonical
collection of GeoJSON features. The engine only sees it through the
FeatureStore protocol: it reads a full snapshot and writes back a full
replacement. Managed geometry is told apart from user annotations by the
``layer`` property:

- ``land``: the single accumulated land MultiPolygon
- ``regions``: Voronoi regions partitioning the land
"""

import copy
from typing import Any, Dict, Iterable, List, Literal, Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import StructuralGeometryError

LAND_LAYER = "land"
REGIONS_LAYER = "regions"
LAND_PROPERTIES = {"layer": LAND_LAYER, "name": "Land"}

POLYGONAL_TYPES = ("Polygon", "MultiPolygon")

FeatureId = Union[str, int]


class Geometry(BaseModel):
    """GeoJSON geometry object. Non-polygonal types are carried through untouched."""

    model_config = ConfigDict(extra="allow")

    type: str
    coordinates: Any


class Feature(BaseModel):
    """GeoJSON feature with free-form properties."""

    model_config = ConfigDict(extra="allow")

    type: Literal["Feature"] = "Feature"
    id: Optional[FeatureId] = None
    properties: Dict[str, Any] = Field(default_factory=dict)
    geometry: Geometry

    @field_validator("properties", mode="before")
    @classmethod
    def _null_properties(cls, value: Any) -> Any:
        # GeoJSON allows "properties": null
        return {} if value is None else value

    @property
    def layer(self) -> Optional[str]:
        return self.properties.get("layer")


class FeatureCollection(BaseModel):
    """GeoJSON feature collection."""

    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[Feature] = Field(default_factory=list)


class FeatureStore(Protocol):
    """Read/write access to the editor's feature collection."""

    def snapshot(self) -> List[Feature]:
        """Return the full current collection in order."""
        ...

    def replace(self, features: List[Feature]) -> None:
        """Atomically replace the whole collection."""
        ...


class InMemoryFeatureStore:
    """FeatureStore kept in process memory.

    Reads and writes are deep copies so callers can never alias the stored
    features.
    """

    def __init__(self, features: Optional[Iterable[Feature]] = None):
        self._features: List[Feature] = [f.model_copy(deep=True) for f in features or []]
        self.replace_count = 0

    def snapshot(self) -> List[Feature]:
        return [f.model_copy(deep=True) for f in self._features]

    def replace(self, features: List[Feature]) -> None:
        self._features = [f.model_copy(deep=True) for f in features]
        self.replace_count += 1

    def __len__(self) -> int:
        return len(self._features)


def is_polygonal(feature: Optional[Feature]) -> bool:
    """True for features carrying Polygon or MultiPolygon geometry."""
    return feature is not None and feature.geometry.type in POLYGONAL_TYPES


def to_multipolygon_coords(feature: Feature) -> List:
    """
    Read a polygonal feature as MultiPolygon coordinates.

    Returns a copy; the feature's own coordinate lists are never handed out.

    Raises:
        StructuralGeometryError: If the geometry is not polygonal
    """
    geometry = feature.geometry
    if geometry.type == "Polygon":
        return [copy.deepcopy(geometry.coordinates)]
    if geometry.type == "MultiPolygon":
        return copy.deepcopy(geometry.coordinates)
    raise StructuralGeometryError(f"Not polygonal: {geometry.type}")


def from_multipolygon_coords(
    coords: List, properties: Optional[Dict[str, Any]] = None
) -> Optional[Feature]:
    """
    Wrap MultiPolygon coordinates in a feature.

    A single polygon is emitted as a Polygon geometry. Empty coordinates
    produce no feature at all.
    """
    if not coords:
        return None
    if len(coords) == 1:
        geometry = Geometry(type="Polygon", coordinates=coords[0])
    else:
        geometry = Geometry(type="MultiPolygon", coordinates=coords)
    return Feature(properties=dict(properties or {}), geometry=geometry)


def find_land(features: Iterable[Feature]) -> Optional[Feature]:
    """Return the land feature, if any."""
    for feature in features:
        if feature.layer == LAND_LAYER:
            return feature
    return None


def find_feature(features: Iterable[Feature], feature_id: FeatureId) -> Optional[Feature]:
    """Return the feature with the given id, if any."""
    for feature in features:
        if feature.id is not None and feature.id == feature_id:
            return feature
    return None


def remove_by_layer(features: Iterable[Feature], layer_name: str) -> List[Feature]:
    """Return the features whose layer is not ``layer_name``."""
    return [f for f in features if f.layer != layer_name]


def features_in_layer(features: Iterable[Feature], layer_name: str) -> List[Feature]:
    return [f for f in features if f.layer == layer_name]


def feature_collection(features: Iterable[Feature]) -> Dict[str, Any]:
    """Serialize features as a GeoJSON FeatureCollection dict."""
    return FeatureCollection(features=list(features)).model_dump(exclude_none=True)
