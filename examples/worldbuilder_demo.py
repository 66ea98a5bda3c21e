#!/usr/bin/env python3
"""
Demonstration of the land and region editing operations.

Runs the same sequence a user would click through in the editor:
1. Generate land in a viewport
2. Commit a hand-drawn polygon to the land
3. Erase a brush stroke
4. Partition the land into regions

The final collection is written as GeoJSON.
"""

import json
import sys

from py_worldbuilder.config import GenerationParameters
from py_worldbuilder.core import (
    Bounds,
    Feature,
    InMemoryFeatureStore,
    apply_edit,
    commit_selection_to_land,
    erase_land_at,
    generate_land,
    generate_regions,
)
from py_worldbuilder.core.features import feature_collection, features_in_layer
from py_worldbuilder.utils.random import make_random_source


def main(output_path="worldbuilder-demo.geojson"):
    rng = make_random_source(2024)
    viewport = Bounds(west=-93.5, south=42.0, east=-90.0, north=44.0)
    params = GenerationParameters(region_count=40)

    print("=== Worldbuilder Geometry Demo ===\n")

    store = InMemoryFeatureStore()

    print("1. Generating land...")
    result = apply_edit(store, generate_land, viewport, params, rng)
    print(f"   - {result.message}: {result.details['polygons']} polygon(s)")

    print("\n2. Committing a drawn polygon...")
    drawn = Feature.model_validate({
        "type": "Feature",
        "id": "drawn-1",
        "properties": {"mode": "polygon"},
        "geometry": {
            "type": "Polygon",
            "coordinates": [[[-91.0, 42.5], [-90.2, 42.5], [-90.2, 43.2], [-91.0, 43.2], [-91.0, 42.5]]],
        },
    })
    store.replace(store.snapshot() + [drawn])
    result = apply_edit(store, commit_selection_to_land, "drawn-1")
    print(f"   - {result.message}")

    print("\n3. Erasing at the viewport centre...")
    centre = ((viewport.west + viewport.east) / 2, (viewport.south + viewport.north) / 2)
    result = apply_edit(store, erase_land_at, centre, params.erase_radius_meters * 3)
    print(f"   - {result.message}")

    print("\n4. Generating regions...")
    result = apply_edit(store, generate_regions, params, rng)
    print(f"   - {result.message} (requested {result.details['requested']})")

    features = store.snapshot()
    print(f"\nLand features: {len(features_in_layer(features, 'land'))}")
    print(f"Region features: {len(features_in_layer(features, 'regions'))}")

    with open(output_path, "w") as f:
        json.dump(feature_collection(features), f, indent=2)
    print(f"\nWrote {output_path}")


if __name__ == "__main__":
    main(*sys.argv[1:])
