"""Errors raised by the geometry engine."""


class WorldbuilderError(Exception):
    """Base class for engine errors."""


class StructuralGeometryError(WorldbuilderError):
    """Geometry is structurally unusable (malformed ring, wrong type, bad bounds)."""


class NoLandError(WorldbuilderError):
    """The operation requires an existing, non-empty land feature."""

    def __init__(self, message: str = "No land found. Generate land or draw land first."):
        super().__init__(message)


class InsufficientSeedsError(WorldbuilderError):
    """Rejection sampling could not place enough region seeds inside the land."""

    def __init__(self, found: int, required: int):
        self.found = found
        self.required = required
        super().__init__(
            f"Could not place region seeds inside land ({found} of {required} required)"
        )


class FeatureNotFoundError(WorldbuilderError):
    """A referenced feature id is not present in the collection."""

    def __init__(self, feature_id):
        self.feature_id = feature_id
        super().__init__(f"Feature {feature_id!r} not found")
