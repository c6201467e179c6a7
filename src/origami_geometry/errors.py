"""Errors raised by the polygon geometry pipeline."""


class GeometryError(Exception):
    """Base error for all geometry failures."""


class PolygonConstructionError(GeometryError, ValueError):
    """A polygon (or its plane) cannot be built from the given points."""


class UnsupportedTopologyError(GeometryError):
    """A difference produced a polygon with an interior hole.

    Faces of a folded figure never produce holes, so this is a modelling
    violation rather than something to repair silently.
    """


class RepairInvariantError(GeometryError):
    """Breaking off arms left fewer than three points of a non-empty ring."""


class VertexNotFoundError(GeometryError, ValueError):
    """The vertex is not one of the polygon's vertices."""
