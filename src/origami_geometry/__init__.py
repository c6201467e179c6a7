"""Area, overlap and difference of polygons lying in arbitrary planes of 3D space."""

from origami_geometry.boolean_operations import PolygonBooleanOperator, default_operator
from origami_geometry.errors import (
    GeometryError,
    PolygonConstructionError,
    RepairInvariantError,
    UnsupportedTopologyError,
    VertexNotFoundError,
)
from origami_geometry.polygon import (
    ColorCombination,
    Polygon,
    calculate_union_area,
    line_segment_difference_with_polygons,
)
from origami_geometry.primitives import LineSegment, Plane, Point, Vector, plane_from_ordered_points
from origami_geometry.tolerance import TOLERANCE, GeometryConfig

__all__ = [
    "ColorCombination",
    "GeometryConfig",
    "GeometryError",
    "LineSegment",
    "Plane",
    "Point",
    "Polygon",
    "PolygonBooleanOperator",
    "PolygonConstructionError",
    "RepairInvariantError",
    "TOLERANCE",
    "UnsupportedTopologyError",
    "Vector",
    "VertexNotFoundError",
    "calculate_union_area",
    "default_operator",
    "line_segment_difference_with_polygons",
    "plane_from_ordered_points",
]
