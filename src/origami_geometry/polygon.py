"""
Concave polygon in 3D space.

All operations work for concave polygons. A face of a folded figure is always
convex, but what is left visible of a face once the faces on top of it are
removed is not, so the polygon must derive its plane without assuming
convexity (three consecutive vertices fail at a reflex vertex).

Visibility queries (covered, completely visible, overlaps...) should only
be given polygons sharing this polygon's plane.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from origami_geometry.boolean_operations import PolygonBooleanOperator, default_operator
from origami_geometry.errors import PolygonConstructionError, VertexNotFoundError
from origami_geometry.primitives import LineSegment, Plane, Point, Vector, plane_from_ordered_points
from origami_geometry.tolerance import area_is_almost_zero, epsilon_equals


Color = Tuple[int, int, int]

WHITE: Color = (255, 255, 255)
DEFAULT_COLOR: Color = WHITE


@dataclass(frozen=True)
class ColorCombination:
    front: Color = DEFAULT_COLOR
    back: Color = DEFAULT_COLOR


class Polygon:
    """Ordered ring of at least three coplanar vertices.

    The plane normal follows the order of the vertices. Vertices, edges and
    plane are fixed at construction.
    """

    def __init__(
        self,
        vertices: Sequence[Point],
        colors: Optional[ColorCombination] = None,
        *,
        front_color: Color = DEFAULT_COLOR,
        back_color: Color = DEFAULT_COLOR,
        operator: Optional[PolygonBooleanOperator] = None,
    ):
        if len(vertices) < 3:
            raise PolygonConstructionError("A polygon needs at least three vertices.")
        self._operator = operator
        self.colors = colors if colors is not None else ColorCombination(front_color, back_color)
        self.vertices: Tuple[Point, ...] = tuple(vertices)
        self.plane: Plane = _plane_of_concave_polygon(self.vertices, self.operator)
        self.edges: Tuple[LineSegment, ...] = _make_segments(self.vertices)

    @property
    def operator(self) -> PolygonBooleanOperator:
        return self._operator if self._operator is not None else default_operator()

    @property
    def tolerance(self) -> float:
        return self.operator.tolerance

    @property
    def front_color(self) -> Color:
        return self.colors.front

    @property
    def back_color(self) -> Color:
        return self.colors.back

    def derive(self, vertices: Sequence[Point]) -> "Polygon":
        """New polygon with other vertices, same colours and operator."""
        return Polygon(vertices, self.colors, operator=self._operator)

    def __repr__(self) -> str:
        return f"Polygon({list(self.vertices)!r})"

    # ── Vertex navigation ──

    def next_vertex(self, vertex: Point) -> Point:
        return self.vertices[(self._index_of(vertex) + 1) % len(self.vertices)]

    def previous_vertex(self, vertex: Point) -> Point:
        return self.vertices[(self._index_of(vertex) - 1) % len(self.vertices)]

    def vertices_starting_with(self, vertex: Point) -> List[Point]:
        """Vertices in the same order, rotated to start with the given vertex."""
        index = self._index_of(vertex)
        return list(self.vertices[index:] + self.vertices[:index])

    def _index_of(self, vertex: Point) -> int:
        # Identity, not position
        for index, candidate in enumerate(self.vertices):
            if candidate is vertex:
                return index
        raise VertexNotFoundError(f"{vertex!r} is not a vertex of this polygon")

    def is_triangle(self) -> bool:
        return len(self.vertices) == 3

    def is_quadrilateral(self) -> bool:
        return len(self.vertices) == 4

    def is_a_vertex(self, vertex: Point) -> bool:
        return any(candidate is vertex for candidate in self.vertices)

    def are_all_vertices(self, vertices: Iterable[Point]) -> bool:
        return all(self.is_a_vertex(v) for v in vertices)

    def has_same_point_structure(self, points: Sequence[Point]) -> bool:
        """Same positions in the same cyclic order, possibly shifted, not reversed."""
        return is_same_point_structure(self.vertices, points, self.tolerance)

    # ── Facing ──

    def is_showing_front(self, observer_looking_direction: Vector) -> bool:
        return self.plane.normal.dot(observer_looking_direction) < 0.0

    def is_showing_back(self, observer_looking_direction: Vector) -> bool:
        return self.plane.normal.dot(observer_looking_direction) > 0.0

    # ── Areas and visibility ──

    def area(self) -> float:
        return self.operator.area(self)

    def area_matches(self, other: "Polygon") -> bool:
        """True if both polygons have the same area as their intersection.

        That is, they occupy the same region, not just that their areas are
        equal.
        """
        intersection_area = self.operator.intersection_area(self, other)
        return (
            epsilon_equals(self.area(), intersection_area, self.tolerance)
            and epsilon_equals(other.area(), intersection_area, self.tolerance)
        )

    def overlaps(self, other: "Polygon") -> bool:
        """True if this polygon and another in the same plane share some area.

        Touching along an edge, or crossing from another plane, is not
        overlapping.
        """
        return not area_is_almost_zero(self.operator.intersection_area(self, other), self.tolerance)

    def is_covered_by(self, covering: Iterable["Polygon"]) -> bool:
        return area_is_almost_zero(self.operator.difference_area(self, list(covering)), self.tolerance)

    def is_hidden_by(self, covering: Iterable["Polygon"]) -> bool:
        return self.is_covered_by(covering)

    def is_completely_visible(self, covering: Iterable["Polygon"]) -> bool:
        intersection_area = self.operator.intersection_area(self, list(covering))
        return area_is_almost_zero(intersection_area, self.tolerance)

    def partially_or_totally_covered_by(self, covering: Iterable["Polygon"]) -> bool:
        return not self.is_completely_visible(covering)

    def difference(self, covering: Iterable["Polygon"]) -> List["Polygon"]:
        """What remains of this polygon after removing what the covering polygons cover."""
        return self.operator.difference(self, list(covering))

    def intersections(self, segment: LineSegment) -> List[Point]:
        """Vertices lying on the segment plus the points where edges cross it."""
        tolerance = self.tolerance
        points = [v for v in self.vertices if segment.contains(v, tolerance)]
        for edge in self.edges:
            crossing = edge.intersection_point(segment, tolerance)
            if crossing is None:
                continue
            if any(p.epsilon_equals(crossing, tolerance) for p in points):
                continue
            points.append(crossing)
        return points


# ─── Module functions ────────────────────────────────────────────────────────

def calculate_union_area(
    polygons: Iterable[Polygon], operator: Optional[PolygonBooleanOperator] = None,
) -> float:
    return (operator or default_operator()).union_area(polygons)


def line_segment_difference_with_polygons(
    segment: LineSegment,
    polygons: Iterable[Polygon],
    operator: Optional[PolygonBooleanOperator] = None,
) -> List[LineSegment]:
    """The segments that remain after removing the parts covered by the polygons."""
    return (operator or default_operator()).segment_difference(segment, polygons)


def is_same_point_structure(
    points1: Sequence[Point], points2: Sequence[Point], tolerance: Optional[float] = None,
) -> bool:
    if tolerance is None:
        tolerance = default_operator().tolerance
    point_count = len(points1)
    if point_count != len(points2):
        return False
    if point_count == 0:
        return True
    index_of_first = next(
        (i for i, p in enumerate(points1) if p.epsilon_equals(points2[0], tolerance)), -1,
    )
    if index_of_first < 0:
        return False
    return all(
        points1[(index_of_first + offset) % point_count].epsilon_equals(point, tolerance)
        for offset, point in enumerate(points2)
    )


def calculate_plane_creation_points(
    polygon_points: Sequence[Point], operator: Optional[PolygonBooleanOperator] = None,
) -> List[Point]:
    """Three vertices, in polygon order, from which the plane can be computed.

    Any three points of the convex hull are extreme points of the polygon, so
    taken in the order they have in the polygon they give its orientation.
    Consecutive hull points can be almost on a line, when rounding makes a
    point lying on an edge look convex, so the three are picked far apart.
    """
    operator = operator or default_operator()
    tolerance = operator.tolerance
    three_hull_points = _spread_out_hull_points(operator.convex_hull(polygon_points))
    ordered: List[Point] = []
    for point in polygon_points:
        on_hull = any(h.epsilon_equals(point, tolerance) for h in three_hull_points)
        # A ring touching itself visits the same position twice
        if on_hull and not any(o.epsilon_equals(point, tolerance) for o in ordered):
            ordered.append(point)
    if len(ordered) < 3:
        raise PolygonConstructionError(
            f"Found {len(ordered)} points to compute the plane of the polygon, need 3"
        )
    return ordered


def _spread_out_hull_points(hull: List[Point]) -> List[Point]:
    """A hull point, the one farthest from it, and the one farthest from the line through both."""
    first = hull[0]
    second = max(hull, key=first.distance)
    side = first.vector_to(second)
    third = max(hull, key=lambda p: side.cross(first.vector_to(p)).length())
    return [first, second, third]


def _plane_of_concave_polygon(
    polygon_points: Sequence[Point], operator: PolygonBooleanOperator,
) -> Plane:
    if len(polygon_points) == 3:
        return plane_from_ordered_points(polygon_points)
    creation_points = calculate_plane_creation_points(polygon_points, operator)
    return plane_from_ordered_points(creation_points[:3])


def _make_segments(points: Sequence[Point]) -> Tuple[LineSegment, ...]:
    return tuple(LineSegment(points[i], points[(i + 1) % len(points)]) for i in range(len(points)))
