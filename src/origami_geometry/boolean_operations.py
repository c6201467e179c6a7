"""
Area, union, intersection and difference of polygons lying in planes of 3D space.

Shapely computes these operations only in 2D, so they are wrapped here: the
polygons are projected to the XY working plane of their plane, handed to
Shapely and, sometimes, projected back.

Two kinds of operation are needed. Overlap tests (is a face completely
covered, partially covered or not covered at all) only need an area; the
visible part of a partially covered face, for display, needs the actual
difference polygons in the original plane. That is why operations come in
pairs, one with the ``_area`` suffix: the area variant never projects back,
saving an operation and the loss of precision that comes with it.

About precision: Shapely differences between polygons with coincident edges
can come back with zero-width "arms" and with holes. Holes touching the
boundary are joined to it and arms are broken off (see ``stick_remover``); a
hole that survives that is a topology faces of a folded figure never have,
and is raised as ``UnsupportedTopologyError``. Adding the
rotation to the XY plane and the different precision expected of areas, the
tolerance used is several orders of magnitude above double precision.

All polygons passed to one operation are expected to share the plane of the
first polygon argument.
"""
import logging
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple, Union

from shapely.geometry import GeometryCollection, LineString, MultiLineString, MultiPoint, MultiPolygon
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.geometry.polygon import orient
from shapely.ops import unary_union

from origami_geometry.errors import UnsupportedTopologyError
from origami_geometry.primitives import (
    LineSegment,
    Plane,
    Point,
    Point2D,
    are_collinear,
    plane_from_ordered_points,
)
from origami_geometry.projection import PlaneProjector
from origami_geometry.projector_cache import ProjectorCache
from origami_geometry.stick_remover import break_off_arms, is_point_between, same_position
from origami_geometry.tolerance import GeometryConfig, area_is_almost_zero

if TYPE_CHECKING:
    from origami_geometry.polygon import Polygon

logger = logging.getLogger(__name__)


class PolygonBooleanOperator:
    """Boolean operations on same-plane polygons, delegated to Shapely.

    Holds the projector cache it uses, so independent operators (and tests)
    never share state.
    """

    def __init__(
        self,
        config: Optional[GeometryConfig] = None,
        cache: Optional[ProjectorCache] = None,
    ):
        self.config = config or GeometryConfig()
        self.cache = cache if cache is not None else ProjectorCache.from_config(self.config)

    @property
    def tolerance(self) -> float:
        return self.config.tolerance

    def projector(self, plane: Plane) -> PlaneProjector:
        return self.cache.get(plane)

    # ── Areas ──

    def area(self, polygon: "Polygon") -> float:
        return self._shapely_polygon(polygon.plane, polygon.vertices).area

    def intersection_area(self, polygon: "Polygon", other: Union["Polygon", Iterable["Polygon"]]) -> float:
        """Area of the polygon intersected with another polygon, or with the union of several.

        ``other`` is either a polygon or any iterable of polygons. With several,
        this is not the intersection of all the polygons.
        """
        from origami_geometry.polygon import Polygon

        if not isinstance(other, Polygon):
            return self._intersection_area_with_union(polygon, other)
        translated = self.projector(polygon.plane).project_pair(polygon.vertices, other.vertices)
        return _make_shapely_polygon(translated[0]).intersection(_make_shapely_polygon(translated[1])).area

    def union_area(self, polygons: Iterable["Polygon"]) -> float:
        polygons = list(polygons)
        if not polygons:
            return 0.0
        plane = polygons[0].plane
        return self._union_in_xy_plane(plane, [p.vertices for p in polygons]).area

    def difference_area(self, polygon: "Polygon", covering: Iterable["Polygon"]) -> float:
        """Area of the polygon minus the union of the covering polygons."""
        covering = list(covering)
        subject = self._shapely_polygon(polygon.plane, polygon.vertices)
        if not covering:
            return subject.area
        union = self._union_in_xy_plane(polygon.plane, [p.vertices for p in covering])
        return subject.difference(union).area

    def _intersection_area_with_union(self, polygon: "Polygon", others: Iterable["Polygon"]) -> float:
        others = list(others)
        if not others:
            return 0.0
        union = self._union_in_xy_plane(polygon.plane, [p.vertices for p in others])
        return self._shapely_polygon(polygon.plane, polygon.vertices).intersection(union).area

    # ── Boundaries ──

    def difference(self, polygon: "Polygon", covering: Iterable["Polygon"]) -> List["Polygon"]:
        """What remains of the polygon after removing the union of the covering polygons.

        The result can be no polygon or any number of polygons. Each carries
        the colours of the original and the same facing, that is, its points
        follow the same orientation as the original's.
        """
        rings = self._difference_rings(polygon.plane, polygon.vertices, [p.vertices for p in covering])
        fragments = [self._ensure_points_direction(polygon, ring) for ring in rings]
        logger.debug("Difference produced %d polygon(s)", len(fragments))
        return fragments

    def segment_difference(self, segment: LineSegment, covering: Iterable["Polygon"]) -> List[LineSegment]:
        """The parts of the segment not covered by the polygons.

        The segment must lie on the plane of the polygons.
        """
        covering = list(covering)
        if not covering:
            return [segment]
        plane = covering[0].plane
        projector = self.projector(plane)
        union = self._union_in_xy_plane(plane, [p.vertices for p in covering])
        line = LineString(projector.project_ring(segment.points))
        remaining = line.difference(union)
        if remaining.is_empty:
            return []
        pieces = []
        for coords in _line_coordinates(remaining):
            start, end = projector.invert_ring([coords[0], coords[-1]])
            if not start.epsilon_equals(end, self.tolerance):
                pieces.append(LineSegment(start, end))
        return pieces

    def convex_hull(self, points: Sequence[Point]) -> List[Point]:
        """Convex hull of coplanar points, in hull order.

        Nothing is promised about the order relative to the input points.
        """
        plane = _plane_any_direction(points)
        projector = self.projector(plane)
        hull = MultiPoint(projector.project_ring(points)).convex_hull
        if not isinstance(hull, ShapelyPolygon):
            # All points on a line, the hull has no area
            return projector.invert_ring(list(hull.coords))
        return projector.invert_ring(hull.exterior.coords[:-1])

    def _difference_rings(
        self,
        plane: Plane,
        polygon_points: Sequence[Point],
        covering_points: List[Sequence[Point]],
    ) -> List[List[Point]]:
        subject = self._shapely_polygon(plane, polygon_points)
        if covering_points:
            remaining = subject.difference(self._union_in_xy_plane(plane, covering_points))
        else:
            remaining = subject
        rings = []
        for component in _polygon_components(remaining):
            if area_is_almost_zero(component.area, self.tolerance):
                # Slivers left by noding along coincident edges
                logger.debug("Dropped difference component of area %.3g", component.area)
                continue
            repaired = self._repaired_ring(component)
            if repaired:
                rings.append(repaired)
        return self.projector(plane).invert_rings(rings)

    def _repaired_ring(self, component: ShapelyPolygon) -> List[Point2D]:
        """The component as a single ring without arms.

        Shapely reports a hole joined to the boundary at one point, or along
        a zero-width arm, as an interior ring touching the shell. Such holes
        are spliced into the shell before breaking off arms; if the ring then
        encloses more than the component, a real hole is left.
        """
        tolerance = self.tolerance
        component = orient(component)
        ring = _splice_touching_interiors(
            component.exterior.coords[:-1],
            [interior.coords[:-1] for interior in component.interiors],
            tolerance,
        )
        repaired = break_off_arms(ring, tolerance)
        if not repaired:
            logger.warning("Ring of area %.3g collapsed when breaking off arms", component.area)
            return repaired
        ring_area = ShapelyPolygon(repaired).area
        if not area_is_almost_zero(ring_area - component.area, tolerance):
            raise UnsupportedTopologyError(
                f"Difference polygon has a hole: its outline encloses {ring_area:.3g}, "
                f"the polygon itself {component.area:.3g}"
            )
        return repaired

    def _ensure_points_direction(self, original: "Polygon", points: List[Point]) -> "Polygon":
        fragment = original.derive(points)
        facing_opposite_ways = original.plane.normal.dot(fragment.plane.normal) < 0
        if facing_opposite_ways:
            return original.derive(list(reversed(points)))
        return fragment

    # ── Shapely helpers ──

    def _shapely_polygon(self, plane: Plane, points: Sequence[Point]) -> ShapelyPolygon:
        return _make_shapely_polygon(self.projector(plane).project_ring(points))

    def _union_in_xy_plane(self, plane: Plane, rings: List[Sequence[Point]]):
        projector = self.projector(plane)
        return unary_union([_make_shapely_polygon(projector.project_ring(ring)) for ring in rings])


_default_operator: Optional[PolygonBooleanOperator] = None


def default_operator() -> PolygonBooleanOperator:
    """Process-wide operator used when none is given explicitly."""
    global _default_operator
    if _default_operator is None:
        _default_operator = PolygonBooleanOperator()
    return _default_operator


# ─── Internal helpers ────────────────────────────────────────────────────────

def _make_shapely_polygon(points: Sequence[Point2D]) -> ShapelyPolygon:
    """Shapely closes the ring, the first point need not be repeated."""
    poly = ShapelyPolygon(points)
    if not poly.is_valid:
        poly = poly.buffer(0)
    return poly


def _plane_any_direction(points: Sequence[Point]) -> Plane:
    """Plane of the first three points that are not on a line."""
    first = points[0]
    for i in range(1, len(points) - 1):
        for j in range(i + 1, len(points)):
            if not are_collinear(first, points[i], points[j]):
                return plane_from_ordered_points(first, points[i], points[j])
    return plane_from_ordered_points(points[0], points[1], points[2])


def _splice_touching_interiors(
    exterior: Sequence[Point2D],
    interiors: List[Sequence[Point2D]],
    tolerance: float,
) -> List[Point2D]:
    """Shell path with the interiors that touch it joined in.

    The joined path goes round the shell from the touching point back to it,
    then round the interior. Shell and interiors must have opposite
    orientations. Interiors not touching the shell are left out.
    """
    ring = [tuple(p) for p in exterior]
    for interior in interiors:
        hole = [tuple(p) for p in interior]
        touch = _touching_point(ring, hole, tolerance)
        if touch is None:
            continue
        ring, ring_index, hole_index = touch
        ring = ring[ring_index:] + ring[:ring_index] + hole[hole_index:] + hole[:hole_index]
    return ring


def _touching_point(
    ring: List[Point2D],
    hole: List[Point2D],
    tolerance: float,
) -> Optional[Tuple[List[Point2D], int, int]]:
    """Where the hole touches the ring, as (ring, ring index, hole index).

    A hole point lying inside a ring segment is inserted into the returned ring.
    """
    for j, hole_point in enumerate(hole):
        for k, ring_point in enumerate(ring):
            if same_position(hole_point, ring_point, tolerance):
                return ring, k, j
    for j, hole_point in enumerate(hole):
        for k in range(len(ring)):
            if is_point_between(ring[k], ring[(k + 1) % len(ring)], hole_point, tolerance):
                return ring[:k + 1] + [hole_point] + ring[k + 1:], k + 1, j
    return None


def _polygon_components(geometry) -> List[ShapelyPolygon]:
    if geometry.is_empty:
        return []
    if isinstance(geometry, ShapelyPolygon):
        return [geometry]
    if isinstance(geometry, (MultiPolygon, GeometryCollection)):
        # Lines and points left by a difference have no area
        return [g for part in geometry.geoms for g in _polygon_components(part)]
    return []


def _line_coordinates(geometry) -> List[List[Point2D]]:
    if geometry.is_empty:
        return []
    if isinstance(geometry, LineString):
        return [list(geometry.coords)]
    if isinstance(geometry, (MultiLineString, GeometryCollection)):
        return [c for part in geometry.geoms for c in _line_coordinates(part)]
    return []
