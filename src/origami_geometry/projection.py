"""
Bidirectional mapping between a plane in 3D space and the flat XY working plane.

Shapely only works in 2D, so every polygon is moved to the XY plane before a
boolean operation and, when a boundary is needed, moved back. Where the points
land in 2D does not matter; what matters is that the mapping is consistent
and exactly invertible (within tolerance) for points lying on the plane.

Planes parallel to one of the coordinate planes drop the constant coordinate,
any other plane uses a polar mapping around a reference point and a
reference vector lying on the plane. The variant is picked once, from the
plane equation, by ``classify_plane``.
"""
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from origami_geometry.primitives import (
    Line,
    Plane,
    Point,
    Point2D,
    PolarPoint,
    Vector,
    line_passing_by,
    polar_from_cartesian,
)
from origami_geometry.tolerance import TOLERANCE, almost_zero

logger = logging.getLogger(__name__)

# Below this the direction of a rotation cannot be told apart from no rotation
_DIRECTION_EPSILON = 1e-12


class ProjectorKind(Enum):
    PARALLEL_TO_XY = "parallel_to_xy"
    PARALLEL_TO_XZ = "parallel_to_xz"
    PARALLEL_TO_YZ = "parallel_to_yz"
    GENERAL = "general"


def classify_plane(plane: Plane, tolerance: float = TOLERANCE) -> ProjectorKind:
    """Pick the projector variant from the plane equation coefficients."""
    a_zero, b_zero, c_zero = (almost_zero(v, tolerance) for v in plane.equation[:3])
    if a_zero and b_zero and not c_zero:
        return ProjectorKind.PARALLEL_TO_XY
    if a_zero and not b_zero and c_zero:
        return ProjectorKind.PARALLEL_TO_XZ
    if not a_zero and b_zero and c_zero:
        return ProjectorKind.PARALLEL_TO_YZ
    return ProjectorKind.GENERAL


def perpendicular_unit_vector(v: Vector) -> Vector:
    """A unit vector perpendicular to ``v``.

    The smallest coordinate is zeroed and the other two are swapped, one of
    them negated. Building it from the two largest coordinates avoids the
    loss of precision the usual cross-product construction shows for some
    planes.
    """
    coords = v.coordinates()
    magnitudes = [abs(c) for c in coords]
    index_of_min = magnitudes.index(min(magnitudes))
    x, y, z = coords
    if index_of_min == 0:
        perpendicular = Vector(0.0, z, -y)
    elif index_of_min == 1:
        perpendicular = Vector(z, 0.0, -x)
    else:
        perpendicular = Vector(y, -x, 0.0)
    return perpendicular.normalize()


@dataclass(frozen=True)
class PlaneProjector:
    """Plane-specific bijection between points on the plane and 2D points.

    Instances are immutable and built by ``make_projector``. ``offset`` is the
    constant coordinate of an axis-aligned plane; the reference fields are
    only set for the general variant.
    """

    kind: ProjectorKind
    plane: Plane
    offset: float = 0.0
    reference_point: Optional[Point] = None
    reference_vector: Optional[Vector] = None
    axis: Optional[Line] = None

    # ── Single points ──

    def project(self, point: Point) -> Point2D:
        """Map a point lying on the plane to the XY working plane."""
        if self.kind is ProjectorKind.PARALLEL_TO_XY:
            return (point.x, point.y)
        if self.kind is ProjectorKind.PARALLEL_TO_XZ:
            return (point.x, point.z)
        if self.kind is ProjectorKind.PARALLEL_TO_YZ:
            return (point.z, point.y)
        return self._project_polar(point).as_cartesian()

    def invert(self, point: Sequence[float]) -> Point:
        """Map a 2D point, typically the output of a boolean operation, back onto the plane."""
        u, v = float(point[0]), float(point[1])
        if self.kind is ProjectorKind.PARALLEL_TO_XY:
            return Point(u, v, self.offset)
        if self.kind is ProjectorKind.PARALLEL_TO_XZ:
            return Point(u, self.offset, v)
        if self.kind is ProjectorKind.PARALLEL_TO_YZ:
            return Point(self.offset, v, u)
        return self._invert_polar(polar_from_cartesian((u, v)))

    # ── Rings ──

    def project_ring(self, points: Iterable[Point]) -> List[Point2D]:
        return [self.project(p) for p in points]

    def project_rings(self, rings: Iterable[Sequence[Point]]) -> List[List[Point2D]]:
        return [self.project_ring(ring) for ring in rings]

    def project_pair(
        self, ring1: Sequence[Point], ring2: Sequence[Point],
    ) -> List[List[Point2D]]:
        """Two rings at once; the same ring is only projected once."""
        if ring1 is ring2 or list(ring1) == list(ring2):
            projected = self.project_ring(ring1)
            return [projected, projected]
        return self.project_rings([ring1, ring2])

    def invert_ring(self, points: Iterable[Sequence[float]]) -> List[Point]:
        return [self.invert(p) for p in points]

    def invert_rings(self, rings: Iterable[Iterable[Sequence[float]]]) -> List[List[Point]]:
        return [self.invert_ring(ring) for ring in rings]

    # ── General plane ──

    def _project_polar(self, point: Point) -> PolarPoint:
        to_point = self.reference_point.vector_to(point)
        radius = to_point.length()
        if radius == 0.0:
            return PolarPoint(0.0, 0.0)
        return PolarPoint(radius, self._signed_angle(to_point, radius))

    def _signed_angle(self, to_point: Vector, radius: float) -> float:
        """Angle to rotate the reference vector, around the normal, onto ``to_point``.

        Positive is a right-handed rotation around the plane normal. Near 0 or
        pi the direction is irrelevant and only the magnitude is returned.
        """
        magnitude = abs(self.reference_vector.angle(to_point))
        if magnitude < _DIRECTION_EPSILON or abs(magnitude - math.pi) < _DIRECTION_EPSILON:
            return magnitude
        # The cross product is perpendicular to the plane, its sense against
        # the normal gives the direction of the rotation
        direction = self.reference_vector.cross(to_point).dot(self.plane.normal) / radius
        if abs(direction) < _DIRECTION_EPSILON:
            return magnitude
        return math.copysign(magnitude, direction)

    def _invert_polar(self, polar: PolarPoint) -> Point:
        if polar.r < _DIRECTION_EPSILON:
            return self.reference_point
        reference_end = self.reference_point.translate(self.reference_vector)
        rotated = self.axis.rotate_point_around(reference_end, polar.theta)
        to_new_point = self.reference_point.vector_to(rotated).with_length(polar.r)
        return self.reference_point.translate(to_new_point)


def make_projector(plane: Plane, tolerance: float = TOLERANCE) -> PlaneProjector:
    """Build the projector variant that fits the plane."""
    kind = classify_plane(plane, tolerance)
    a, b, c, d = plane.equation
    if kind is ProjectorKind.PARALLEL_TO_XY:
        projector = PlaneProjector(kind, plane, offset=-d / c)
    elif kind is ProjectorKind.PARALLEL_TO_XZ:
        projector = PlaneProjector(kind, plane, offset=-d / b)
    elif kind is ProjectorKind.PARALLEL_TO_YZ:
        projector = PlaneProjector(kind, plane, offset=-d / a)
    else:
        origin = Point(0.0, 0.0, 0.0)
        reference_point = origin if almost_zero(d, tolerance) else plane.closest_point(origin)
        axis = line_passing_by(reference_point, reference_point.translate(plane.normal))
        projector = PlaneProjector(
            kind,
            plane,
            reference_point=reference_point,
            reference_vector=perpendicular_unit_vector(plane.normal),
            axis=axis,
        )
    logger.debug("Built %s projector for plane %s", kind.value, plane.equation)
    return projector
