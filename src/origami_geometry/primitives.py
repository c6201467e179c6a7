"""
3D primitives consumed by the projection and boolean-operation pipeline.

Points, vectors, planes, lines and segments are immutable. A ``Point`` is a
vertex: ``==`` compares identity, while positions are compared with
``epsilon_equals`` against the package tolerance. 2D points in the flat
working plane are plain ``(x, y)`` tuples, which is what Shapely consumes.
"""
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from origami_geometry.errors import PolygonConstructionError
from origami_geometry.tolerance import TOLERANCE, almost_zero

Point2D = Tuple[float, float]


@dataclass(frozen=True)
class Vector:
    """A direction and magnitude in 3D space."""

    x: float
    y: float
    z: float

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Vector":
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    def coordinates(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def dot(self, other: "Vector") -> float:
        return float(np.dot(self.as_array(), other.as_array()))

    def cross(self, other: "Vector") -> "Vector":
        return Vector.from_array(np.cross(self.as_array(), other.as_array()))

    def length(self) -> float:
        return float(np.linalg.norm(self.as_array()))

    def scale(self, factor: float) -> "Vector":
        return Vector(self.x * factor, self.y * factor, self.z * factor)

    def normalize(self) -> "Vector":
        length = self.length()
        if length == 0.0:
            raise ValueError("Cannot normalize a zero-length vector")
        return self.scale(1.0 / length)

    def with_length(self, length: float) -> "Vector":
        return self.normalize().scale(length)

    def angle(self, other: "Vector") -> float:
        """Unsigned angle in [0, pi].

        atan2 of the cross and dot products keeps precision near 0 and pi,
        where acos of the normalized dot product does not.
        """
        a = self.as_array()
        b = other.as_array()
        return math.atan2(float(np.linalg.norm(np.cross(a, b))), float(np.dot(a, b)))


@dataclass(frozen=True, eq=False)
class Point:
    """A vertex position in 3D space. Equality is identity."""

    x: float
    y: float
    z: float

    def __post_init__(self):
        # Accept ints and numpy scalars, store plain floats
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))
        object.__setattr__(self, "z", float(self.z))

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Point":
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    def coordinates(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def vector_to(self, other: "Point") -> Vector:
        return Vector(other.x - self.x, other.y - self.y, other.z - self.z)

    def distance(self, other: "Point") -> float:
        return float(np.linalg.norm(other.as_array() - self.as_array()))

    def translate(self, vector: Vector) -> "Point":
        return Point(self.x + vector.x, self.y + vector.y, self.z + vector.z)

    def epsilon_equals(self, other: Optional["Point"], tolerance: float = TOLERANCE) -> bool:
        if other is None:
            return False
        return self.distance(other) < tolerance


def midpoint(p1: Point, p2: Point) -> Point:
    return Point((p1.x + p2.x) / 2.0, (p1.y + p2.y) / 2.0, (p1.z + p2.z) / 2.0)


@dataclass(frozen=True)
class Plane:
    """Plane ``a*x + b*y + c*z + d = 0``, stored with a unit normal."""

    a: float
    b: float
    c: float
    d: float

    def __post_init__(self):
        norm = math.sqrt(self.a * self.a + self.b * self.b + self.c * self.c)
        if norm == 0.0:
            raise ValueError("A plane needs a non-zero normal")
        for name in ("a", "b", "c", "d"):
            object.__setattr__(self, name, float(getattr(self, name)) / norm)

    @property
    def equation(self) -> Tuple[float, float, float, float]:
        return (self.a, self.b, self.c, self.d)

    @property
    def normal(self) -> Vector:
        return Vector(self.a, self.b, self.c)

    def signed_distance(self, point: Point) -> float:
        return self.a * point.x + self.b * point.y + self.c * point.z + self.d

    def contains(self, point: Point, tolerance: float = TOLERANCE) -> bool:
        return almost_zero(self.signed_distance(point), tolerance)

    def closest_point(self, point: Point) -> Point:
        """Orthogonal projection of the point onto the plane."""
        return point.translate(self.normal.scale(-self.signed_distance(point)))

    def is_same_plane(self, other: "Plane", tolerance: float = TOLERANCE) -> bool:
        """Proportional equations, facing either way."""
        mine = np.array(self.equation)
        theirs = np.array(other.equation)
        return bool(
            np.all(np.abs(mine - theirs) < tolerance)
            or np.all(np.abs(mine + theirs) < tolerance)
        )

    def cache_key(self, decimals: int = 9) -> Tuple[float, ...]:
        """Value key of the plane, identical for both facings."""
        coefficients = self.equation
        leading = next((v for v in coefficients[:3] if not almost_zero(v)), 1.0)
        sign = -1.0 if leading < 0 else 1.0
        # Adding 0.0 turns -0.0 into 0.0 so both hash the same
        return tuple(round(sign * v, decimals) + 0.0 for v in coefficients)


def are_collinear(p1: Point, p2: Point, p3: Point) -> bool:
    """True if the three points span no plane.

    The length of the normal is the product of two lengths, so it is compared
    with the squared tolerance.
    """
    normal = p1.vector_to(p2).cross(p1.vector_to(p3))
    return almost_zero(normal.length(), TOLERANCE * TOLERANCE)


def plane_from_ordered_points(
    p1: Point, p2: Optional[Point] = None, p3: Optional[Point] = None,
) -> Plane:
    """Plane through three points, normal given by the right-hand rule of their order.

    Accepts either three points or a single sequence of three points.
    """
    if p2 is None and p3 is None:
        p1, p2, p3 = p1  # type: ignore[misc]
    if are_collinear(p1, p2, p3):
        raise PolygonConstructionError("Cannot derive a plane from collinear points")
    normal = p1.vector_to(p2).cross(p1.vector_to(p3))
    d = -normal.dot(Vector(p1.x, p1.y, p1.z))
    return Plane(normal.x, normal.y, normal.z, d)


@dataclass(frozen=True, eq=False)
class Line:
    """Infinite line through a point along a unit direction."""

    point: Point
    direction: Vector

    def __post_init__(self):
        object.__setattr__(self, "direction", self.direction.normalize())

    def distance(self, point: Point) -> float:
        return self.point.vector_to(point).cross(self.direction).length()

    def contains(self, point: Point, tolerance: float = TOLERANCE) -> bool:
        return almost_zero(self.distance(point), tolerance)

    def rotate_point_around(self, point: Point, angle: float) -> Point:
        """Right-handed rotation of the point around this line (Rodrigues)."""
        k = self.direction.as_array()
        v = point.as_array() - self.point.as_array()
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        rotated = v * cos_a + np.cross(k, v) * sin_a + k * float(np.dot(k, v)) * (1.0 - cos_a)
        return Point.from_array(self.point.as_array() + rotated)


def line_passing_by(p1: Point, p2: Point) -> Line:
    return Line(p1, p1.vector_to(p2))


@dataclass(frozen=True, eq=False)
class LineSegment:
    start: Point
    end: Point

    @property
    def points(self) -> Tuple[Point, Point]:
        return (self.start, self.end)

    def length(self) -> float:
        return self.start.distance(self.end)

    def closest_point(self, point: Point) -> Point:
        a = self.start.as_array()
        ab = self.end.as_array() - a
        length_sq = float(np.dot(ab, ab))
        if length_sq == 0.0:
            return self.start
        t = float(np.dot(point.as_array() - a, ab)) / length_sq
        t = min(1.0, max(0.0, t))
        return Point.from_array(a + t * ab)

    def contains(self, point: Point, tolerance: float = TOLERANCE) -> bool:
        return self.closest_point(point).epsilon_equals(point, tolerance)

    def intersection_point(
        self, other: "LineSegment", tolerance: float = TOLERANCE,
    ) -> Optional[Point]:
        """Single crossing point of two segments, None if parallel or apart."""
        a = self.start.as_array()
        c = other.start.as_array()
        d1 = self.end.as_array() - a
        d2 = other.end.as_array() - c
        r = a - c
        a11 = float(np.dot(d1, d1))
        a22 = float(np.dot(d2, d2))
        a12 = float(np.dot(d1, d2))
        if a11 == 0.0 or a22 == 0.0:
            return None
        denom = a11 * a22 - a12 * a12
        if denom <= (tolerance ** 2) * a11 * a22:
            return None
        d1r = float(np.dot(d1, r))
        d2r = float(np.dot(d2, r))
        s = (a12 * d2r - a22 * d1r) / denom
        t = (a11 * d2r - a12 * d1r) / denom
        s_slack = tolerance / math.sqrt(a11)
        t_slack = tolerance / math.sqrt(a22)
        if not (-s_slack <= s <= 1.0 + s_slack and -t_slack <= t <= 1.0 + t_slack):
            return None
        on_self = Point.from_array(a + min(1.0, max(0.0, s)) * d1)
        on_other = Point.from_array(c + min(1.0, max(0.0, t)) * d2)
        if not on_self.epsilon_equals(on_other, tolerance):
            return None
        return on_self


@dataclass(frozen=True)
class PolarPoint:
    """Radius/angle pair used by the general plane projector."""

    r: float
    theta: float

    def as_cartesian(self) -> Point2D:
        return (self.r * math.cos(self.theta), self.r * math.sin(self.theta))


def polar_from_cartesian(point: Sequence[float]) -> PolarPoint:
    x, y = float(point[0]), float(point[1])
    return PolarPoint(math.hypot(x, y), math.atan2(y, x))
