"""
Breaking off "sticks" (or "arms") from the rings returned by a 2D difference.

When a polygon is subtracted from another and both have partially or fully
coincident edges, the boundary Shapely returns can contain duplicated points
and zero-width excursions: a chain of points that goes out along a segment
and comes back along the same segment. They carry no area but break the
polygons built from them.

Based on what the engine produces, the points of an arm lie on segments of
the ring, or on its vertices, within the package tolerance, which is about
an order of magnitude coarser than the engine's own precision. Using the
coarser tolerance means a legitimate point closer than that to a segment
could be removed. That is very improbable and accepted.

Points here are 2D ``(x, y)`` tuples. The returned ring is open: the closing
edge from the last point to the first is implicit.
"""
import logging
from typing import List, Sequence

import numpy as np

from origami_geometry.errors import RepairInvariantError
from origami_geometry.primitives import Point2D
from origami_geometry.tolerance import TOLERANCE

logger = logging.getLogger(__name__)


def break_off_arms(points: Sequence[Sequence[float]], tolerance: float = TOLERANCE) -> List[Point2D]:
    """Remove duplicate points and zero-width arms from a ring.

    Returns the cleaned ring (at least 3 points) or an empty list when the
    ring has no area at all.

    When a point goes back to the position of an earlier point, the later
    one is removed, never the earlier. The first point of the input is not
    always kept: if the last point lands on an earlier segment, the points
    before that segment are cut off. The cyclic order is unchanged.
    """
    ring = [(float(p[0]), float(p[1])) for p in points]
    if not ring:
        return []
    # Each pass only removes points, so this ends within len(ring) passes
    while True:
        cleaned = _repair_pass(ring, tolerance)
        if len(cleaned) == len(ring) or not cleaned:
            break
        ring = cleaned
    if cleaned and len(cleaned) != len(points):
        logger.debug("Broke off %d points from a ring of %d", len(points) - len(cleaned), len(points))
    return cleaned


def same_position(p1: Sequence[float], p2: Sequence[float], tolerance: float = TOLERANCE) -> bool:
    return float(np.hypot(p1[0] - p2[0], p1[1] - p2[1])) < tolerance


def is_point_between(
    segment_end1: Sequence[float],
    segment_end2: Sequence[float],
    point: Sequence[float],
    tolerance: float = TOLERANCE,
) -> bool:
    """True if the closest point of the segment to ``point`` is ``point`` itself."""
    a = np.asarray(segment_end1, dtype=float)
    b = np.asarray(segment_end2, dtype=float)
    p = np.asarray(point, dtype=float)
    ab = b - a
    length_sq = float(np.dot(ab, ab))
    if length_sq == 0.0:
        closest = a
    else:
        t = min(1.0, max(0.0, float(np.dot(p - a, ab)) / length_sq))
        closest = a + t * ab
    return same_position(closest, p, tolerance)


def _repair_pass(points: List[Point2D], tolerance: float) -> List[Point2D]:
    without_dups = _remove_duplicates(points, tolerance)
    # Fewer than 3 distinct points is another form of area-less stick
    if len(without_dups) < 3:
        return []
    arms_broken = _break_off_zero_width_arms(without_dups, tolerance)
    if len(arms_broken) < 3:
        return []
    result = _break_off_initial_arm(arms_broken, tolerance)
    if len(result) < 3:
        raise RepairInvariantError(
            f"Breaking off the initial arm left {len(result)} points of {len(arms_broken)}"
        )
    return result


def _remove_duplicates(points: List[Point2D], tolerance: float) -> List[Point2D]:
    """Drop points repeating their predecessor, and a last point closing the ring."""
    result = [p for i, p in enumerate(points) if i == 0 or not same_position(p, points[i - 1], tolerance)]
    if len(result) > 1 and same_position(result[0], result[-1], tolerance):
        result.pop()
    return result


def _break_off_zero_width_arms(points: List[Point2D], tolerance: float) -> List[Point2D]:
    """Remove, one at a time, the tips of arms that enclose no area.

    The ring is read cyclically, so an arm crossing the end of the list is
    found wherever the list happens to start.
    """
    result = list(points)
    while len(result) >= 3:
        removed = _remove_point_that_returns_to_path(result, tolerance)
        if removed is None:
            break
        result = _remove_duplicates(removed, tolerance)
    return result


def _remove_point_that_returns_to_path(points: List[Point2D], tolerance: float):
    """First excursion found, removed; None when there is none.

    An excursion is a point whose two neighbours lie in the same direction
    from it: the path reaches it and turns straight back.
    """
    count = len(points)
    for i in range(count):
        following_index, next_index = (i + 1) % count, (i + 2) % count
        point, following, next_to_following = points[i], points[following_index], points[next_index]
        if same_position(point, next_to_following, tolerance):
            # There and back over a single point
            return _without_indices(points, {following_index, next_index})
        if is_point_between(point, following, next_to_following, tolerance):
            # Back along the segment just walked
            return _without_indices(points, {following_index})
        if is_point_between(following, next_to_following, point, tolerance):
            # Back past the point the arm started from
            return _without_indices(points, {following_index})
    return None


def _without_indices(points: List[Point2D], indices) -> List[Point2D]:
    return [p for i, p in enumerate(points) if i not in indices]


def _break_off_initial_arm(points: List[Point2D], tolerance: float) -> List[Point2D]:
    """Cut the start of the path if the last point lands back on an earlier segment.

    Unlike the arms above, the part cut off here can enclose area: it is a
    loop the path closes on itself before the ring does.
    """
    last = points[-1]
    for i in range(len(points) - 2):
        if is_point_between(points[i], points[i + 1], last, tolerance):
            return points[i + 1:]
    return points
