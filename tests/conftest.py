"""
Shared test fixtures for the polygon geometry pipeline tests.
"""
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from origami_geometry import GeometryConfig, Point, Polygon, PolygonBooleanOperator
from origami_geometry.primitives import line_passing_by, plane_from_ordered_points


@pytest.fixture
def rng():
    """Seeded generator so random geometry is reproducible."""
    return np.random.default_rng(20180101)


@pytest.fixture
def operator():
    """An operator with its own projector cache."""
    return PolygonBooleanOperator(GeometryConfig())


@pytest.fixture
def make_random_triangle(rng):
    """Factory of triangles with integer vertices in [0, 10), never degenerate."""
    def _make(operator=None):
        while True:
            coords = {tuple(int(v) for v in rng.integers(0, 10, size=3)) for _ in range(3)}
            if len(coords) < 3:
                continue
            p1, p2, p3 = (Point(*c) for c in coords)
            if not line_passing_by(p1, p2).contains(p3):
                return Polygon([p1, p2, p3], operator=operator)
    return _make


@pytest.fixture
def make_random_plane(rng):
    """Factory of planes through three distinct integer points in [0, 100)."""
    def _make():
        while True:
            coords = {tuple(int(v) for v in rng.integers(0, 100, size=3)) for _ in range(3)}
            if len(coords) < 3:
                continue
            p1, p2, p3 = (Point(*c) for c in coords)
            if not line_passing_by(p1, p2).contains(p3):
                return plane_from_ordered_points(p1, p2, p3)
    return _make


@pytest.fixture
def slanted_rectangle():
    """A 2 x 3 rectangle in the plane x = z (neither axis-aligned nor through a corner at an angle)."""
    return Polygon([Point(0, 0, 0), Point(2, 0, 2), Point(2, 3, 2), Point(0, 3, 0)])


@pytest.fixture
def corner_clipping_rectangle():
    """Overlaps the (0, 0, 0)-(2, 0, 2) corner region of ``slanted_rectangle``."""
    return Polygon([Point(1, -1, 1), Point(3, -1, 3), Point(3, 1, 3), Point(1, 1, 1)])
