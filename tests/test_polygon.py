"""Tests for polygon module."""
import pytest

from origami_geometry import (
    ColorCombination,
    LineSegment,
    Point,
    Polygon,
    PolygonConstructionError,
    Vector,
    VertexNotFoundError,
    calculate_union_area,
    line_segment_difference_with_polygons,
)
from origami_geometry.polygon import calculate_plane_creation_points, is_same_point_structure
from origami_geometry.primitives import midpoint, plane_from_ordered_points

# Plane with no special orientation
SLANTED_PLANE = plane_from_ordered_points(Point(0, 3, 0), Point(-10, 4, -5), Point(10, 8, -5))


def on_slanted_plane(*points):
    return [SLANTED_PLANE.closest_point(p) for p in points]


@pytest.fixture
def triangle_points():
    return [Point(0, 0, 0), Point(1, 0, 0), Point(1, 1, 0)]


class TestConstruction:

    def test_too_few_vertices(self):
        with pytest.raises(PolygonConstructionError):
            Polygon([Point(0, 0, 0), Point(1, 0, 0)])

    def test_collinear_vertices(self):
        with pytest.raises(PolygonConstructionError):
            Polygon([Point(0, 0, 0), Point(1, 0, 0), Point(2, 0, 0)])

    def test_edges_close_the_ring(self, triangle_points):
        pol = Polygon(triangle_points)
        assert len(pol.edges) == 3
        assert pol.edges[-1].start is triangle_points[2]
        assert pol.edges[-1].end is triangle_points[0]

    def test_default_colors(self, triangle_points):
        pol = Polygon(triangle_points)
        assert pol.front_color == (255, 255, 255)
        assert pol.back_color == (255, 255, 255)

    def test_colors_by_keyword(self, triangle_points):
        pol = Polygon(triangle_points, front_color=(255, 0, 0), back_color=(0, 0, 255))
        assert pol.colors == ColorCombination((255, 0, 0), (0, 0, 255))

    def test_derive_keeps_colors(self, triangle_points):
        pol = Polygon(triangle_points, ColorCombination((1, 2, 3), (4, 5, 6)))
        derived = pol.derive([Point(0, 0, 0), Point(2, 0, 0), Point(2, 2, 0)])
        assert derived.colors == pol.colors


class TestVertices:

    def test_next_vertex(self, triangle_points):
        first, second, third = triangle_points
        pol = Polygon(triangle_points)
        assert pol.next_vertex(first) is second
        assert pol.next_vertex(second) is third
        assert pol.next_vertex(third) is first

    def test_previous_vertex(self, triangle_points):
        first, second, third = triangle_points
        pol = Polygon(triangle_points)
        assert pol.previous_vertex(first) is third
        assert pol.previous_vertex(third) is second

    def test_is_triangle(self, triangle_points):
        pol = Polygon(triangle_points)
        assert pol.is_triangle()
        assert not pol.is_quadrilateral()

    def test_is_quadrilateral(self, triangle_points):
        assert Polygon(triangle_points + [Point(0, 1, 0)]).is_quadrilateral()

    def test_is_a_vertex(self, triangle_points):
        pol = Polygon(triangle_points)
        assert all(pol.is_a_vertex(v) for v in triangle_points)
        assert pol.are_all_vertices(triangle_points)

    def test_same_position_is_not_a_vertex(self, triangle_points):
        pol = Polygon(triangle_points)
        assert not pol.is_a_vertex(Point(0, 0, 0))
        assert not pol.is_a_vertex(Point(1, 0, 0))
        assert not pol.are_all_vertices([Point(0, 0, 0)])

    def test_vertices_starting_with(self, triangle_points):
        v0, v1, v2 = triangle_points
        pol = Polygon(triangle_points)
        assert pol.vertices_starting_with(v0) == [v0, v1, v2]
        assert pol.vertices_starting_with(v1) == [v1, v2, v0]
        assert pol.vertices_starting_with(v2) == [v2, v0, v1]
        v3 = Point(0, 1, 0)
        quad = Polygon([v0, v1, v2, v3])
        assert quad.vertices_starting_with(v2) == [v2, v3, v0, v1]

    def test_vertices_starting_with_unknown_vertex(self, triangle_points):
        pol = Polygon(triangle_points)
        with pytest.raises(VertexNotFoundError):
            pol.vertices_starting_with(Point(0, 0, 0))

    def test_next_vertex_of_unknown_vertex(self, triangle_points):
        with pytest.raises(VertexNotFoundError):
            Polygon(triangle_points).next_vertex(Point(5, 5, 5))


class TestPointStructure:

    def test_shifted_ring_matches(self, triangle_points):
        pol = Polygon(triangle_points)
        assert pol.has_same_point_structure([Point(1, 0, 0), Point(1, 1, 0), Point(0, 0, 0)])

    def test_reversed_ring_does_not_match(self, triangle_points):
        pol = Polygon(triangle_points)
        assert not pol.has_same_point_structure([Point(1, 1, 0), Point(1, 0, 0), Point(0, 0, 0)])

    def test_different_size_does_not_match(self, triangle_points):
        pol = Polygon(triangle_points)
        assert not pol.has_same_point_structure(triangle_points[:2])

    def test_within_tolerance(self):
        assert is_same_point_structure(
            [Point(0, 0, 0), Point(1, 0, 0)],
            [Point(1, 0, 1e-9), Point(0, 0, 0)],
        )
        assert is_same_point_structure([], [])


class TestFacing:

    def test_slanted_look_at_back(self, triangle_points):
        # Anticlockwise seen from z positive
        pol = Polygon(triangle_points)
        assert pol.is_showing_back(Vector(1000, 1000, 1))
        assert not pol.is_showing_front(Vector(1000, 1000, 1))

    def test_look_at_front(self, triangle_points):
        pol = Polygon(triangle_points)
        assert pol.is_showing_front(Vector(0, 0, -1))


class TestAreaMatches:

    def test_same_triangle_shifted_matches(self):
        first = Polygon([Point(0, 0, 0), Point(1, 0, 0), Point(1, 1, 0)])
        second = Polygon([Point(1, 1, 0), Point(0, 0, 0), Point(1, 0, 0)])
        assert first.area_matches(second)

    def test_perpendicular_to_xy_does_not_match(self):
        first = Polygon([Point(1, 0, 0), Point(1, 1, 0), Point(1, 1, -1), Point(1, 0, -1)])
        second = Polygon([Point(1, 0, 0), Point(1, 1, 0), Point(1, 1, -0.5), Point(1, 0, -0.5)])
        assert not first.area_matches(second)

    def test_different_triangle_does_not_match(self):
        first = Polygon([Point(0, 0, 0), Point(1, 0, 0), Point(1, 1, 0)])
        second = Polygon([Point(1, 1, 1), Point(0, 0, 0), Point(1, 0, 0)])
        assert not first.area_matches(second)

    def test_area(self):
        square = Polygon([Point(0, 0, 3), Point(2, 0, 3), Point(2, 2, 3), Point(0, 2, 3)])
        assert square.area() == pytest.approx(4.0)


class TestVisibility:

    XZ_TRIANGLE = [Point(0, 0, 0), Point(1, 0, 0), Point(1, 0, 1)]
    APART = [Point(10, 0, 10), Point(11, 0, 10), Point(11, 0, 11)]
    TOUCHING = [Point(1, 0, 1), Point(1, 0, 10), Point(10, 0, 10)]
    OVERLAPPING = [Point(0.5, 0, 0.5), Point(0.5, 0, 10), Point(10, 0, 0.5)]

    def test_apart_is_visible(self):
        pol = Polygon(self.XZ_TRIANGLE)
        assert pol.is_completely_visible({Polygon(self.APART)})

    def test_touching_is_visible(self):
        pol = Polygon(self.XZ_TRIANGLE)
        assert pol.is_completely_visible({Polygon(self.TOUCHING)})

    def test_overlapping_is_not_visible(self):
        pol = Polygon(self.XZ_TRIANGLE)
        assert not pol.is_completely_visible({Polygon(self.OVERLAPPING)})
        assert pol.partially_or_totally_covered_by([Polygon(self.OVERLAPPING)])

    def test_one_of_several_overlapping(self):
        pol = Polygon(self.XZ_TRIANGLE)
        assert not pol.is_completely_visible({Polygon(self.APART), Polygon(self.OVERLAPPING)})

    def test_touching_in_slanted_plane_is_visible(self):
        pol = Polygon(on_slanted_plane(*self.XZ_TRIANGLE))
        assert pol.is_completely_visible([Polygon(on_slanted_plane(*self.TOUCHING))])

    def test_overlapping_in_slanted_plane_is_not_visible(self):
        pol = Polygon(on_slanted_plane(*self.XZ_TRIANGLE))
        assert not pol.is_completely_visible([Polygon(on_slanted_plane(*self.OVERLAPPING))])

    def test_overlaps(self):
        pol = Polygon(self.XZ_TRIANGLE)
        assert pol.overlaps(Polygon(self.OVERLAPPING))
        assert not pol.overlaps(Polygon(self.TOUCHING))

    def test_covered(self):
        pol = Polygon(self.XZ_TRIANGLE)
        big = Polygon([Point(-1, 0, -1), Point(5, 0, -1), Point(5, 0, 5), Point(-1, 0, 5)])
        assert pol.is_covered_by([big])
        assert pol.is_hidden_by([big])
        assert not pol.is_covered_by([Polygon(self.OVERLAPPING)])

    def test_covered_by_union_of_pieces(self):
        square = Polygon([Point(0, 0, 0), Point(2, 0, 0), Point(2, 2, 0), Point(0, 2, 0)])
        left = Polygon([Point(0, 0, 0), Point(1, 0, 0), Point(1, 2, 0), Point(0, 2, 0)])
        right = Polygon([Point(1, 0, 0), Point(2, 0, 0), Point(2, 2, 0), Point(1, 2, 0)])
        assert square.is_covered_by([left, right])
        assert not square.is_covered_by([left])

    def test_difference(self):
        square = Polygon([Point(0, 0, 0), Point(2, 0, 0), Point(2, 2, 0), Point(0, 2, 0)])
        left = Polygon([Point(0, 0, 0), Point(1, 0, 0), Point(1, 2, 0), Point(0, 2, 0)])
        remaining = square.difference([left])
        assert len(remaining) == 1
        assert remaining[0].has_same_point_structure(
            [Point(1, 0, 0), Point(2, 0, 0), Point(2, 2, 0), Point(1, 2, 0)]
        )


class TestPlaneCreationPoints:

    P_A = Point(-3, 2, 6)
    P_B = Point(4, 3, 7)
    P_C = Point(0, 1, -2)

    def plane(self):
        return plane_from_ordered_points(self.P_A, self.P_B, self.P_C)

    def test_convex_quadrilateral_gives_three_of_its_points(self):
        quadrilateral = [self.plane().closest_point(Point(-5, 0, -2)), self.P_A, self.P_B, self.P_C]
        creation_points = calculate_plane_creation_points(quadrilateral)
        assert len(creation_points) == 3
        assert all(p in quadrilateral for p in creation_points)

    def test_indentation_never_chosen(self):
        between_a_c = self.plane().closest_point(midpoint(midpoint(self.P_A, self.P_C), self.P_B))
        between_b_c = self.plane().closest_point(midpoint(midpoint(self.P_B, self.P_C), self.P_A))
        for quadrilateral, indentation in [
            ([between_a_c, self.P_A, self.P_B, self.P_C], between_a_c),
            ([self.P_B, self.P_C, between_a_c, self.P_A], between_a_c),
            ([self.P_C, between_b_c, self.P_B, self.P_A], between_b_c),
        ]:
            creation_points = calculate_plane_creation_points(quadrilateral)
            assert indentation not in creation_points
            assert all(p in creation_points for p in (self.P_A, self.P_B, self.P_C))

    def test_points_keep_polygon_order(self):
        between_a_c = self.plane().closest_point(midpoint(midpoint(self.P_A, self.P_C), self.P_B))
        creation_points = calculate_plane_creation_points([between_a_c, self.P_A, self.P_B, self.P_C])
        a, b, c = self.P_A, self.P_B, self.P_C
        assert creation_points in ([a, b, c], [b, c, a], [c, a, b])

    @staticmethod
    def square_with_bulging_sides(bulge=4e-14):
        """Unit square in z=0, counterclockwise, with three points per side pushed out by about ``bulge``.

        Each pushed point is a hull vertex, and most runs of three
        consecutive hull points are collinear within the package tolerance.
        """
        points = []
        for t in (0.0, 0.25, 0.5, 0.75):
            points.append(Point(t, -bulge * t * (1 - t), 0))
        for t in (0.0, 0.25, 0.5, 0.75):
            points.append(Point(1 + bulge * t * (1 - t), t, 0))
        for t in (0.0, 0.25, 0.5, 0.75):
            points.append(Point(1 - t, 1 + bulge * t * (1 - t), 0))
        for t in (0.0, 0.25, 0.5, 0.75):
            points.append(Point(-bulge * t * (1 - t), 1 - t, 0))
        return points

    def test_almost_collinear_hull_points_avoided(self):
        square = self.square_with_bulging_sides()
        creation_points = calculate_plane_creation_points(square)
        assert len(creation_points) == 3
        assert plane_from_ordered_points(creation_points).normal.z == pytest.approx(1.0)

    def test_polygon_with_almost_collinear_hull_points(self):
        square = self.square_with_bulging_sides()
        for start in range(len(square)):
            pol = Polygon(square[start:] + square[:start])
            assert pol.plane.normal.z == pytest.approx(1.0)
            assert pol.area() == pytest.approx(1.0)

    def test_ring_touching_itself_gives_distinct_points(self):
        # Square with a notch whose tip touches the boundary at the first corner
        ring = [
            Point(0, 0, 0), Point(4, 0, 0), Point(4, 4, 0), Point(0, 4, 0),
            Point(0, 0, 0), Point(1, 2, 0), Point(2, 1, 0),
        ]
        creation_points = calculate_plane_creation_points(ring)
        assert len(creation_points) == 3
        assert len({p.coordinates() for p in creation_points}) == 3

    def test_concave_polygon_normal_follows_vertex_order(self):
        # Boomerang with its reflex vertex first
        between_a_c = self.plane().closest_point(midpoint(midpoint(self.P_A, self.P_C), self.P_B))
        pol = Polygon([between_a_c, self.P_A, self.P_B, self.P_C])
        assert pol.plane.normal.dot(self.plane().normal) > 0


class TestIntersections:

    def test_segment_crossing_two_edges(self):
        square = Polygon([Point(0, 0, 0), Point(2, 0, 0), Point(2, 2, 0), Point(0, 2, 0)])
        crossings = square.intersections(LineSegment(Point(1, -1, 0), Point(1, 3, 0)))
        assert len(crossings) == 2
        assert any(p.epsilon_equals(Point(1, 0, 0)) for p in crossings)
        assert any(p.epsilon_equals(Point(1, 2, 0)) for p in crossings)

    def test_vertices_on_segment_counted_once(self):
        square = Polygon([Point(0, 0, 0), Point(2, 0, 0), Point(2, 2, 0), Point(0, 2, 0)])
        crossings = square.intersections(LineSegment(Point(-1, -1, 0), Point(3, 3, 0)))
        assert len(crossings) == 2
        assert square.vertices[0] in crossings
        assert square.vertices[2] in crossings

    def test_segment_apart(self):
        square = Polygon([Point(0, 0, 0), Point(2, 0, 0), Point(2, 2, 0), Point(0, 2, 0)])
        assert square.intersections(LineSegment(Point(5, 5, 0), Point(6, 6, 0))) == []


class TestModuleFunctions:

    def test_calculate_union_area(self):
        square = Polygon([Point(0, 0, 0), Point(2, 0, 0), Point(2, 2, 0), Point(0, 2, 0)])
        shifted = Polygon([Point(1, 0, 0), Point(3, 0, 0), Point(3, 2, 0), Point(1, 2, 0)])
        assert calculate_union_area([square, shifted]) == pytest.approx(6.0)

    def test_line_segment_difference_with_polygons(self):
        square = Polygon([Point(0, 0, 0), Point(2, 0, 0), Point(2, 2, 0), Point(0, 2, 0)])
        pieces = line_segment_difference_with_polygons(LineSegment(Point(-1, 1, 0), Point(1, 1, 0)), [square])
        assert len(pieces) == 1
        assert pieces[0].length() == pytest.approx(1.0)
