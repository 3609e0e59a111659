"""Tests for the geometry kernel."""

import pytest

from qix_engine.geometry import (
    closest_point_on_polygon,
    interior_point,
    is_clockwise,
    is_on_segment_set,
    is_simple_polygon,
    nearest_point_on_polygon,
    path_length,
    point_in_polygon,
    point_to_segment_distance,
    polygon_area,
    polygon_to_segments,
    segments_intersect,
    signed_area,
)
from qix_engine.models import Point, Segment

from conftest import RECT

U_SHAPE = (
    Point(0, 0), Point(30, 0), Point(30, 100), Point(70, 100),
    Point(70, 0), Point(100, 0), Point(100, 130), Point(0, 130),
)


# ---------------------------------------------------------------------------
# point_in_polygon
# ---------------------------------------------------------------------------

def test_point_in_polygon_inside_and_outside():
    assert point_in_polygon(Point(100, 100), RECT)
    assert not point_in_polygon(Point(10, 100), RECT)
    assert not point_in_polygon(Point(100, 200), RECT)


def test_point_in_polygon_concave_notch_is_outside():
    assert point_in_polygon(Point(15, 50), U_SHAPE)
    assert not point_in_polygon(Point(50, 50), U_SHAPE)
    assert point_in_polygon(Point(50, 120), U_SHAPE)


def test_point_on_shared_edge_belongs_to_at_most_one_polygon():
    left = (Point(20, 20), Point(60, 20), Point(60, 180), Point(20, 180))
    right = (Point(60, 20), Point(180, 20), Point(180, 180), Point(60, 180))
    on_edge = Point(60, 100)
    assert point_in_polygon(on_edge, left) + point_in_polygon(on_edge, right) == 1

    # Half-open in y: top edge counts as inside, bottom edge does not
    assert point_in_polygon(Point(100, 20), RECT)
    assert not point_in_polygon(Point(100, 180), RECT)


# ---------------------------------------------------------------------------
# Areas and winding
# ---------------------------------------------------------------------------

def test_polygon_area_rectangle_and_triangle():
    assert polygon_area(RECT) == pytest.approx(25600)
    assert polygon_area((Point(0, 0), Point(10, 0), Point(0, 10))) == pytest.approx(50)


def test_polygon_area_degenerate_is_zero():
    assert polygon_area(()) == 0
    assert polygon_area((Point(0, 0), Point(5, 5))) == 0


def test_winding_is_screen_clockwise():
    # (20,20) -> (180,20) -> (180,180) runs clockwise with Y pointing down
    assert is_clockwise(RECT)
    assert not is_clockwise(RECT[::-1])
    assert signed_area(RECT) == pytest.approx(-signed_area(RECT[::-1]))


# ---------------------------------------------------------------------------
# Distances and projections
# ---------------------------------------------------------------------------

def test_point_to_segment_distance_perpendicular_and_endpoint():
    seg = Segment(Point(0, 0), Point(10, 0))
    assert point_to_segment_distance(Point(5, 3), seg) == pytest.approx(3)
    assert point_to_segment_distance(Point(13, 4), seg) == pytest.approx(5)


def test_point_to_degenerate_segment_uses_endpoint():
    seg = Segment(Point(2, 2), Point(2, 2))
    assert point_to_segment_distance(Point(5, 6), seg) == pytest.approx(5)


def test_is_on_segment_set_respects_tolerance():
    edges = polygon_to_segments(RECT)
    assert is_on_segment_set(Point(100, 22), edges, 3)
    assert not is_on_segment_set(Point(100, 24), edges, 3)
    assert not is_on_segment_set(Point(100, 100), (), 3)


def test_nearest_point_on_polygon_projects_to_closest_edge():
    edge_index, t = nearest_point_on_polygon(Point(60, 185), RECT)
    assert edge_index == 2
    assert t == pytest.approx(0.75)


def test_nearest_point_on_polygon_ties_go_to_first_edge():
    # The corner is at distance 0 from edges 0 and 3
    assert nearest_point_on_polygon(Point(20, 20), RECT) == (0, 0.0)


def test_closest_point_on_polygon_snaps_onto_boundary():
    assert closest_point_on_polygon(Point(100, 176), RECT) == Point(100, 180)


def test_path_length():
    assert path_length((Point(0, 0), Point(3, 4), Point(3, 10))) == pytest.approx(11)


# ---------------------------------------------------------------------------
# Intersections
# ---------------------------------------------------------------------------

def test_segments_intersect_crossing():
    a = Segment(Point(0, 0), Point(10, 10))
    b = Segment(Point(0, 10), Point(10, 0))
    assert segments_intersect(a, b)


def test_segments_touching_at_endpoint_do_not_intersect():
    a = Segment(Point(0, 0), Point(10, 0))
    b = Segment(Point(10, 0), Point(10, 10))
    assert not segments_intersect(a, b)


def test_collinear_overlap_is_not_an_intersection():
    # Running exactly along an existing line is not treated as a crossing
    a = Segment(Point(0, 0), Point(10, 0))
    b = Segment(Point(5, 0), Point(15, 0))
    assert not segments_intersect(a, b)


def test_is_simple_polygon():
    assert is_simple_polygon(RECT)
    assert is_simple_polygon(U_SHAPE)
    bowtie = (Point(0, 0), Point(10, 10), Point(10, 0), Point(0, 10))
    assert not is_simple_polygon(bowtie)
    assert not is_simple_polygon((Point(0, 0), Point(1, 1)))


def test_interior_point_of_concave_polygon_is_inside():
    c_shape = (
        Point(0, 0), Point(100, 0), Point(100, 10), Point(10, 10),
        Point(10, 90), Point(100, 90), Point(100, 100), Point(0, 100),
    )
    assert point_in_polygon(interior_point(c_shape), c_shape)
    assert point_in_polygon(interior_point(RECT), RECT)
