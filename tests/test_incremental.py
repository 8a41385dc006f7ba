"""Tests for incremental point insertion (Triangulation.insert)."""

import numpy as np
import pytest
from loguru import logger

from pydelaunay.build import initialize_triangulation
from pydelaunay.errors import (
    DegenerateGeometryError,
    OutOfBoundsError,
    TriangulationError,
)
from pydelaunay.query import is_delaunay


def test_initial_triangulation():
    tri = initialize_triangulation((-300, -300, 300, 300))

    assert tri.point_count == 0
    assert tri.triangle_count == 0
    assert tri.triangles == {(0, 1, 2), (0, 2, 3)}
    assert len(tri.export_indices()) == 0


def test_first_point_splits_quad_into_four():
    tri = initialize_triangulation((-300, -300, 300, 300))

    assert tri.insert(0.0, 0.0) == 0

    # the point lies on the diagonal, so both initial triangles are destroyed
    assert tri.triangles == {(0, 1, 4), (1, 2, 4), (2, 3, 4), (0, 3, 4)}
    assert is_delaunay(tri)
    cavity = tri.find_cavity((1.0, 1.0))
    assert cavity.doomed
    assert cavity.is_simply_connected()


def test_second_point_keeps_delaunay_property():
    tri = initialize_triangulation((-300, -300, 300, 300))
    tri.insert(0.0, 0.0)

    assert tri.insert(100.0, 100.0) == 1

    assert tri.point_count == 2
    assert len(tri.triangles) == 6
    assert is_delaunay(tri)
    # neither user point is left without a triangle
    used = {pid for triangle in tri.triangles for pid in triangle}
    assert {4, 5} <= used


def test_find_cavity_does_not_modify():
    tri = initialize_triangulation((-10, -10, 10, 10))
    tri.insert(1.0, 2.0)
    before = set(tri.triangles)

    tri.find_cavity((3.0, -1.0))

    assert tri.triangles == before
    assert tri.point_count == 1


def test_triangle_count_follows_euler_formula():
    # with the sentinel quad as convex hull, T = 2 * (n + 4) - 4 - 2
    rng = np.random.default_rng(3)
    tri = initialize_triangulation((-1, -1, 1, 1))
    for n, (x, y) in enumerate(rng.uniform(-0.9, 0.9, size=(25, 2)), start=1):
        tri.insert(x, y)
        assert len(tri.triangles) == 2 * n + 2


def test_insert_logs_at_debug_level():
    tri = initialize_triangulation()
    messages = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{message}")
    try:
        tri.insert(0.25, 0.5)
    finally:
        logger.remove(handler_id)

    assert any("Inserted point 0" in message for message in messages)


class TestDegenerateInsertions:
    """Rejected insertions raise and leave the triangulation untouched."""

    def test_three_collinear_points(self):
        tri = initialize_triangulation((-300, -300, 300, 300))
        tri.insert(0.0, 0.0)
        tri.insert(1.0, 0.0)
        points_before = tri.all_points.copy()
        triangles_before = set(tri.triangles)

        with pytest.raises(DegenerateGeometryError):
            tri.insert(2.0, 0.0)

        assert tri.point_count == 2
        np.testing.assert_array_equal(tri.all_points, points_before)
        assert tri.triangles == triangles_before

    def test_point_on_user_edge(self):
        tri = initialize_triangulation((-10, -10, 10, 10))
        tri.insert(0.0, 0.0)
        tri.insert(2.0, 2.0)

        with pytest.raises(DegenerateGeometryError):
            tri.insert(1.0, 1.0)

    def test_collinear_check_is_local_to_the_cavity(self):
        tri = initialize_triangulation((-100, -100, 100, 100))
        tri.insert(0.0, 0.0)
        tri.insert(1.0, 0.0)
        # a ring of radius 3 around both points, with no ring point on the x-axis
        for angle in np.radians(np.arange(10.0, 360.0, 40.0)):
            tri.insert(3.0 * np.cos(angle), 3.0 * np.sin(angle))

        # on the line of edge (0, 1), but the ring keeps the cavity away from it
        cavity = tri.find_cavity((10.0, 0.0))
        assert cavity.vertices.isdisjoint({4, 5})

        assert tri.insert(10.0, 0.0) == 11
        assert tri.point_count == 12
        assert is_delaunay(tri)

    def test_collinear_points_allowed_on_request(self):
        tri = initialize_triangulation((-300, -300, 300, 300), allow_collinear=True)
        for x in (0.0, 1.0, 2.0):
            tri.insert(x, 0.0)

        assert tri.point_count == 3
        # three collinear points do not span a triangle
        assert tri.triangle_count == 0
        assert len(tri.export_indices()) == 0
        assert is_delaunay(tri)

    def test_duplicate_point(self):
        tri = initialize_triangulation()
        tri.insert(0.5, 0.5)
        triangles_before = set(tri.triangles)

        with pytest.raises(DegenerateGeometryError):
            tri.insert(0.5, 0.5)
        with pytest.raises(DegenerateGeometryError):
            tri.insert(0.5 + 1e-12, 0.5)

        assert tri.point_count == 1
        assert tri.triangles == triangles_before

    @pytest.mark.parametrize(
        "point",
        [
            (2.0, 0.0),
            (0.0, -1.5),
            (1.0, 0.0),  # on the quad boundary
            (-1.0, -1.0),  # a sentinel corner
            (float("nan"), 0.0),
            (float("inf"), 0.0),
        ],
    )
    def test_out_of_bounds(self, point):
        tri = initialize_triangulation()
        tri.insert(0.1, 0.2)

        with pytest.raises(OutOfBoundsError):
            tri.insert(*point)

        assert tri.point_count == 1

    def test_error_hierarchy(self):
        assert issubclass(DegenerateGeometryError, TriangulationError)
        assert issubclass(OutOfBoundsError, TriangulationError)
        assert issubclass(OutOfBoundsError, ValueError)

    def test_recovers_after_rejection(self):
        tri = initialize_triangulation()
        tri.insert(0.0, 0.0)
        with pytest.raises(OutOfBoundsError):
            tri.insert(5.0, 5.0)

        assert tri.insert(0.5, -0.25) == 1
        assert is_delaunay(tri)


def test_all_points_are_read_only():
    tri = initialize_triangulation()
    tri.insert(0.1, 0.1)

    with pytest.raises(ValueError):
        tri.all_points[4, 0] = 0.3
