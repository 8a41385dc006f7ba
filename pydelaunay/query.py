"""Query functions for triangulation structures."""

from loguru import logger

from pydelaunay.delaunay import Triangulation
from pydelaunay.geometry import (
    Aabb,
    Circle,
    bounding_box,
    circumcircle,
    point_in_circumcircle,
    point_in_triangle,
    signed_area,
)
from pydelaunay.topology import find_shared_edge
from pydelaunay.utils import SENTINEL_COUNT, TriangleKey, Vec2d


def _triangles(
    triangulation: Triangulation, include_sentinels: bool
) -> list[TriangleKey]:
    if include_sentinels:
        return list(triangulation.triangles)
    return [t for t in triangulation.triangles if not triangulation.is_sentinel(t[0])]


def find_containing_triangle(
    triangulation: Triangulation,
    point: Vec2d,
    include_sentinels: bool = False,
) -> TriangleKey | None:
    """
    Find a triangle containing a point (edges and vertices included).

    A linear scan over the working set; there is no point location structure.

    Parameters
    ----------
    triangulation : Triangulation
        The triangulation to search
    point : Vec2d
        The query point
    include_sentinels : bool
        Whether triangles touching the sentinel quad are candidates

    Returns
    -------
    TriangleKey | None
        Key of a containing triangle (ids into ``all_points``), or None if the
        point is outside every candidate triangle.
    """
    for triangle in _triangles(triangulation, include_sentinels):
        if point_in_triangle(triangulation.triangle_points(triangle), point):
            return triangle
    return None


def adjacent_triangles(
    triangulation: Triangulation, triangle: TriangleKey
) -> list[TriangleKey]:
    """Triangles of the working set sharing an edge with ``triangle``."""
    return [
        other
        for other in triangulation.triangles
        if other != triangle and find_shared_edge(triangle, other) is not None
    ]


def circumcircles(
    triangulation: Triangulation, include_sentinels: bool = False
) -> dict[TriangleKey, Circle]:
    return {
        triangle: circumcircle(triangulation.triangle_points(triangle))
        for triangle in _triangles(triangulation, include_sentinels)
    }


def triangles_in_box(
    triangulation: Triangulation,
    box: Aabb,
    include_sentinels: bool = False,
) -> list[TriangleKey]:
    """Triangles whose bounding box overlaps ``box``."""
    return [
        triangle
        for triangle in _triangles(triangulation, include_sentinels)
        if bounding_box(triangulation.triangle_points(triangle)).intersects(box)
    ]


def delaunay_violations(
    triangulation: Triangulation,
) -> list[tuple[TriangleKey, int]]:
    """
    Brute force check of the Delaunay property, O(T * N).

    Returns every (triangle, point id) pair where the point lies strictly
    inside the triangle's circumcircle. Sentinel triangles and points are
    checked too.
    """
    violations = []
    for triangle in triangulation.triangles:
        pts = triangulation.triangle_points(triangle)
        for pid, point in enumerate(triangulation.all_points):
            if pid in triangle:
                continue
            if point_in_circumcircle(pts, point):
                violations.append((triangle, pid))
    if violations:
        logger.debug(f"Found {len(violations)} Delaunay violations")
    return violations


def is_delaunay(triangulation: Triangulation) -> bool:
    return not delaunay_violations(triangulation)


def triangulated_area(triangulation: Triangulation) -> float:
    """Total area of the triangles that do not touch a sentinel."""
    return sum(
        abs(signed_area(triangulation.triangle_points(triangle)))
        for triangle in _triangles(triangulation, include_sentinels=False)
    )


def user_triangle(triangle: TriangleKey) -> TriangleKey:
    """Translate a working-set key into indices of the caller's point buffer."""
    if triangle[0] < SENTINEL_COUNT:
        raise ValueError(f"Triangle {triangle} references a sentinel point")
    a, b, c = triangle
    return a - SENTINEL_COUNT, b - SENTINEL_COUNT, c - SENTINEL_COUNT
