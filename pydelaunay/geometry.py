import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from shewchuk import incircle_test, orientation

from pydelaunay.errors import DegenerateGeometryError
from pydelaunay.utils import COLLINEAR_EPS, Vec2d, Triangle


@dataclass(frozen=True)
class Circle:
    center: tuple[float, float]
    radius: float


@dataclass(frozen=True)
class Aabb:
    min: tuple[float, float]
    max: tuple[float, float]

    @classmethod
    def from_bbox(cls, bbox: tuple[float, float, float, float]) -> "Aabb":
        xmin, ymin, xmax, ymax = bbox
        return cls((float(xmin), float(ymin)), (float(xmax), float(ymax)))

    def as_bbox(self) -> tuple[float, float, float, float]:
        return self.min[0], self.min[1], self.max[0], self.max[1]

    def contains(self, p: Vec2d, strict: bool = False) -> bool:
        x, y = p
        if strict:
            return self.min[0] < x < self.max[0] and self.min[1] < y < self.max[1]
        return self.min[0] <= x <= self.max[0] and self.min[1] <= y <= self.max[1]

    def intersects(self, other: "Aabb") -> bool:
        return (
            self.min[0] <= other.max[0]
            and other.min[0] <= self.max[0]
            and self.min[1] <= other.max[1]
            and other.min[1] <= self.max[1]
        )


def _xy(p: Vec2d) -> tuple[float, float]:
    return float(p[0]), float(p[1])


def _edge_basis(triangle: Triangle) -> tuple[tuple[float, float], ...]:
    a, b, c = (_xy(v) for v in triangle)
    edge1 = (b[0] - a[0], b[1] - a[1])
    edge2 = (c[0] - a[0], c[1] - a[1])
    return a, edge1, edge2


def _check_not_degenerate(triangle: Triangle) -> None:
    a, b, c = (_xy(v) for v in triangle)
    if orientation(*a, *b, *c) == 0:
        raise DegenerateGeometryError(f"Collinear triangle {a}, {b}, {c}")


def orient2d(pa: Vec2d, pb: Vec2d, pc: Vec2d) -> float:
    """
    Floating point 2D orientation.
    Returns > 0 if points are in counterclockwise order
    Returns < 0 if points are in clockwise order
    Returns = 0 if points are collinear

    The magnitude is twice the signed area of the triangle. Use
    `shewchuk.orientation` when only the exact sign matters.
    """
    detleft = (pa[0] - pc[0]) * (pb[1] - pc[1])
    detright = (pa[1] - pc[1]) * (pb[0] - pc[0])
    det = detleft - detright
    return float(det)


def signed_area(triangle: Triangle) -> float:
    a, b, c = triangle
    return 0.5 * orient2d(a, b, c)


def ensure_ccw_triangle(vertices: NDArray, points: NDArray) -> NDArray:
    """Ensure triangle vertices are in counterclockwise order"""
    p0, p1, p2 = points[vertices]
    if orient2d(p0, p1, p2) < 0:
        # Swap vertices to make counterclockwise
        return np.array([vertices[0], vertices[2], vertices[1]])
    return np.asarray(vertices)


def is_collinear(a: Vec2d, b: Vec2d, c: Vec2d, eps: float = COLLINEAR_EPS) -> bool:
    """
    Check whether c lies on the line through a and b.

    Exact collinearity is decided by Shewchuk's adaptive predicate. Nearly
    collinear triples are caught by comparing the cross product against
    ``eps * |b - a| * |c - a|``, i.e. the sine of the angle at ``a``.
    """
    a, b, c = _xy(a), _xy(b), _xy(c)
    if orientation(*a, *b, *c) == 0:
        return True
    ab = math.hypot(b[0] - a[0], b[1] - a[1])
    ac = math.hypot(c[0] - a[0], c[1] - a[1])
    cross = (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])
    return abs(cross) <= eps * ab * ac


def circumcircle(triangle: Triangle) -> Circle:
    """
    Circle through the three vertices of a triangle.

    Parameters
    ----------
    triangle : Triangle
        Three vertices, as tuples or an array of shape (3, 2).

    Returns
    -------
    Circle
        Center and radius of the circumscribed circle.

    Raises
    ------
    DegenerateGeometryError
        If the vertices are collinear (the circle does not exist).
    """
    _check_not_degenerate(triangle)
    origin, edge1, edge2 = _edge_basis(triangle)

    d = 2.0 * (edge1[0] * edge2[1] - edge1[1] * edge2[0])
    sqnorm_edge1 = edge1[0] * edge1[0] + edge1[1] * edge1[1]
    sqnorm_edge2 = edge2[0] * edge2[0] + edge2[1] * edge2[1]
    cx = (edge2[1] * sqnorm_edge1 - edge1[1] * sqnorm_edge2) / d
    cy = (edge1[0] * sqnorm_edge2 - edge2[0] * sqnorm_edge1) / d
    return Circle(
        center=(cx + origin[0], cy + origin[1]),
        radius=math.hypot(cx, cy),
    )


def point_in_triangle(triangle: Triangle, point: Vec2d) -> bool:
    """
    Barycentric inside test. Points on an edge or vertex count as inside.

    Raises DegenerateGeometryError for a zero-area triangle.
    """
    _check_not_degenerate(triangle)
    origin, edge1, edge2 = _edge_basis(triangle)
    px, py = _xy(point)
    tp = (px - origin[0], py - origin[1])

    d = edge1[0] * edge2[1] - edge1[1] * edge2[0]
    u = (edge2[1] * tp[0] - edge2[0] * tp[1]) / d
    v = (edge1[0] * tp[1] - edge1[1] * tp[0]) / d
    return u >= 0.0 and v >= 0.0 and u + v <= 1.0


def point_in_circumcircle(triangle: Triangle, point: Vec2d) -> bool:
    """
    Check whether a point lies strictly inside the circumcircle of a triangle.

    The incircle determinant is scaled by the sign of the triangle's area, so
    the answer does not depend on the vertex order. Both signs come from
    Shewchuk's exact predicates. A point on the circle is not inside.

    Parameters
    ----------
    triangle : Triangle
        Three vertices, as tuples or an array of shape (3, 2).
    point : Vec2d
        The query point.

    Returns
    -------
    bool
        True if the point is strictly inside the circumcircle.

    Raises
    ------
    DegenerateGeometryError
        If the triangle vertices are collinear.
    """
    a, b, c = (_xy(v) for v in triangle)
    d = orientation(*a, *b, *c)
    if d == 0:
        raise DegenerateGeometryError(f"Collinear triangle {a}, {b}, {c}")
    det = incircle_test(*_xy(point), *a, *b, *c)
    return d * det > 0


def bounding_box(triangle: Triangle) -> Aabb:
    xs, ys = zip(*(_xy(v) for v in triangle))
    return Aabb((min(xs), min(ys)), (max(xs), max(ys)))


def circle_bounding_box(circle: Circle) -> Aabb:
    cx, cy = circle.center
    r = circle.radius
    return Aabb((cx - r, cy - r), (cx + r, cy + r))


def aabb_circumcircle(box: Aabb) -> Circle:
    """Circle through the four corners of a box."""
    rx = 0.5 * (box.max[0] - box.min[0])
    ry = 0.5 * (box.max[1] - box.min[1])
    return Circle(
        center=(0.5 * (box.min[0] + box.max[0]), 0.5 * (box.min[1] + box.max[1])),
        radius=math.hypot(rx, ry),
    )
