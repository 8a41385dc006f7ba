import numpy as np
from loguru import logger
from numpy.typing import NDArray

from pydelaunay.delaunay import Triangulation
from pydelaunay.geometry import Aabb, Circle, aabb_circumcircle, circle_bounding_box
from pydelaunay.utils import COLLINEAR_EPS, EPS, Bbox

DEFAULT_BOUNDS: Bbox = (-1.0, -1.0, 1.0, 1.0)
# sentinels closer than this can sit inside the circumcircle of a hull triangle
DEFAULT_MARGIN = 1e4


def initialize_triangulation(
    bounds: Bbox = DEFAULT_BOUNDS,
    eps: float = EPS,
    collinear_eps: float = COLLINEAR_EPS,
    allow_collinear: bool = False,
) -> Triangulation:
    """
    Initialize the triangulation with the sentinel quad.

    The quad corners become points 0..3 (counterclockwise from the lower-left
    corner) and the quad is split into the triangles (0, 1, 2) and (0, 2, 3).

    :param bounds: (xmin, ymin, xmax, ymax) of the sentinel quad. Every point
        inserted later must lie strictly inside it.
    :param eps: absolute tolerance used to detect duplicate points
    :param collinear_eps: relative tolerance used to detect collinear points
    :param allow_collinear: accept points collinear with two user points
    :return: a triangulation without user points
    """
    xmin, ymin, xmax, ymax = (float(v) for v in bounds)
    if not (xmin < xmax and ymin < ymax):
        raise ValueError(f"Invalid sentinel bounds {bounds}")

    sentinels = np.array(
        [
            [xmin, ymin],
            [xmax, ymin],
            [xmax, ymax],
            [xmin, ymax],
        ]
    )
    logger.debug(f"Initializing triangulation with sentinel bounds {bounds}")
    return Triangulation(
        all_points=sentinels,
        triangles={(0, 1, 2), (0, 2, 3)},
        eps=eps,
        collinear_eps=collinear_eps,
        allow_collinear=allow_collinear,
    )


def sentinel_bounds(
    points: NDArray[np.floating], margin: float = DEFAULT_MARGIN
) -> Bbox:
    """
    Square sentinel bounds enclosing all points with room to spare.

    Takes the circle through the corners of the points' bounding box, scales
    its radius by ``margin`` and returns the bounding box of that circle.
    With the default margin the sentinels stay out of the circumcircles of
    the hull triangles unless an inner point lies almost on a hull edge, so
    the exported triangles cover the convex hull of the points.

    :param points: array of shape (n, 2)
    :param margin: radius scale factor, must be > 1
    """
    points = np.asarray(points, dtype=float)
    if points.ndim != 2 or points.shape[1] != 2 or len(points) == 0:
        raise ValueError(f"Expected a non-empty array of shape (n, 2), got {points.shape}")
    if margin <= 1.0:
        raise ValueError(f"Margin must be greater than 1, got {margin}")

    box = Aabb(
        (float(points[:, 0].min()), float(points[:, 1].min())),
        (float(points[:, 0].max()), float(points[:, 1].max())),
    )
    circle = aabb_circumcircle(box)
    # a single point (or a degenerate box) still needs a quad of positive size
    radius = max(circle.radius, 1.0) * margin
    return circle_bounding_box(Circle(circle.center, radius)).as_bbox()


def update_triangulation(
    triangulation: Triangulation, points: NDArray[np.floating]
) -> Triangulation:
    """
    Insert a batch of points into an existing triangulation, in order.

    Insertion stops at the first point that is rejected; the points before it
    stay inserted.
    """
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    for x, y in points:
        triangulation.insert(x, y)
    logger.debug(
        f"Inserted {len(points)} points: {triangulation.point_count} points, "
        f"{triangulation.triangle_count} triangles"
    )
    return triangulation


def triangulate(
    points: NDArray[np.floating],
    margin: float = DEFAULT_MARGIN,
    bounds: Bbox | None = None,
    allow_collinear: bool = False,
) -> Triangulation:
    """
    Delaunay triangulation of a point set by incremental insertion.

    Points are inserted in the given order, so user point ``i`` of the result
    is ``points[i]`` and ``export_indices()`` indexes straight into ``points``.

    :param points: Input points, array of shape (n, 2)
    :param margin: sentinel quad size relative to the points' extent
    :param bounds: explicit sentinel bounds, overrides ``margin``
    :param allow_collinear: accept points collinear with two user points
    :return: the triangulation
    """
    points = np.asarray(points, dtype=float)
    if bounds is None:
        bounds = sentinel_bounds(points, margin=margin)

    triangulation = initialize_triangulation(bounds, allow_collinear=allow_collinear)
    return update_triangulation(triangulation, points)
