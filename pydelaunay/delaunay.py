from dataclasses import dataclass, field

import numpy as np
from loguru import logger
from numpy.typing import NDArray

from pydelaunay.errors import DegenerateGeometryError, OutOfBoundsError
from pydelaunay.geometry import (
    Aabb,
    circumcircle,
    ensure_ccw_triangle,
    is_collinear,
    point_in_circumcircle,
)
from pydelaunay.topology import Cavity, fan_triangles, triangle_edges
from pydelaunay.utils import COLLINEAR_EPS, EPS, SENTINEL_COUNT, TriangleKey, Vec2d


def _read_only(points: NDArray[np.floating]) -> NDArray[np.floating]:
    points.flags.writeable = False
    return points


@dataclass
class Triangulation:
    """
    Incremental Delaunay triangulation (Bowyer-Watson).

    The first four entries of ``all_points`` are the sentinel corners of the
    bounding quad, listed counterclockwise from the lower-left one. Every
    point inserted afterwards must lie strictly inside that quad.

    Not thread-safe: calls on one instance must be serialized by the caller.
    """

    all_points: NDArray[np.floating]
    triangles: set[TriangleKey] = field(default_factory=set)
    eps: float = EPS
    collinear_eps: float = COLLINEAR_EPS
    allow_collinear: bool = False
    bounds: Aabb = field(init=False)

    def __post_init__(self) -> None:
        self.all_points = _read_only(np.array(self.all_points, dtype=float))
        if self.all_points.shape[0] < SENTINEL_COUNT or self.all_points.shape[1:] != (
            2,
        ):
            raise ValueError(
                f"Expected at least {SENTINEL_COUNT} points of shape (n, 2), got {self.all_points.shape}"
            )
        sentinels = self.all_points[:SENTINEL_COUNT]
        self.bounds = Aabb(
            (float(sentinels[:, 0].min()), float(sentinels[:, 1].min())),
            (float(sentinels[:, 0].max()), float(sentinels[:, 1].max())),
        )

    # --- introspection -------------------------------------------------

    @property
    def point_count(self) -> int:
        """Number of user points (sentinels excluded)."""
        return len(self.all_points) - SENTINEL_COUNT

    @property
    def triangle_count(self) -> int:
        """Number of triangles that do not touch a sentinel."""
        return sum(1 for t in self.triangles if not self.is_sentinel(t[0]))

    @property
    def user_points(self) -> NDArray[np.floating]:
        return self.all_points[SENTINEL_COUNT:]

    @staticmethod
    def is_sentinel(pid: int) -> bool:
        return pid < SENTINEL_COUNT

    def triangle_points(self, triangle: TriangleKey) -> NDArray[np.floating]:
        return self.all_points[list(triangle)]

    # --- insertion -----------------------------------------------------

    def find_cavity(self, point: Vec2d) -> Cavity:
        """
        Collect the triangles whose circumcircle strictly contains ``point``.

        Read-only: the triangulation is not modified.
        """
        cavity = Cavity()
        for triangle in self.triangles:
            if point_in_circumcircle(self.triangle_points(triangle), point):
                logger.trace(f"Triangle {triangle} contains {point} in its circumcircle")
                cavity.add(triangle)
        return cavity

    def _check_duplicate(self, point: tuple[float, float]) -> None:
        if self.point_count == 0:
            return
        close = np.all(np.abs(self.user_points - point) <= self.eps, axis=1)
        if np.any(close):
            existing = int(np.argmax(close))
            raise DegenerateGeometryError(
                f"Point {point} duplicates point {existing} {tuple(self.user_points[existing])}"
            )

    def _check_cavity(self, cavity: Cavity, point: tuple[float, float]) -> None:
        if not cavity.doomed:
            raise DegenerateGeometryError(f"No triangle circumcircle contains {point}")

        if not cavity.is_simply_connected():
            raise DegenerateGeometryError(
                f"Cavity of {point} is not star-shaped: {len(cavity.doomed)} triangles, "
                f"{len(cavity.boundary)} boundary edges"
            )

        for a, b in cavity.boundary:
            if is_collinear(
                self.all_points[a], self.all_points[b], point, self.collinear_eps
            ):
                raise DegenerateGeometryError(
                    f"Point {point} is collinear with cavity edge {(a, b)}"
                )

        if self.allow_collinear:
            return

        # A new point on the line of an edge between two user points, next to
        # the cavity, leaves the user points without a proper triangle there.
        cavity_vertices = {pid for pid in cavity.vertices if not self.is_sentinel(pid)}
        if not cavity_vertices:
            return
        for triangle in self.triangles:
            if cavity_vertices.isdisjoint(triangle):
                continue
            for a, b in triangle_edges(triangle):
                if self.is_sentinel(a) or self.is_sentinel(b):
                    continue
                if a not in cavity_vertices and b not in cavity_vertices:
                    continue
                if is_collinear(
                    self.all_points[a], self.all_points[b], point, self.collinear_eps
                ):
                    raise DegenerateGeometryError(
                        f"Point {point} is collinear with points {a - SENTINEL_COUNT} "
                        f"and {b - SENTINEL_COUNT}"
                    )

    def insert(self, x: float, y: float) -> int:
        """
        Insert a point and restore the Delaunay property.

        The triangulation is only modified once the insertion is known to be
        valid, so a raised error leaves it exactly as it was.

        Unless ``allow_collinear`` is set, the point is rejected when it lies
        on the line of an edge between two user points where that edge has an
        endpoint on the point's cavity. This covers a point placed on a user
        edge (e.g. the centre of a triangulated square) and a third point
        extending a user edge next to it. The check is local: a point on the
        line of a user edge that is shielded from the point by other points
        is accepted, since no triangle of that edge is touched.

        :param x: x coordinate, strictly inside the sentinel quad
        :param y: y coordinate, strictly inside the sentinel quad
        :return: index of the new point among the user points
        :raises OutOfBoundsError: if the point is not strictly inside the quad
        :raises DegenerateGeometryError: for duplicate or collinear points
        """
        point = (float(x), float(y))
        if not self.bounds.contains(point, strict=True):
            raise OutOfBoundsError(
                f"Point {point} is outside the sentinel bounds {self.bounds.as_bbox()}"
            )
        self._check_duplicate(point)

        cavity = self.find_cavity(point)
        self._check_cavity(cavity, point)

        pid = len(self.all_points)
        new_triangles = fan_triangles(cavity.boundary, pid)

        self.all_points = _read_only(np.vstack((self.all_points, [point])))
        self.triangles.difference_update(cavity.doomed)
        self.triangles.update(new_triangles)

        logger.debug(
            f"Inserted point {pid - SENTINEL_COUNT} {point}: removed {len(cavity.doomed)} triangles, "
            f"added {len(new_triangles)}"
        )
        return pid - SENTINEL_COUNT

    # --- export --------------------------------------------------------

    def export_triangles(self, ccw: bool = False) -> NDArray[np.uint32]:
        """
        Triangles that do not touch a sentinel, as rows of user point indices.

        :param ccw: reorder every row counterclockwise instead of ascending
        :return: array of shape (k, 3)
        """
        rows = [t for t in self.triangles if not self.is_sentinel(t[0])]
        if not rows:
            return np.empty((0, 3), dtype=np.uint32)
        triangles = np.array(rows, dtype=np.int64) - SENTINEL_COUNT
        if ccw:
            triangles = np.array(
                [ensure_ccw_triangle(row, self.user_points) for row in triangles]
            )
        return triangles.astype(np.uint32)

    def export_indices(self, ccw: bool = False) -> NDArray[np.uint32]:
        """
        Flat index buffer (three indices per triangle) into the user points.

        Sentinel triangles are dropped and index 0 is the first inserted point.
        The order of the triangles is unspecified.
        """
        return self.export_triangles(ccw=ccw).reshape(-1)

    # --- debugging -----------------------------------------------------

    def plot(
        self,
        show: bool = False,
        title: str = "Triangulation",
        point_labels: bool = False,
        exclude_sentinels: bool = True,
        circumcircles: bool = False,
        fontsize: int = 7,
    ):
        """
        Plot the triangulation using matplotlib.

        :param show: Whether to call plt.show() after plotting
        :param title: Title of the plot
        :param point_labels: Whether to label points with their user indices
        :param exclude_sentinels: Whether to hide triangles touching the sentinel quad
        :param circumcircles: Whether to draw the circumcircle of every triangle drawn
        :param fontsize: Font size for labels
        :return: the matplotlib figure
        """
        import matplotlib.pyplot as plt
        from matplotlib.patches import Circle as CirclePatch

        fig, ax = plt.subplots()

        if exclude_sentinels:
            triangles = [t for t in self.triangles if not self.is_sentinel(t[0])]
            points = self.user_points
        else:
            triangles = list(self.triangles)
            points = self.all_points

        for triangle in triangles:
            pts = self.triangle_points(triangle)
            tri_closed = np.vstack([pts, pts[0]])  # Close the triangle
            ax.plot(tri_closed[:, 0], tri_closed[:, 1], "b-", linewidth=1.0, alpha=0.6)

            if circumcircles:
                circle = circumcircle(pts)
                ax.add_patch(
                    CirclePatch(
                        circle.center,
                        circle.radius,
                        fill=False,
                        color="red",
                        linestyle="--",
                        linewidth=0.5,
                    )
                )

        if len(points):
            ax.plot(points[:, 0], points[:, 1], "ko", markersize=3, zorder=11)

        if point_labels:
            offset = 0.01 * max(
                self.bounds.max[0] - self.bounds.min[0],
                self.bounds.max[1] - self.bounds.min[1],
            )
            for idx, (x, y) in enumerate(self.user_points):
                ax.text(
                    x + offset,
                    y + offset,
                    str(idx),
                    fontsize=fontsize,
                    ha="left",
                    va="bottom",
                    color="darkgreen",
                )

        ax.set_aspect("equal")
        ax.set_title(f"{title} ({self.point_count} points, {self.triangle_count} triangles)")

        if show:
            plt.show()
        return fig
