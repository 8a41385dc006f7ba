from collections import Counter
from dataclasses import dataclass, field

from pydelaunay.utils import Edge, TriangleKey


def canonical_triangle(pid0: int, pid1: int, pid2: int) -> TriangleKey:
    """Sorted id triple, so that the same three points always give the same key."""
    if len({pid0, pid1, pid2}) != 3:
        raise ValueError(f"Triangle ids must be distinct, got {(pid0, pid1, pid2)}")
    a, b, c = sorted((int(pid0), int(pid1), int(pid2)))
    return a, b, c


def canonical_edge(pid0: int, pid1: int) -> Edge:
    pid0, pid1 = int(pid0), int(pid1)
    return (pid0, pid1) if pid0 < pid1 else (pid1, pid0)


def triangle_edges(triangle: TriangleKey) -> tuple[Edge, Edge, Edge]:
    # keys are sorted, so each pair is already canonical
    a, b, c = triangle
    return (a, b), (b, c), (a, c)


def find_shared_edge(tri1: TriangleKey, tri2: TriangleKey) -> Edge | None:
    """
    Return the edge shared by two triangles, or None if they are not adjacent.
    """
    shared = set(tri1) & set(tri2)
    if len(shared) != 2:
        return None
    return canonical_edge(*shared)


@dataclass
class Cavity:
    """
    Triangles destroyed by an insertion and the boundary of the hole they leave.

    Attributes
    ----------
    doomed : list[TriangleKey]
        Triangles whose circumcircle strictly contains the new point
    edge_counts : Counter
        How many doomed triangles use each edge. Boundary edges are used once,
        interior edges twice.
    """

    doomed: list[TriangleKey] = field(default_factory=list)
    edge_counts: Counter = field(default_factory=Counter)

    def add(self, triangle: TriangleKey) -> None:
        self.doomed.append(triangle)
        self.edge_counts.update(triangle_edges(triangle))

    @property
    def boundary(self) -> list[Edge]:
        return [edge for edge, count in self.edge_counts.items() if count == 1]

    @property
    def vertices(self) -> set[int]:
        return {pid for triangle in self.doomed for pid in triangle}

    def is_simply_connected(self) -> bool:
        """
        A triangulated polygon with every vertex on its boundary has exactly
        two more boundary edges than triangles.
        """
        if any(count > 2 for count in self.edge_counts.values()):
            return False
        return len(self.boundary) == len(self.doomed) + 2


def fan_triangles(boundary: list[Edge], pid: int) -> list[TriangleKey]:
    """Connect a new point to every boundary edge of a cavity."""
    return [canonical_triangle(a, b, pid) for a, b in boundary]
