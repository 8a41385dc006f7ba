"""Example: feed a renderer with an index buffer.

A renderer keeps its own vertex buffer (the points it supplied, in order) and
only needs triangle indices back. ``export_indices`` returns a flat uint32
array that can be uploaded as an element buffer as-is.
"""

import numpy as np

from pydelaunay.build import triangulate


def main() -> None:
    rng = np.random.default_rng(42)

    # renderer side: the vertex buffer, including the screen corners
    aspect = 16 / 9
    corners = np.array([[0.0, 0.0], [aspect, 0.0], [aspect, 1.0], [0.0, 1.0]])
    vertices = np.vstack([corners, rng.uniform([0, 0], [aspect, 1], size=(200, 2))])

    tri = triangulate(vertices)
    elements = tri.export_indices(ccw=True)

    print(f"{len(vertices)} vertices, {len(elements) // 3} triangles")
    print(f"element buffer: dtype={elements.dtype}, first triangles={elements[:9]}")

    # every triple indexes straight into the renderer's vertex buffer
    triangles = vertices[elements.reshape(-1, 3)]
    areas = 0.5 * np.abs(
        (triangles[:, 1, 0] - triangles[:, 0, 0]) * (triangles[:, 2, 1] - triangles[:, 0, 1])
        - (triangles[:, 1, 1] - triangles[:, 0, 1]) * (triangles[:, 2, 0] - triangles[:, 0, 0])
    )
    print(f"covered area: {areas.sum():.6f} (screen area {aspect:.6f})")


if __name__ == "__main__":
    main()
