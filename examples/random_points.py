"""Example: grow a triangulation of random points in batches.

Points are drawn uniformly from [-2, 2]^2 and inserted into a triangulation
whose sentinel quad spans [-3, 3]^2. After every batch the triangulation is
checked and plotted.
"""

import sys

import numpy as np
from loguru import logger

from pydelaunay.build import initialize_triangulation, update_triangulation
from pydelaunay.errors import DegenerateGeometryError
from pydelaunay.query import is_delaunay


def main(batches: int = 3, batch_size: int = 100, seed: int = 0) -> None:
    logger.remove()
    logger.add(sys.stderr, level="INFO")

    rng = np.random.default_rng(seed)
    tri = initialize_triangulation((-3.0, -3.0, 3.0, 3.0))

    for batch in range(batches):
        for x, y in rng.uniform(-2.0, 2.0, size=(batch_size, 2)):
            try:
                tri.insert(x, y)
            except DegenerateGeometryError as e:
                logger.warning(f"Skipping point: {e}")
        logger.info(
            f"Batch {batch + 1}: {tri.point_count} points, "
            f"{tri.triangle_count} triangles, Delaunay={is_delaunay(tri)}"
        )
        tri.plot(show=True, title=f"After batch {batch + 1}")

    # a single extra batch through the helper, showing the stage-wise API
    update_triangulation(tri, rng.uniform(-0.5, 0.5, size=(20, 2)))
    tri.plot(show=True, title="Final triangulation", circumcircles=False)


if __name__ == "__main__":
    main()
