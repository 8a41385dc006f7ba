from typing import TypeAlias
from numpy.typing import NDArray
import numpy as np

EPS = 1e-9
COLLINEAR_EPS = 1e-12
SENTINEL_COUNT = 4

Vec2d: TypeAlias = tuple[float, float] | NDArray[np.floating]
Triangle: TypeAlias = tuple[Vec2d, Vec2d, Vec2d] | NDArray[np.floating]
TriangleKey: TypeAlias = tuple[int, int, int]
Edge: TypeAlias = tuple[int, int]
Bbox: TypeAlias = tuple[float, float, float, float]
