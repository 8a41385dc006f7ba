class TriangulationError(Exception): ...


class DegenerateGeometryError(TriangulationError):
    """A collinear or zero-area configuration that the predicates cannot handle."""


class OutOfBoundsError(TriangulationError, ValueError):
    """A point that does not lie strictly inside the sentinel quad."""
