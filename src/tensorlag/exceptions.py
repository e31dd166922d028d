"""Exceptions raised by TensorLag.

All of them derive from :class:`ValueError`, so callers that already guard
numeric input with ``except ValueError`` keep working.
"""

from __future__ import annotations


class TensorLagError(ValueError):
    """Base class for the error conditions of the element evaluation engine."""


class DegenerateNodeSetError(TensorLagError):
    """Two or more coordinates of a node set coincide.

    Attributes:
        indices (tuple[int, int]): Positions of the first pair of repeated nodes.
    """

    def __init__(self, indices: tuple[int, int], value: float) -> None:
        self.indices = indices
        super().__init__(
            f"Nodes {indices[0]} and {indices[1]} coincide at {value!r}; "
            "the Lagrange interpolation problem is singular"
        )


class SingularMappingError(TensorLagError):
    """The Jacobian of the geometric mapping is singular at a queried point.

    Attributes:
        point_index (int | None): Index of the offending point for batched
            evaluations, None for a single point.
        det (complex | float): Determinant found at that point.
    """

    def __init__(self, det: complex | float, point_index: int | None = None) -> None:
        self.det = det
        self.point_index = point_index
        where = "" if point_index is None else f" at point {point_index}"
        super().__init__(f"Jacobian is singular{where} (det = {det!r})")


class DimensionMismatchError(TensorLagError):
    """A caller-supplied array does not have the size the element expects."""
