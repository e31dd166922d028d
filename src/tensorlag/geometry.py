"""Isoparametric mapping from reference to physical coordinates.

The mapping uses the basis functions of an element as shape functions:

    x(xi) = sum_i vertices[i] * N_i(xi)
    J[a, b] = d x_a / d xi_b = sum_i vertices[i, a] * d N_i / d xi_b
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import numpy as np
import numpy.typing as npt

from ._basis_utils import _validate_vertices
from .exceptions import SingularMappingError
from .tolerance import get_default_tolerance

logger = logging.getLogger(__name__)


@runtime_checkable
class ElementBasis(Protocol):
    """Capability shared by every element family.

    Both the arbitrary-order tensor-product elements and the closed-form
    fixed-order elements provide it; GeometricMap only relies on this.
    """

    @property
    def dim(self) -> int: ...

    @property
    def num_basis(self) -> int: ...

    def basis(
        self, point: npt.ArrayLike, out: npt.NDArray[np.inexact] | None = None
    ) -> npt.NDArray[np.inexact]: ...

    def gradient(
        self, point: npt.ArrayLike, out: npt.NDArray[np.inexact] | None = None
    ) -> npt.NDArray[np.inexact]: ...


def _det_small(J: npt.NDArray[np.inexact]) -> npt.NDArray[np.inexact]:
    """Determinant of a stack of (D, D) matrices, closed form for D <= 3."""
    dim = J.shape[-1]
    if dim == 1:
        return np.array(J[..., 0, 0])
    if dim == 2:  # noqa: PLR2004
        return np.asarray(J[..., 0, 0] * J[..., 1, 1] - J[..., 0, 1] * J[..., 1, 0])
    if dim == 3:  # noqa: PLR2004
        return np.asarray(
            J[..., 0, 0] * (J[..., 1, 1] * J[..., 2, 2] - J[..., 1, 2] * J[..., 2, 1])
            - J[..., 0, 1] * (J[..., 1, 0] * J[..., 2, 2] - J[..., 1, 2] * J[..., 2, 0])
            + J[..., 0, 2] * (J[..., 1, 0] * J[..., 2, 1] - J[..., 1, 1] * J[..., 2, 0])
        )
    # LU factorization
    return np.asarray(np.linalg.det(J))


def _adjugate_small(J: npt.NDArray[np.inexact]) -> npt.NDArray[np.inexact]:
    """Adjugate (transposed cofactor matrix) of a stack of matrices, D <= 3."""
    dim = J.shape[-1]
    adj = np.empty_like(J)
    if dim == 1:
        adj[..., 0, 0] = 1.0
    elif dim == 2:  # noqa: PLR2004
        adj[..., 0, 0] = J[..., 1, 1]
        adj[..., 0, 1] = -J[..., 0, 1]
        adj[..., 1, 0] = -J[..., 1, 0]
        adj[..., 1, 1] = J[..., 0, 0]
    else:
        for a in range(3):
            a1, a2 = (a + 1) % 3, (a + 2) % 3
            for b in range(3):
                b1, b2 = (b + 1) % 3, (b + 2) % 3
                # adj[b, a] is the cofactor of J[a, b]
                adj[..., b, a] = J[..., a1, b1] * J[..., a2, b2] - J[..., a1, b2] * J[..., a2, b1]
    return adj


class GeometricMap:
    """Reference-to-physical mapping of an element with given vertex positions.

    Vertices are passed on each call as an array of shape (num_basis, dim),
    ordered like the basis functions of the element. Points are a single
    reference point of shape (dim,) or a batch of shape (n_points, dim);
    results of batched calls carry a leading n_points axis.
    """

    def __init__(self, element: ElementBasis, tol: float | None = None) -> None:
        """Initialize the mapping.

        Args:
            element (ElementBasis): Element whose basis functions are used as
                shape functions.
            tol (float | None): Relative threshold of the singularity test:
                the Jacobian is singular where
                ``|det J| <= tol * prod_b ||J[:, b]||``. Defaults to the
                default tolerance of the evaluation dtype.

        Raises:
            ValueError: If tol is negative.
        """
        if tol is not None and tol < 0.0:
            raise ValueError("tol must be non-negative")
        self._element = element
        self._tol = tol

    @property
    def element(self) -> ElementBasis:
        """The element providing the shape functions."""
        return self._element

    @property
    def dim(self) -> int:
        """Reference (and physical) dimension."""
        return self._element.dim

    def physical_position(
        self, point: npt.ArrayLike, vertices: npt.ArrayLike
    ) -> npt.NDArray[np.inexact]:
        """Map reference point(s) to physical coordinates.

        Returns:
            npt.NDArray[np.inexact]: Shape (dim,), or (n_points, dim).

        Raises:
            DimensionMismatchError: If point or vertices are wrongly shaped.
            ValueError: If vertices are not finite.
        """
        verts = self._vertices(vertices)
        basis_vals = self._element.basis(point)
        return np.einsum("...i,ia->...a", basis_vals, verts)

    def jacobian(self, point: npt.ArrayLike, vertices: npt.ArrayLike) -> npt.NDArray[np.inexact]:
        """Compute the Jacobian J[a, b] = d x_a / d xi_b.

        Returns:
            npt.NDArray[np.inexact]: Shape (dim, dim), or (n_points, dim, dim).

        Raises:
            DimensionMismatchError: If point or vertices are wrongly shaped.
            ValueError: If vertices are not finite.
        """
        verts = self._vertices(vertices)
        grads = self._element.gradient(point)
        return np.einsum("ia,...ib->...ab", verts, grads)

    def det_jacobian(
        self, point: npt.ArrayLike, vertices: npt.ArrayLike, check: bool = False
    ) -> npt.NDArray[np.inexact]:
        """Compute the determinant of the Jacobian.

        Closed form for dim <= 3, LU factorization for dim = 4.

        Args:
            point (npt.ArrayLike): Reference point(s).
            vertices (npt.ArrayLike): Vertex positions.
            check (bool): If True, raise instead of returning a numerically
                zero determinant. Defaults to False.

        Returns:
            npt.NDArray[np.inexact]: 0-d array, or shape (n_points,).

        Raises:
            SingularMappingError: If check is True and the Jacobian is singular.
        """
        J = self.jacobian(point, vertices)
        det = _det_small(J)
        if check:
            self._check_singular(J, det)
        return det

    def inv_jacobian(self, point: npt.ArrayLike, vertices: npt.ArrayLike) -> npt.NDArray[np.inexact]:
        """Compute the inverse of the Jacobian.

        Returns:
            npt.NDArray[np.inexact]: Shape (dim, dim), or (n_points, dim, dim).

        Raises:
            SingularMappingError: If the Jacobian is singular at any point.
        """
        J = self.jacobian(point, vertices)
        det = _det_small(J)
        self._check_singular(J, det)
        if self.dim <= 3:  # noqa: PLR2004
            return _adjugate_small(J) / det[..., None, None]
        return np.linalg.inv(J)

    def _vertices(self, vertices: npt.ArrayLike) -> npt.NDArray[np.inexact]:
        return _validate_vertices(vertices, self._element.num_basis, self.dim)

    def _check_singular(self, J: npt.NDArray[np.inexact], det: npt.NDArray[np.inexact]) -> None:
        """Raise SingularMappingError where |det J| is negligible w.r.t. the columns of J."""
        tol = self._tol if self._tol is not None else get_default_tolerance(J.dtype)
        # Hadamard's inequality: |det J| <= prod_b ||J[:, b]||
        scale = np.prod(np.linalg.norm(J, axis=-2), axis=-1)
        singular = np.atleast_1d(~(np.abs(det) > tol * scale))
        if np.any(singular):
            single = J.ndim == 2  # noqa: PLR2004
            index = None if single else int(np.argmax(singular))
            bad_det = np.atleast_1d(det)[0 if single else index].item()
            logger.debug(f"Singular Jacobian (det = {bad_det!r}, point index {index}).")
            raise SingularMappingError(bad_det, index)

