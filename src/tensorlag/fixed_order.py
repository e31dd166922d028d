"""Closed-form linear elements: Quad4, Hex8 and Tesseract16.

Each vertex ``v`` of the reference box [-1, 1]^D carries the multilinear
shape function

    N_v(xi) = 2^-D * prod_d (1 + xi_d * xi_{v, d})

where ``xi_v`` are the reference coordinates of the vertex. Basis functions,
coefficients and physical vertices follow the order of ``REF_VERTICES``,
which is the customary vertex numbering of each element and in general not
the flat tensor order of LagrangeElement; ``tensor_index_map`` translates
between the two.
"""

from __future__ import annotations

import logging
from typing import ClassVar

import numpy as np
import numpy.typing as npt

from ._basis_utils import (
    _batched_output,
    _interpolate,
    _interpolate_gradient,
    _normalize_points,
    _validate_coefficients,
)
from .geometry import GeometricMap
from .indexer import TensorProductIndexer

logger = logging.getLogger(__name__)


def _read_only(arr: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    arr.setflags(write=False)
    return arr


class _LinearElement:
    """Shared implementation of the closed-form multilinear elements."""

    REF_VERTICES: ClassVar[npt.NDArray[np.float64]]

    def __init__(self) -> None:
        # bit d of the tensor index is set where the vertex sits at xi_d = +1
        bits = (self.REF_VERTICES > 0.0).astype(np.int64)
        index_map = TensorProductIndexer((2,) * self.dim).flat_indices(bits)
        index_map.setflags(write=False)
        self._tensor_index_map: npt.NDArray[np.int64] = index_map
        self._map = GeometricMap(self)
        logger.debug(f"Created {type(self).__name__}(dim={self.dim}).")

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    @property
    def dim(self) -> int:
        """Reference dimension."""
        return self.REF_VERTICES.shape[1]

    @property
    def num_basis(self) -> int:
        """Number of basis functions (number of vertices)."""
        return self.REF_VERTICES.shape[0]

    @property
    def orders(self) -> tuple[int, ...]:
        """Polynomial degree along each axis (always 1)."""
        return (1,) * self.dim

    @property
    def reference_vertices(self) -> npt.NDArray[np.float64]:
        """Read-only array of shape (num_basis, dim) with the reference vertices."""
        return self.REF_VERTICES

    @property
    def tensor_index_map(self) -> npt.NDArray[np.int64]:
        """Flat LagrangeElement index of each vertex.

        Entry ``v`` is the index of the basis function of an order 1
        LagrangeElement (nodes -1 and 1 on every axis) equal to basis
        function ``v`` of this element.
        """
        return self._tensor_index_map

    @property
    def geometric_map(self) -> GeometricMap:
        """Isoparametric mapping built on this element."""
        return self._map

    def _factors(self, pts: npt.NDArray[np.inexact]) -> npt.NDArray[np.inexact]:
        """(1 + xi_d * xi_{v, d}) for every point, vertex and axis, in the dtype of pts."""
        return 1.0 + pts[:, None, :] * self.REF_VERTICES.astype(pts.dtype)[None, :, :]

    def basis(
        self, point: npt.ArrayLike, out: npt.NDArray[np.inexact] | None = None
    ) -> npt.NDArray[np.inexact]:
        """Evaluate all basis functions.

        `out` is an optional C-contiguous array with the output shape and the
        dtype of the points that receives the result.

        Returns:
            npt.NDArray[np.inexact]: Shape (num_basis,), or (n_points, num_basis).

        Raises:
            DimensionMismatchError: If point does not have dim coordinates or
                `out` has the wrong shape.
            ValueError: If `out` has the wrong dtype or is read-only.
        """
        pts, single = _normalize_points(point, self.dim)
        result, view = _batched_output(out, pts.shape[0], (self.num_basis,), pts.dtype, single)
        view[...] = np.prod(self._factors(pts), axis=-1) * 0.5**self.dim
        return result

    def gradient(
        self, point: npt.ArrayLike, out: npt.NDArray[np.inexact] | None = None
    ) -> npt.NDArray[np.inexact]:
        """Evaluate the reference gradients of all basis functions.

        `out` follows the same rules as in basis.

        Returns:
            npt.NDArray[np.inexact]: Shape (num_basis, dim), or
            (n_points, num_basis, dim).

        Raises:
            DimensionMismatchError: If point does not have dim coordinates or
                `out` has the wrong shape.
            ValueError: If `out` has the wrong dtype or is read-only.
        """
        pts, single = _normalize_points(point, self.dim)
        result, grads = _batched_output(
            out, pts.shape[0], (self.num_basis, self.dim), pts.dtype, single
        )
        factors = self._factors(pts)
        scale = 0.5**self.dim
        ref = self.REF_VERTICES.astype(pts.dtype)
        for d in range(self.dim):
            others = np.delete(factors, d, axis=-1)
            grads[:, :, d] = scale * ref[:, d] * np.prod(others, axis=-1)
        return result

    def _partial(self, point: npt.ArrayLike, axis: int) -> npt.NDArray[np.inexact]:
        return self.gradient(point)[..., axis]

    def partial_xi_basis(self, point: npt.ArrayLike) -> npt.NDArray[np.inexact]:
        """Derivative of all basis functions along the first reference axis."""
        return self._partial(point, 0)

    def partial_eta_basis(self, point: npt.ArrayLike) -> npt.NDArray[np.inexact]:
        """Derivative of all basis functions along the second reference axis."""
        return self._partial(point, 1)

    def eval_approx(self, coeffs: npt.ArrayLike, point: npt.ArrayLike) -> npt.NDArray[np.inexact]:
        """Evaluate ``sum_v coeffs[v] * N_v`` at the given point(s).

        Raises:
            DimensionMismatchError: If coeffs or point are wrongly sized.
        """
        c = _validate_coefficients(coeffs, self.num_basis)
        return np.asarray(_interpolate(self.basis(point), c))

    def eval_grad_approx(
        self, coeffs: npt.ArrayLike, point: npt.ArrayLike
    ) -> npt.NDArray[np.inexact]:
        """Evaluate the reference gradient of ``sum_v coeffs[v] * N_v``.

        Raises:
            DimensionMismatchError: If coeffs or point are wrongly sized.
        """
        c = _validate_coefficients(coeffs, self.num_basis)
        return _interpolate_gradient(self.gradient(point), c)

    def physical_position(
        self, point: npt.ArrayLike, vertices: npt.ArrayLike
    ) -> npt.NDArray[np.inexact]:
        """Map reference point(s) to physical space; see GeometricMap."""
        return self._map.physical_position(point, vertices)

    def jacobian(self, point: npt.ArrayLike, vertices: npt.ArrayLike) -> npt.NDArray[np.inexact]:
        """Jacobian of the mapping; see GeometricMap."""
        return self._map.jacobian(point, vertices)

    def det_jacobian(
        self, point: npt.ArrayLike, vertices: npt.ArrayLike, check: bool = False
    ) -> npt.NDArray[np.inexact]:
        """Determinant of the Jacobian; see GeometricMap."""
        return self._map.det_jacobian(point, vertices, check=check)

    def inv_jacobian(self, point: npt.ArrayLike, vertices: npt.ArrayLike) -> npt.NDArray[np.inexact]:
        """Inverse of the Jacobian; see GeometricMap."""
        return self._map.inv_jacobian(point, vertices)


class Quad4(_LinearElement):
    """Bilinear quadrilateral, vertices numbered counter-clockwise."""

    REF_VERTICES = _read_only(
        np.array(
            [
                [-1.0, -1.0],
                [1.0, -1.0],
                [1.0, 1.0],
                [-1.0, 1.0],
            ]
        )
    )


class Hex8(_LinearElement):
    """Trilinear hexahedron, vertices numbered with xi fastest, then eta, then mu."""

    REF_VERTICES = _read_only(
        np.array(
            [
                [-1.0, -1.0, -1.0],
                [1.0, -1.0, -1.0],
                [-1.0, 1.0, -1.0],
                [1.0, 1.0, -1.0],
                [-1.0, -1.0, 1.0],
                [1.0, -1.0, 1.0],
                [-1.0, 1.0, 1.0],
                [1.0, 1.0, 1.0],
            ]
        )
    )

    def partial_mu_basis(self, point: npt.ArrayLike) -> npt.NDArray[np.inexact]:
        """Derivative of all basis functions along the third reference axis."""
        return self._partial(point, 2)


class Tesseract16(_LinearElement):
    """Quadrilinear space-time tesseract with reference axes (xi, eta, mu, tau).

    The vertices of each tau = const face (first the 8 at tau = -1, then the 8
    at tau = +1) are numbered as two eta = const quadrilaterals, each
    counter-clockwise in the (xi, mu) plane.
    """

    REF_VERTICES = _read_only(
        np.array(
            [
                [-1.0, -1.0, -1.0, -1.0],
                [1.0, -1.0, -1.0, -1.0],
                [1.0, -1.0, 1.0, -1.0],
                [-1.0, -1.0, 1.0, -1.0],
                [-1.0, 1.0, -1.0, -1.0],
                [1.0, 1.0, -1.0, -1.0],
                [1.0, 1.0, 1.0, -1.0],
                [-1.0, 1.0, 1.0, -1.0],
                [-1.0, -1.0, -1.0, 1.0],
                [1.0, -1.0, -1.0, 1.0],
                [1.0, -1.0, 1.0, 1.0],
                [-1.0, -1.0, 1.0, 1.0],
                [-1.0, 1.0, -1.0, 1.0],
                [1.0, 1.0, -1.0, 1.0],
                [1.0, 1.0, 1.0, 1.0],
                [-1.0, 1.0, 1.0, 1.0],
            ]
        )
    )

    def partial_mu_basis(self, point: npt.ArrayLike) -> npt.NDArray[np.inexact]:
        """Derivative of all basis functions along the third reference axis."""
        return self._partial(point, 2)

    def partial_tau_basis(self, point: npt.ArrayLike) -> npt.NDArray[np.inexact]:
        """Derivative of all basis functions along the time axis."""
        return self._partial(point, 3)
