"""Arbitrary-order tensor-product Lagrange elements in 1 to 4 dimensions."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

from ._basis_multidim import _compute_tensor_basis, _compute_tensor_gradient
from ._basis_utils import (
    _batched_output,
    _interpolate,
    _interpolate_gradient,
    _normalize_points,
    _restore_single,
    _validate_coefficients,
)
from .geometry import GeometricMap
from .indexer import TensorProductIndexer
from .lagrange_1D import Lagrange1D
from .node_set import NodeSet, NodeVariant

logger = logging.getLogger(__name__)


class LagrangeElement:
    """Tensor-product Lagrange element on a reference box.

    Basis function ``k`` is the product over axes ``d`` of the 1D Lagrange
    polynomial ``indexer.multi_index(k)[d]`` of the node set of axis ``d``.
    Coefficients, vertex positions and reference nodes follow the same flat
    order (first axis fastest).

    Points are a single reference point of shape (dim,) or a batch of shape
    (n_points, dim); in 1D a scalar is also a single point. Results of batched
    calls carry a leading n_points axis. Any finite point is valid, including
    points outside the reference box.

    Example:
        >>> element = LagrangeElement.from_order(2, 1, NodeVariant.EQUISPACED)
        >>> element.basis([0.0, 0.0])
        array([0.25, 0.25, 0.25, 0.25])
    """

    def __init__(
        self,
        node_sets: NodeSet | Sequence[NodeSet | npt.ArrayLike],
        dim: int | None = None,
    ) -> None:
        """Initialize the element.

        Args:
            node_sets (NodeSet | Sequence[NodeSet | npt.ArrayLike]): One node
                set per axis, or a single node set shared by all axes.
            dim (int | None): Number of axes. Required when a single node set
                is given; otherwise it must match the number of node sets if
                provided.

        Raises:
            ValueError: If dim is missing or inconsistent, or is not between
                1 and 4.
            DegenerateNodeSetError: If raw node coordinates contain repeated
                nodes.
        """
        if isinstance(node_sets, NodeSet):
            if dim is None:
                raise ValueError("dim is required when a single NodeSet is given")
            sets: tuple[NodeSet, ...] = (node_sets,) * dim
        else:
            sets = tuple(ns if isinstance(ns, NodeSet) else NodeSet(ns) for ns in node_sets)
            if dim is not None and dim != len(sets):
                raise ValueError(f"Expected {dim} node sets, got {len(sets)}")

        self._indexer = TensorProductIndexer(len(ns) for ns in sets)
        self._node_sets = sets
        self._bases = tuple(Lagrange1D(ns) for ns in sets)
        self._map = GeometricMap(self)

        logger.debug(
            f"Created LagrangeElement(dim={self.dim}, orders={self.orders}, "
            f"num_basis={self.num_basis})."
        )

    @classmethod
    def from_order(
        cls,
        dim: int,
        order: int,
        variant: NodeVariant = NodeVariant.GAUSS_LOBATTO_LEGENDRE,
    ) -> LagrangeElement:
        """Create an element of the same order along every axis.

        Args:
            dim (int): Number of axes, between 1 and 4.
            order (int): Polynomial degree per axis. Must be at least 1.
            variant (NodeVariant): Node distribution on [-1, 1]. Defaults to
                Gauss-Lobatto-Legendre.

        Raises:
            ValueError: If order is less than 1 or dim is not between 1 and 4.
        """
        if order < 1:
            raise ValueError(f"order must be at least 1, got {order}")
        return cls(NodeSet.from_variant(variant, order + 1), dim=dim)

    def __repr__(self) -> str:
        return f"LagrangeElement(dim={self.dim}, orders={self.orders})"

    @property
    def dim(self) -> int:
        """Reference dimension."""
        return self._indexer.dim

    @property
    def num_basis(self) -> int:
        """Number of basis functions."""
        return self._indexer.num_entries

    @property
    def orders(self) -> tuple[int, ...]:
        """Polynomial degree along each axis."""
        return tuple(ns.degree for ns in self._node_sets)

    @property
    def node_sets(self) -> tuple[NodeSet, ...]:
        """Node set of each axis."""
        return self._node_sets

    @property
    def indexer(self) -> TensorProductIndexer:
        """Flat index <-> multi-index bookkeeping of the basis functions."""
        return self._indexer

    @property
    def geometric_map(self) -> GeometricMap:
        """Isoparametric mapping built on this element."""
        return self._map

    def _evaluate_per_axis(
        self, point: npt.ArrayLike, with_derivatives: bool
    ) -> tuple[list[npt.NDArray[np.inexact]], list[npt.NDArray[np.inexact]], bool]:
        pts, single = _normalize_points(point, self.dim)
        vals: list[npt.NDArray[np.inexact]] = []
        ders: list[npt.NDArray[np.inexact]] = []
        for d, basis_1D in enumerate(self._bases):
            if with_derivatives:
                v, dv = basis_1D.evaluate(pts[:, d])
                ders.append(dv)
            else:
                v = basis_1D.tabulate(pts[:, d])
            vals.append(v)
        return vals, ders, single

    def basis(
        self, point: npt.ArrayLike, out: npt.NDArray[np.inexact] | None = None
    ) -> npt.NDArray[np.inexact]:
        """Evaluate all basis functions.

        Args:
            point (npt.ArrayLike): Reference point(s).
            out (npt.NDArray[np.inexact] | None): Optional C-contiguous array
                receiving the result, with the output shape and the dtype of
                the points. If None, a new array is allocated. Defaults to None.

        Returns:
            npt.NDArray[np.inexact]: Shape (num_basis,), or (n_points, num_basis);
            `out` if it was provided.

        Raises:
            DimensionMismatchError: If point does not have dim coordinates or
                `out` has the wrong shape.
            ValueError: If `out` has the wrong dtype or is read-only.
        """
        vals, _, single = self._evaluate_per_axis(point, with_derivatives=False)
        result, view = _batched_output(
            out, vals[0].shape[0], (self.num_basis,), vals[0].dtype, single
        )
        _compute_tensor_basis(vals, self._indexer, out=view)
        return result

    def gradient(
        self, point: npt.ArrayLike, out: npt.NDArray[np.inexact] | None = None
    ) -> npt.NDArray[np.inexact]:
        """Evaluate the reference gradients of all basis functions.

        Args:
            point (npt.ArrayLike): Reference point(s).
            out (npt.NDArray[np.inexact] | None): Optional output array, under
                the same rules as in basis. Defaults to None.

        Returns:
            npt.NDArray[np.inexact]: Shape (num_basis, dim), or
            (n_points, num_basis, dim); entry ``[..., k, d]`` is
            ``d N_k / d xi_d``. `out` if it was provided.

        Raises:
            DimensionMismatchError: If point does not have dim coordinates or
                `out` has the wrong shape.
            ValueError: If `out` has the wrong dtype or is read-only.
        """
        vals, ders, single = self._evaluate_per_axis(point, with_derivatives=True)
        result, view = _batched_output(
            out, vals[0].shape[0], (self.num_basis, self.dim), vals[0].dtype, single
        )
        _compute_tensor_gradient(vals, ders, self._indexer, out=view)
        return result

    def eval_basis(self, index: int, point: npt.ArrayLike) -> npt.NDArray[np.inexact]:
        """Evaluate the single basis function ``index``.

        Returns:
            npt.NDArray[np.inexact]: 0-d array, or shape (n_points,).

        Raises:
            IndexError: If index is out of range.
            DimensionMismatchError: If point does not have dim coordinates.
        """
        multi = self._indexer.multi_index(index)
        pts, single = _normalize_points(point, self.dim)
        out = self._bases[0].tabulate(pts[:, 0])[:, multi[0]]
        for d in range(1, self.dim):
            out = out * self._bases[d].tabulate(pts[:, d])[:, multi[d]]
        return np.asarray(_restore_single(out, single))

    def eval_grad_basis(self, index: int, point: npt.ArrayLike) -> npt.NDArray[np.inexact]:
        """Evaluate the reference gradient of the single basis function ``index``.

        Returns:
            npt.NDArray[np.inexact]: Shape (dim,), or (n_points, dim).

        Raises:
            IndexError: If index is out of range.
            DimensionMismatchError: If point does not have dim coordinates.
        """
        multi = self._indexer.multi_index(index)
        pts, single = _normalize_points(point, self.dim)
        vals = []
        ders = []
        for d, basis_1D in enumerate(self._bases):
            v, dv = basis_1D.evaluate(pts[:, d])
            vals.append(v[:, multi[d]])
            ders.append(dv[:, multi[d]])

        out = np.empty((pts.shape[0], self.dim), dtype=vals[0].dtype)
        for target in range(self.dim):
            partial = ders[target]
            for d in range(self.dim):
                if d != target:
                    partial = partial * vals[d]
            out[:, target] = partial
        return _restore_single(out, single)

    def eval_approx(self, coeffs: npt.ArrayLike, point: npt.ArrayLike) -> npt.NDArray[np.inexact]:
        """Evaluate the field ``sum_i coeffs[i] * N_i`` at the given point(s).

        Returns:
            npt.NDArray[np.inexact]: 0-d array, or shape (n_points,).

        Raises:
            DimensionMismatchError: If coeffs does not have num_basis entries or
                point does not have dim coordinates.
        """
        c = _validate_coefficients(coeffs, self.num_basis)
        return np.asarray(_interpolate(self.basis(point), c))

    def eval_grad_approx(
        self, coeffs: npt.ArrayLike, point: npt.ArrayLike
    ) -> npt.NDArray[np.inexact]:
        """Evaluate the reference gradient of ``sum_i coeffs[i] * N_i``.

        Returns:
            npt.NDArray[np.inexact]: Shape (dim,), or (n_points, dim).

        Raises:
            DimensionMismatchError: If coeffs does not have num_basis entries or
                point does not have dim coordinates.
        """
        c = _validate_coefficients(coeffs, self.num_basis)
        return _interpolate_gradient(self.gradient(point), c)

    def reference_nodes(self) -> npt.NDArray[np.float64]:
        """Get the reference coordinates of the nodes, shape (num_basis, dim).

        Row ``k`` is the point where basis function ``k`` equals 1.
        """
        table = self._indexer.table
        return np.stack(
            [ns.nodes[table[:, d]] for d, ns in enumerate(self._node_sets)], axis=1
        )

    def corner_indices(self) -> npt.NDArray[np.int64]:
        """Get the flat indices of the 2^dim corner nodes."""
        return self._indexer.corner_indices()

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
