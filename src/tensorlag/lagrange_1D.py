"""One-dimensional Lagrange basis on an arbitrary node set."""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from ._basis_utils import _normalize_points_1D, _validate_out_array
from ._lagrange_core import _tabulate_Lagrange_basis_1D_core
from .node_set import NodeSet


class Lagrange1D:
    r"""Lagrange polynomials of degree N-1 interpolating at a node set.

    The basis functions are

    .. math::

        \ell_i(x) = \prod_{j \neq i} \frac{x - x_j}{x_i - x_j},
        \qquad
        \ell_i'(x) = \frac{\sum_{j \neq i} \prod_{k \neq i, j} (x - x_k)}
                          {\prod_{j \neq i} (x_i - x_j)},

    where the derivative is always computed in the finite form on the right,
    so evaluating exactly at a node is no different from evaluating anywhere
    else. Evaluation points may be real or complex (e.g. for complex-step
    differentiation) and may lie outside the node interval.
    """

    def __init__(self, node_set: NodeSet | npt.ArrayLike) -> None:
        """Initialize the basis.

        Args:
            node_set (NodeSet | npt.ArrayLike): The interpolation nodes. Raw
                coordinates are wrapped in a NodeSet.

        Raises:
            DegenerateNodeSetError: If raw coordinates contain repeated nodes.
            ValueError: If raw coordinates are otherwise not a valid node set.
        """
        self._node_set = node_set if isinstance(node_set, NodeSet) else NodeSet(node_set)

    def __repr__(self) -> str:
        return f"Lagrange1D({self._node_set!r})"

    @property
    def node_set(self) -> NodeSet:
        """The interpolation nodes."""
        return self._node_set

    @property
    def n_basis(self) -> int:
        """Number of basis functions (number of nodes)."""
        return len(self._node_set)

    @property
    def degree(self) -> int:
        """Polynomial degree of the basis functions."""
        return self._node_set.degree

    @staticmethod
    def _output(
        out: npt.NDArray[np.inexact] | None,
        shape: tuple[int, ...],
        dtype: npt.DTypeLike,
    ) -> npt.NDArray[np.inexact]:
        if out is None:
            return np.empty(shape, dtype=dtype)
        _validate_out_array(out, shape, dtype)
        return out

    def _tabulate_into(
        self,
        t: npt.NDArray[np.inexact],
        vals: npt.NDArray[np.inexact],
        ders: npt.NDArray[np.inexact],
    ) -> None:
        normalized_shape = (t.shape[0], self.n_basis)
        _tabulate_Lagrange_basis_1D_core(
            self._node_set.nodes,
            self._node_set.denominators,
            t,
            vals.reshape(normalized_shape),
            ders.reshape(normalized_shape),
        )

    def evaluate(
        self,
        pts: npt.ArrayLike,
        out: tuple[npt.NDArray[np.inexact], npt.NDArray[np.inexact]] | None = None,
    ) -> tuple[npt.NDArray[np.inexact], npt.NDArray[np.inexact]]:
        """Evaluate all basis functions and their derivatives.

        Args:
            pts (npt.ArrayLike): Evaluation coordinates. Can be a scalar,
                list, or numpy array. float32, float64, complex64 and
                complex128 are preserved; other types become float64.
            out (tuple[npt.NDArray[np.inexact], npt.NDArray[np.inexact]] | None):
                Optional pair of arrays receiving the values and the
                derivatives. Each must have the output shape and the dtype of
                the evaluation points, and the two must not overlap. If None,
                new arrays are allocated. Defaults to None.

        Returns:
            tuple[npt.NDArray[np.inexact], npt.NDArray[np.inexact]]: Values
            and derivatives, each with the shape of the input and a trailing
            axis of length n_basis. If `out` was provided, returns its arrays.

        Raises:
            DimensionMismatchError: If an array of `out` has the wrong shape.
            ValueError: If an array of `out` has the wrong dtype, is read-only
                or is not C-contiguous, or if the two arrays overlap.
        """
        t, input_shape = _normalize_points_1D(pts)
        final_shape = (*input_shape, self.n_basis)
        vals, ders = out if out is not None else (None, None)
        vals = self._output(vals, final_shape, t.dtype)
        ders = self._output(ders, final_shape, t.dtype)
        if np.may_share_memory(vals, ders):
            raise ValueError("Output arrays for values and derivatives must not overlap")
        self._tabulate_into(t, vals, ders)
        return vals, ders

    def tabulate(
        self, pts: npt.ArrayLike, out: npt.NDArray[np.inexact] | None = None
    ) -> npt.NDArray[np.inexact]:
        """Evaluate all basis functions at the given points.

        Args:
            pts (npt.ArrayLike): Evaluation coordinates, as in evaluate.
            out (npt.NDArray[np.inexact] | None): Optional output array with
                the shape of the input plus a trailing axis of length n_basis
                and the dtype of the points. Defaults to None.

        Returns:
            npt.NDArray[np.inexact]: The basis values; `out` if it was provided.

        Raises:
            DimensionMismatchError: If `out` has the wrong shape.
            ValueError: If `out` has the wrong dtype, is read-only or is not
                C-contiguous.

        Example:
            >>> Lagrange1D([-1.0, 0.0, 1.0]).tabulate(0.5)
            array([-0.125,  0.75 ,  0.375])
        """
        t, input_shape = _normalize_points_1D(pts)
        vals = self._output(out, (*input_shape, self.n_basis), t.dtype)
        self._tabulate_into(t, vals, np.empty_like(vals))
        return vals

    def tabulate_derivative(
        self, pts: npt.ArrayLike, out: npt.NDArray[np.inexact] | None = None
    ) -> npt.NDArray[np.inexact]:
        """Evaluate the first derivative of all basis functions at the given points.

        `out` follows the same rules as in tabulate.
        """
        t, input_shape = _normalize_points_1D(pts)
        ders = self._output(out, (*input_shape, self.n_basis), t.dtype)
        self._tabulate_into(t, np.empty_like(ders), ders)
        return ders
