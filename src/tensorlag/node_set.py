"""Node sets defining where 1D Lagrange bases interpolate."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

import numpy as np
import numpy.typing as npt

from ._lagrange_core import _compute_Lagrange_denominators_core
from .exceptions import DegenerateNodeSetError
from .quad import (
    get_chebyshev_1st_kind_nodes_1D,
    get_chebyshev_2nd_kind_nodes_1D,
    get_equispaced_nodes_1D,
    get_gauss_legendre_nodes_1D,
    get_gauss_lobatto_legendre_nodes_1D,
)


class NodeVariant(Enum):
    """Enumeration of the node distributions provided on [-1, 1].

    Attributes:
        EQUISPACED (NodeVariant): Equispaced nodes, endpoints included.
        GAUSS_LEGENDRE (NodeVariant): Roots of the Legendre polynomial.
        GAUSS_LOBATTO_LEGENDRE (NodeVariant): Gauss-Lobatto-Legendre nodes.
        CHEBYSHEV_1ST (NodeVariant): Roots of the Chebyshev polynomial T_n.
        CHEBYSHEV_2ND (NodeVariant): Chebyshev extrema, endpoints included.
    """

    EQUISPACED = "equispaced"
    GAUSS_LEGENDRE = "gauss_legendre"
    GAUSS_LOBATTO_LEGENDRE = "gauss_lobatto_legendre"
    CHEBYSHEV_1ST = "chebyshev_1st"
    CHEBYSHEV_2ND = "chebyshev_2nd"

    @property
    def includes_endpoints(self) -> bool:
        """Whether the distribution always contains -1 and 1."""
        return self in (
            NodeVariant.EQUISPACED,
            NodeVariant.GAUSS_LOBATTO_LEGENDRE,
            NodeVariant.CHEBYSHEV_2ND,
        )


_NODE_GENERATORS: dict[NodeVariant, Callable[[int], npt.NDArray[np.float64]]] = {
    NodeVariant.EQUISPACED: get_equispaced_nodes_1D,
    NodeVariant.GAUSS_LEGENDRE: get_gauss_legendre_nodes_1D,
    NodeVariant.GAUSS_LOBATTO_LEGENDRE: get_gauss_lobatto_legendre_nodes_1D,
    NodeVariant.CHEBYSHEV_1ST: get_chebyshev_1st_kind_nodes_1D,
    NodeVariant.CHEBYSHEV_2ND: get_chebyshev_2nd_kind_nodes_1D,
}


class NodeSet:
    """Immutable, ordered set of distinct 1D interpolation nodes.

    The basis function ``i`` of a Lagrange basis built on this set is the one
    equal to 1 at ``nodes[i]``; the order given at construction is kept.
    """

    def __init__(self, nodes: npt.ArrayLike) -> None:
        """Initialize the node set.

        Args:
            nodes (npt.ArrayLike): 1D sequence of at least 2 finite real
                coordinates, all different.

        Raises:
            ValueError: If nodes is not 1D, has fewer than 2 entries, is
                complex, or contains non-finite values.
            DegenerateNodeSetError: If two nodes are equal.
        """
        arr = np.asarray(nodes)
        if np.iscomplexobj(arr):
            raise ValueError("Nodes must be real")
        arr = np.array(arr, dtype=np.float64)
        if arr.ndim != 1:
            raise ValueError("Nodes must be a 1D sequence")
        if arr.shape[0] < 2:  # noqa: PLR2004
            raise ValueError("A node set needs at least 2 nodes")
        if not np.all(np.isfinite(arr)):
            raise ValueError("Nodes must be finite")

        # Exact equality, no tolerance band.
        order = np.argsort(arr, kind="stable")
        repeated = np.nonzero(np.diff(arr[order]) == 0.0)[0]
        if repeated.size > 0:
            first, second = sorted((int(order[repeated[0]]), int(order[repeated[0] + 1])))
            raise DegenerateNodeSetError((first, second), float(arr[first]))

        denominators = np.empty_like(arr)
        _compute_Lagrange_denominators_core(arr, denominators)

        arr.setflags(write=False)
        denominators.setflags(write=False)
        self._nodes: npt.NDArray[np.float64] = arr
        self._denominators: npt.NDArray[np.float64] = denominators

    @classmethod
    def from_variant(cls, variant: NodeVariant, n_nodes: int) -> NodeSet:
        """Create the node set of a standard distribution on [-1, 1].

        Args:
            variant (NodeVariant): The node distribution.
            n_nodes (int): Number of nodes, i.e. polynomial degree + 1.

        Raises:
            ValueError: If n_nodes is less than 2.
        """
        if n_nodes < 2:  # noqa: PLR2004
            raise ValueError("A node set needs at least 2 nodes")
        return cls(_NODE_GENERATORS[NodeVariant(variant)](n_nodes))

    def __len__(self) -> int:
        return self._nodes.shape[0]

    def __repr__(self) -> str:
        return f"NodeSet({self._nodes.tolist()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NodeSet):
            return NotImplemented
        return np.array_equal(self._nodes, other._nodes)

    def __hash__(self) -> int:
        # equal node sets hash alike, -0.0 and 0.0 included
        return hash(tuple(self._nodes.tolist()))

    @property
    def nodes(self) -> npt.NDArray[np.float64]:
        """Read-only array with the node coordinates."""
        return self._nodes

    @property
    def denominators(self) -> npt.NDArray[np.float64]:
        """Read-only array with prod_{j != i} (nodes[i] - nodes[j]) for each i."""
        return self._denominators

    @property
    def degree(self) -> int:
        """Degree of the Lagrange polynomials built on this set."""
        return len(self) - 1
