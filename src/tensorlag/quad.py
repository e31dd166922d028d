"""Node distributions and quadrature rules on the reference interval [-1, 1].

These are the usual suppliers of node sets and evaluation points for the
element engine. The engine itself treats them as opaque coordinates.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, cast

import numpy as np
import numpy.typing as npt
from numpy.polynomial import chebyshev, legendre

from .indexer import TensorProductIndexer


def _validate_n_pts(n_pts: int, minimum: int = 1) -> None:
    """Validate the number of points of a distribution.

    Raises:
        ValueError: If n_pts is less than minimum.
    """
    if n_pts < minimum:
        raise ValueError(f"n_pts must be at least {minimum}")


def get_equispaced_nodes_1D(n_pts: int) -> npt.NDArray[np.float64]:
    """Get n_pts equispaced nodes on [-1, 1], endpoints included.

    Args:
        n_pts (int): Number of nodes. Must be at least 2.

    Returns:
        npt.NDArray[np.float64]: The nodes, in increasing order.

    Raises:
        ValueError: If n_pts is less than 2.
    """
    _validate_n_pts(n_pts, 2)
    return np.linspace(-1.0, 1.0, n_pts)


def get_gauss_legendre_nodes_1D(n_pts: int) -> npt.NDArray[np.float64]:
    """Get the n_pts Gauss-Legendre points (roots of P_n) on [-1, 1].

    Raises:
        ValueError: If n_pts is less than 1.
    """
    return get_gauss_legendre_quadrature_1D(n_pts)[0]


def get_gauss_lobatto_legendre_nodes_1D(n_pts: int) -> npt.NDArray[np.float64]:
    """Get the n_pts Gauss-Lobatto-Legendre points on [-1, 1].

    The nodes are -1, the roots of P_{n_pts-1}', and 1.

    Args:
        n_pts (int): Number of nodes. Must be at least 2.

    Returns:
        npt.NDArray[np.float64]: The nodes, in increasing order.

    Raises:
        ValueError: If n_pts is less than 2.
    """
    _validate_n_pts(n_pts, 2)

    basis_t = cast(Callable[[int], Any], legendre.Legendre.basis)
    P_prime = basis_t(n_pts - 1).deriv()
    interior = np.sort(np.real(cast(npt.NDArray[np.float64], P_prime.roots())))
    return np.concatenate((np.array([-1.0]), interior, np.array([1.0])))


def get_chebyshev_1st_kind_nodes_1D(n_pts: int) -> npt.NDArray[np.float64]:
    """Get the n_pts Chebyshev points of the first kind (roots of T_n) on [-1, 1].

    Raises:
        ValueError: If n_pts is less than 1.
    """
    _validate_n_pts(n_pts)
    cheb1_t = cast(Callable[[int], npt.NDArray[np.float64]], chebyshev.chebpts1)
    return cheb1_t(n_pts)


def get_chebyshev_2nd_kind_nodes_1D(n_pts: int) -> npt.NDArray[np.float64]:
    """Get the n_pts Chebyshev extrema (second kind points) on [-1, 1].

    Endpoints are included.

    Raises:
        ValueError: If n_pts is less than 2.
    """
    _validate_n_pts(n_pts, 2)
    cheb2_t = cast(Callable[[int], npt.NDArray[np.float64]], chebyshev.chebpts2)
    return cheb2_t(n_pts)


def get_gauss_legendre_quadrature_1D(
    n_pts: int,
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Get the n_pts Gauss-Legendre quadrature rule on [-1, 1].

    The rule integrates polynomials of degree up to 2*n_pts - 1 exactly.

    Args:
        n_pts (int): Number of quadrature points. Must be at least 1.

    Returns:
        tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
            The points (increasing) and weights. Weights add up to 2.

    Raises:
        ValueError: If n_pts is less than 1.
    """
    _validate_n_pts(n_pts)
    leggauss_t = cast(
        Callable[[int], tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]],
        legendre.leggauss,
    )
    return leggauss_t(n_pts)


class PointsLattice:
    """Tensor-product grid of points.

    Points are enumerated with the first axis varying fastest, the same
    convention used for basis functions and vertices by the element engine.
    """

    def __init__(self, pts_per_dir: Iterable[npt.ArrayLike]) -> None:
        """Initialize the points lattice.

        Args:
            pts_per_dir (Iterable[npt.ArrayLike]): The 1D coordinates along
                each axis.

        Raises:
            ValueError: If there are no axes or any axis is empty or not 1D.
        """
        self._pts_per_dir: tuple[npt.NDArray[np.float64], ...] = tuple(
            np.array(pts, dtype=np.float64) for pts in pts_per_dir
        )
        if self.dim < 1:
            raise ValueError("Points lattice must have at least 1 dimension")
        for pts in self._pts_per_dir:
            if pts.ndim != 1:
                raise ValueError("All points must be 1D")
            if pts.shape[0] == 0:
                raise ValueError("All points must have at least 1 point")
            pts.setflags(write=False)
        self._indexer = TensorProductIndexer(pts.shape[0] for pts in self._pts_per_dir)

    @property
    def dim(self) -> int:
        """Get the dimension of the points lattice."""
        return len(self._pts_per_dir)

    @property
    def pts_per_dir(self) -> tuple[npt.NDArray[np.float64], ...]:
        """Get the points per dimension."""
        return self._pts_per_dir

    @property
    def indexer(self) -> TensorProductIndexer:
        """Get the indexer relating lattice points to per-axis indices."""
        return self._indexer

    @property
    def n_points(self) -> int:
        """Get the total number of points in the lattice."""
        return self._indexer.num_entries

    def get_all_points(self) -> npt.NDArray[np.float64]:
        """Get all points of the lattice, first axis varying fastest.

        Returns:
            npt.NDArray[np.float64]: Array of shape (n_points, dim).
        """
        table = self._indexer.table
        return np.stack(
            [self._pts_per_dir[d][table[:, d]] for d in range(self.dim)], axis=-1
        )


def create_gauss_legendre_lattice(
    n_pts_per_dir: Iterable[int],
) -> tuple[PointsLattice, npt.NDArray[np.float64]]:
    """Create a tensor-product Gauss-Legendre rule on [-1, 1]^dim.

    Args:
        n_pts_per_dir (Iterable[int]): Number of points along each axis.

    Returns:
        tuple[PointsLattice, npt.NDArray[np.float64]]: The lattice of
        quadrature points and the weights, one per point of
        ``lattice.get_all_points()`` and in the same order.

    Raises:
        ValueError: If any number of points is less than 1.
    """
    rules = [get_gauss_legendre_quadrature_1D(n_pts) for n_pts in n_pts_per_dir]
    lattice = PointsLattice(pts for pts, _ in rules)
    table = lattice.indexer.table
    weights = np.ones(lattice.n_points)
    for d, (_, w) in enumerate(rules):
        weights *= w[table[:, d]]
    return lattice, weights
