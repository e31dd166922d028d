"""Numba-compiled kernels for 1D Lagrange basis values and derivatives."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

F = TypeVar("F", bound=Callable[..., Any])

if TYPE_CHECKING:
    # During type-checking, make the decorator a no-op that preserves types.
    def nb_jit(*args: object, **kwargs: object) -> Callable[[F], F]:
        def decorator(func: F) -> F:
            return func

        return decorator
else:
    # At runtime, use the real Numba decorator.
    nb_jit = nb.jit  # type: ignore[attr-defined]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _compute_Lagrange_denominators_core(
    nodes: npt.NDArray[np.float64],
    out: npt.NDArray[np.float64],
) -> None:
    """Compute the denominators prod_{j != i} (x_i - x_j) of the Lagrange basis.

    The product is accumulated with j increasing, the same order in which
    _tabulate_Lagrange_basis_1D_core accumulates the numerators, so that the
    ratio is exactly 1 when the evaluation point is node i.

    Args:
        nodes (npt.NDArray[np.float64]): The N interpolation nodes.
        out (npt.NDArray[np.float64]): Output array of length N.
    """
    n = nodes.shape[0]
    for i in range(n):
        out[i] = 1.0
        for j in range(n):
            if j != i:
                out[i] *= nodes[i] - nodes[j]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _tabulate_Lagrange_basis_1D_core(
    nodes: npt.NDArray[np.float64],
    denominators: npt.NDArray[np.float64],
    t: npt.NDArray[np.float32 | np.float64 | np.complex64 | np.complex128],
    vals: npt.NDArray[np.float32 | np.float64 | np.complex64 | np.complex128],
    ders: npt.NDArray[np.float32 | np.float64 | np.complex64 | np.complex128],
) -> None:
    """Evaluate the N Lagrange polynomials and their first derivatives at points t.

    For every point x and basis index i the kernel runs the product-rule
    recurrence over the nodes k != i::

        S <- S * (x - x_k) + P
        P <- P * (x - x_k)

    starting from P = 1, S = 0. At the end P = prod_{k != i} (x - x_k) and
    S = sum_{j != i} prod_{k != i, j} (x - x_k), i.e. the numerator of the
    derivative written as a finite sum. Both are divided by the denominator
    of basis i. No division by (x - x_k) takes place, so the same code path
    is valid whether or not x coincides with a node.

    Args:
        nodes (npt.NDArray[np.float64]): The N distinct interpolation nodes.
        denominators (npt.NDArray[np.float64]): Output of
            _compute_Lagrange_denominators_core for the same nodes.
        t (npt.NDArray): 1D array of evaluation points, real or complex.
        vals (npt.NDArray): Output array of shape (len(t), N) for the values.
        ders (npt.NDArray): Output array of shape (len(t), N) for the
            derivatives. Same dtype as vals.

    Note:
        No validation is performed inside this numba-compiled function.
        Output arrays are the only storage written to, so concurrent calls
        with distinct outputs are independent.
    """
    n = nodes.shape[0]
    for p in range(t.shape[0]):
        for i in range(n):
            vals[p, i] = 1.0
            ders[p, i] = 0.0
            for k in range(n):
                if k != i:
                    diff = t[p] - nodes[k]
                    ders[p, i] = ders[p, i] * diff + vals[p, i]
                    vals[p, i] = vals[p, i] * diff
            vals[p, i] = vals[p, i] / denominators[i]
            ders[p, i] = ders[p, i] / denominators[i]


def _warmup_numba_functions() -> None:
    """Precompile the kernels with float64 signatures for a faster first call."""
    nodes = np.array([-1.0, 0.0, 1.0], dtype=np.float64)
    denominators = np.empty(3, dtype=np.float64)
    _compute_Lagrange_denominators_core(nodes, denominators)

    t_dummy = np.array([-1.0, 0.5], dtype=np.float64)
    vals = np.empty((2, 3), dtype=np.float64)
    ders = np.empty((2, 3), dtype=np.float64)
    _tabulate_Lagrange_basis_1D_core(nodes, denominators, t_dummy, vals, ders)


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()
