"""Tensor-product combination of per-axis 1D basis evaluations.

The flat ordering of the combined basis is the one of the given
TensorProductIndexer: basis function ``k`` is the product over axes ``d`` of
the 1D basis function ``table[k, d]`` of that axis.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

from .indexer import TensorProductIndexer


def _gather_factors(
    vals_per_dim: Sequence[npt.NDArray[np.inexact]],
    indexer: TensorProductIndexer,
) -> list[npt.NDArray[np.inexact]]:
    """Expand each (n_pts, N_d) array of 1D values to (n_pts, num_basis)."""
    table = indexer.table
    return [vals[:, table[:, d]] for d, vals in enumerate(vals_per_dim)]


def _compute_tensor_basis(
    vals_per_dim: Sequence[npt.NDArray[np.inexact]],
    indexer: TensorProductIndexer,
    out: npt.NDArray[np.inexact] | None = None,
) -> npt.NDArray[np.inexact]:
    """Combine 1D basis values into tensor-product basis values.

    Args:
        vals_per_dim (Sequence[npt.NDArray[np.inexact]]): For each axis d,
            the 1D basis values at the d-th coordinate of the points, with
            shape (n_pts, N_d).
        indexer (TensorProductIndexer): Indexer of shape (N_1, ..., N_D).
        out (npt.NDArray[np.inexact] | None): Optional array of shape
            (n_pts, num_basis) receiving the result. Defaults to None.

    Returns:
        npt.NDArray[np.inexact]: Array of shape (n_pts, num_basis); `out` if given.
    """
    factors = _gather_factors(vals_per_dim, indexer)
    if out is None:
        out = factors[0].copy()
    else:
        out[...] = factors[0]
    for factor in factors[1:]:
        out *= factor
    return out


def _compute_tensor_gradient(
    vals_per_dim: Sequence[npt.NDArray[np.inexact]],
    ders_per_dim: Sequence[npt.NDArray[np.inexact]],
    indexer: TensorProductIndexer,
    out: npt.NDArray[np.inexact] | None = None,
) -> npt.NDArray[np.inexact]:
    """Combine 1D values and derivatives into tensor-product basis gradients.

    The partial derivative along axis d of basis function k is the product of
    the 1D factors of k with the factor of axis d replaced by its derivative.

    Args:
        vals_per_dim (Sequence[npt.NDArray[np.inexact]]): 1D basis values per
            axis, each of shape (n_pts, N_d).
        ders_per_dim (Sequence[npt.NDArray[np.inexact]]): 1D basis
            derivatives per axis, with the same shapes.
        indexer (TensorProductIndexer): Indexer of shape (N_1, ..., N_D).
        out (npt.NDArray[np.inexact] | None): Optional array of shape
            (n_pts, num_basis, D) receiving the result. Defaults to None.

    Returns:
        npt.NDArray[np.inexact]: Array of shape (n_pts, num_basis, D).
    """
    val_factors = _gather_factors(vals_per_dim, indexer)
    der_factors = _gather_factors(ders_per_dim, indexer)
    dim = indexer.dim

    n_pts = val_factors[0].shape[0]
    if out is None:
        out = np.empty((n_pts, indexer.num_entries, dim), dtype=val_factors[0].dtype)
    for target in range(dim):
        partial = der_factors[target].copy()
        for d in range(dim):
            if d != target:
                partial *= val_factors[d]
        out[:, :, target] = partial
    return out
