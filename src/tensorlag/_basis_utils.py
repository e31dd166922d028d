"""Input normalization and validation shared by the element families."""

from __future__ import annotations

import numpy as np
from numpy import typing as npt

from .exceptions import DimensionMismatchError

_SUPPORTED_DTYPES = (np.float32, np.float64, np.complex64, np.complex128)


def _as_supported_array(pts: npt.ArrayLike) -> npt.NDArray[np.inexact]:
    """Convert input to an array of a supported dtype.

    float32, float64, complex64 and complex128 are preserved; any other type
    (integers, booleans, long doubles) is converted to float64, or to
    complex128 if it is complex.
    """
    arr = np.asarray(pts)
    if arr.dtype.type not in _SUPPORTED_DTYPES:
        target = np.complex128 if np.iscomplexobj(arr) else np.float64
        arr = arr.astype(target)
    return arr


def _normalize_points_1D(pts: npt.ArrayLike) -> tuple[npt.NDArray[np.inexact], tuple[int, ...]]:
    """Normalize 1D evaluation coordinates to a contiguous 1D array.

    Returns:
        tuple[npt.NDArray[np.inexact], tuple[int, ...]]: The flattened
        coordinates and the shape of the input (``()`` for a scalar), used to
        restore the output shape.
    """
    arr = _as_supported_array(pts)
    return np.ascontiguousarray(arr.ravel()), arr.shape


def _normalize_points(
    pts: npt.ArrayLike, dim: int
) -> tuple[npt.NDArray[np.inexact], bool]:
    """Normalize reference points of a dim-dimensional element.

    A single point has shape (dim,); a batch of P points has shape (P, dim).
    In 1D a scalar is also accepted as a single point.

    Returns:
        tuple[npt.NDArray[np.inexact], bool]: Points as an array of shape
        (P, dim) and whether the input was a single point.

    Raises:
        DimensionMismatchError: If the points do not have dim coordinates.
    """
    arr = _as_supported_array(pts)
    if arr.ndim == 0 and dim == 1:
        return arr.reshape(1, 1), True
    if arr.ndim == 1 and arr.shape[0] == dim:
        return arr.reshape(1, dim), True
    if arr.ndim == 2 and arr.shape[1] == dim:  # noqa: PLR2004
        return arr, False
    raise DimensionMismatchError(
        f"Points must have shape ({dim},) or (n_points, {dim}), got {arr.shape}"
    )


def _validate_out_array(
    out: npt.NDArray[np.inexact],
    expected_shape: tuple[int, ...],
    expected_dtype: npt.DTypeLike,
) -> None:
    """Validate a caller-supplied output array.

    Follows NumPy's style for output arrays: the array must have exactly the
    expected shape and dtype, be writeable and be C-contiguous, so that the
    result can be written through a reshaped view of it.

    Args:
        out (npt.NDArray[np.inexact]): The output array to validate.
        expected_shape (tuple[int, ...]): The expected shape of the output array.
        expected_dtype (npt.DTypeLike): The expected dtype, the one of the
            evaluation points.

    Raises:
        DimensionMismatchError: If the array shape does not match.
        ValueError: If the dtype does not match or the array is read-only or
            not C-contiguous.
    """
    if out.shape != expected_shape:
        raise DimensionMismatchError(
            f"Output array has shape {out.shape}, but expected shape {expected_shape}"
        )
    if out.dtype != expected_dtype:
        raise ValueError(f"Output array has dtype {out.dtype}, but expected dtype {expected_dtype}")
    if not out.flags.writeable:
        raise ValueError("Output array is not writeable")
    if not out.flags.c_contiguous:
        raise ValueError("Output array must be C-contiguous")


def _batched_output(
    out: npt.NDArray[np.inexact] | None,
    n_pts: int,
    trailing: tuple[int, ...],
    dtype: npt.DTypeLike,
    single: bool,
) -> tuple[npt.NDArray[np.inexact], npt.NDArray[np.inexact]]:
    """Allocate or validate the output of a point evaluation.

    The caller-facing shape is ``trailing`` for a single point and
    ``(n_pts, *trailing)`` for a batch.

    Returns:
        tuple[npt.NDArray[np.inexact], npt.NDArray[np.inexact]]: The array
        returned to the caller and a view of it of shape (n_pts, *trailing).

    Raises:
        DimensionMismatchError: If out has the wrong shape.
        ValueError: If out has the wrong dtype, is read-only or is not
            C-contiguous.
    """
    shape = trailing if single else (n_pts, *trailing)
    if out is None:
        out = np.empty(shape, dtype=dtype)
    else:
        _validate_out_array(out, shape, dtype)
    return out, out.reshape(n_pts, *trailing)


def _validate_coefficients(coeffs: npt.ArrayLike, num_basis: int) -> npt.NDArray[np.inexact]:
    """Validate a coefficient vector with one entry per basis function.

    Raises:
        DimensionMismatchError: If coeffs is not a 1D array of length num_basis.
    """
    arr = _as_supported_array(coeffs)
    if arr.shape != (num_basis,):
        raise DimensionMismatchError(
            f"Coefficients must have shape ({num_basis},), got {arr.shape}"
        )
    return arr


def _validate_vertices(
    vertices: npt.ArrayLike, num_basis: int, dim: int
) -> npt.NDArray[np.inexact]:
    """Validate the physical vertex positions of an element.

    Raises:
        DimensionMismatchError: If vertices does not have shape (num_basis, dim).
        ValueError: If any coordinate is not finite.
    """
    arr = _as_supported_array(vertices)
    if arr.shape != (num_basis, dim):
        raise DimensionMismatchError(
            f"Vertices must have shape ({num_basis}, {dim}), got {arr.shape}"
        )
    if not np.all(np.isfinite(arr)):
        raise ValueError("Vertices must be finite")
    return arr


def _restore_single(arr: npt.NDArray[np.inexact], single: bool) -> npt.NDArray[np.inexact]:
    """Drop the leading points axis of a result computed for a single point."""
    return arr[0] if single else arr


def _interpolate(
    basis_vals: npt.NDArray[np.inexact], coeffs: npt.NDArray[np.inexact]
) -> npt.NDArray[np.inexact]:
    """Weighted sum of basis values: sum_i coeffs[i] * basis_vals[..., i]."""
    return np.einsum("...i,i->...", basis_vals, coeffs)


def _interpolate_gradient(
    basis_grads: npt.NDArray[np.inexact], coeffs: npt.NDArray[np.inexact]
) -> npt.NDArray[np.inexact]:
    """Weighted sum of basis gradients: sum_i coeffs[i] * basis_grads[..., i, :]."""
    return np.einsum("...id,i->...d", basis_grads, coeffs)
