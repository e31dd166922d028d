"""Tolerance presets for floating-point comparisons in element evaluations.

Complex dtypes share the tolerances of their real component, so that
complex-step evaluations are judged with the same thresholds as real ones.
"""

from functools import cache
from typing import Any, NamedTuple, cast

import numpy as np
from numpy import typing as npt

_COMPLEX_TO_REAL = {
    np.complex64: np.float32,
    np.complex128: np.float64,
    np.clongdouble: np.longdouble,
}


@cache
def _real_float_dtype_by_name(name: str) -> np.dtype[np.floating[Any]]:
    """Cached validator mapping a dtype name to its real floating dtype.

    Args:
        name (str): Canonical NumPy dtype name (e.g., "float64", "complex128").

    Returns:
        np.dtype[np.floating[Any]]: The dtype itself for real floating types,
        the dtype of the real component for complex ones.

    Raises:
        ValueError: If dtype is neither a floating nor a complex type.
    """
    dtype_obj = np.dtype(name)
    real_type = _COMPLEX_TO_REAL.get(dtype_obj.type, dtype_obj.type)
    if real_type not in (np.float16, np.float32, np.float64, np.longdouble):
        raise ValueError(f"Unsupported dtype: {name}")
    return cast(np.dtype[np.floating[Any]], np.dtype(real_type))


def _real_float_dtype(dtype: npt.DTypeLike) -> np.dtype[np.floating[Any]]:
    """Normalize a dtype-like into the floating dtype its tolerances come from."""
    return _real_float_dtype_by_name(np.dtype(dtype).name)


class _TolerancePreset(NamedTuple):
    """Tolerance values for each supported floating-point precision."""

    float16: float
    float32: float
    float64: float
    longdouble: float


_TOLERANCE_PRESETS = {
    "default": _TolerancePreset(1e-3, 1e-6, 1e-12, 1e-15),
    "strict": _TolerancePreset(1e-4, 1e-7, 1e-15, 1e-18),
    "conservative": _TolerancePreset(1e-2, 1e-5, 1e-10, 1e-12),
}


def _get_tolerance(dtype: npt.DTypeLike, preset: _TolerancePreset) -> float:
    real_type = _real_float_dtype(dtype).type
    if real_type == np.float16:
        return preset.float16
    elif real_type == np.float32:
        return preset.float32
    elif real_type == np.float64:
        return preset.float64
    else:
        return preset.longdouble


def get_default_tolerance(dtype: npt.DTypeLike) -> float:
    """Get the tolerance used by default for singularity and equality checks.

    Args:
        dtype (npt.DTypeLike): NumPy floating-point or complex data type.

    Returns:
        float: Default tolerance for the given dtype.

    Raises:
        ValueError: If dtype is not a floating-point or complex type.

    Example:
        >>> get_default_tolerance(np.float32)
        1e-06
        >>> get_default_tolerance("complex128")
        1e-12
    """
    return _get_tolerance(dtype, _TOLERANCE_PRESETS["default"])


def get_strict_tolerance(dtype: npt.DTypeLike) -> float:
    """Get a strict tolerance, close to machine precision, for the given dtype.

    Raises:
        ValueError: If dtype is not a floating-point or complex type.
    """
    return _get_tolerance(dtype, _TOLERANCE_PRESETS["strict"])


def get_conservative_tolerance(dtype: npt.DTypeLike) -> float:
    """Get a loose tolerance for comparisons that accumulate round-off.

    Used, for instance, when comparing analytic derivatives against
    numerically differentiated ones.

    Raises:
        ValueError: If dtype is not a floating-point or complex type.
    """
    return _get_tolerance(dtype, _TOLERANCE_PRESETS["conservative"])


def get_machine_epsilon(dtype: npt.DTypeLike) -> float:
    """Get machine epsilon of the (real component of the) given dtype.

    Raises:
        ValueError: If dtype is not a floating-point or complex type.
    """
    return float(np.finfo(_real_float_dtype(dtype)).eps)
