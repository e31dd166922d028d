"""Flat index <-> multi-index bookkeeping for tensor-product elements.

A D-dimensional tensor-product element with ``N_d`` entries along axis ``d``
enumerates its basis functions (and, identically, its coefficients, vertices
and reference nodes) with the first axis varying fastest::

    flat = i_1 + i_2 * N_1 + i_3 * N_1 * N_2 + i_4 * N_1 * N_2 * N_3

so that moving one step along reference axis ``d`` is a fixed stride
``N_1 * ... * N_{d-1}`` in the flat layout. Every consumer in the package
goes through :class:`TensorProductIndexer` instead of repeating this
arithmetic.
"""

from __future__ import annotations

import operator
from collections.abc import Iterable

import numpy as np
import numpy.typing as npt

from .exceptions import DimensionMismatchError

MAX_DIM = 4


class TensorProductIndexer:
    """Bijection between flat indices and per-axis indices.

    Attributes are immutable after construction; the multi-index table is
    computed once and shared read-only.
    """

    def __init__(self, shape: Iterable[int]) -> None:
        """Initialize the indexer.

        Args:
            shape (Iterable[int]): Number of entries along each axis, first
                axis first. Between 1 and 4 axes.

        Raises:
            ValueError: If the number of axes is not between 1 and 4 or any
                axis is empty.
        """
        self._shape: tuple[int, ...] = tuple(int(n) for n in shape)
        if not 1 <= len(self._shape) <= MAX_DIM:
            raise ValueError(f"dimension must be between 1 and {MAX_DIM}, got {len(self._shape)}")
        if any(n < 1 for n in self._shape):
            raise ValueError("All axes must have at least 1 entry")

        strides = [1]
        for n in self._shape[:-1]:
            strides.append(strides[-1] * n)
        self._strides: tuple[int, ...] = tuple(strides)
        self._num_entries = strides[-1] * self._shape[-1]

        # Column d holds i_d for every flat index, in flat order.
        flat = np.arange(self._num_entries, dtype=np.int64)
        table = (flat[:, None] // np.array(self._strides, dtype=np.int64)) % np.array(
            self._shape, dtype=np.int64
        )
        table.setflags(write=False)
        self._table: npt.NDArray[np.int64] = table

    def __repr__(self) -> str:
        return f"TensorProductIndexer(shape={self._shape})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TensorProductIndexer):
            return NotImplemented
        return self._shape == other._shape

    def __hash__(self) -> int:
        return hash(self._shape)

    @property
    def dim(self) -> int:
        """Number of axes."""
        return len(self._shape)

    @property
    def shape(self) -> tuple[int, ...]:
        """Number of entries along each axis."""
        return self._shape

    @property
    def strides(self) -> tuple[int, ...]:
        """Flat-index increment of a unit step along each axis."""
        return self._strides

    @property
    def num_entries(self) -> int:
        """Total number of flat indices."""
        return self._num_entries

    @property
    def table(self) -> npt.NDArray[np.int64]:
        """Read-only array of shape (num_entries, dim); row k is multi_index(k)."""
        return self._table

    def flat_index(self, *multi: int) -> int:
        """Get the flat index of the multi-index ``(i_1, ..., i_D)``.

        Raises:
            DimensionMismatchError: If the number of indices is not dim.
            IndexError: If any index is out of range.
            TypeError: If any index is not an integer.
        """
        if len(multi) != self.dim:
            raise DimensionMismatchError(
                f"Expected {self.dim} indices, got {len(multi)}"
            )
        flat = 0
        for axis, (i, n, stride) in enumerate(zip(multi, self._shape, self._strides)):
            i = operator.index(i)
            if not 0 <= i < n:
                raise IndexError(f"Index {i} out of range for axis {axis} of size {n}")
            flat += i * stride
        return flat

    def multi_index(self, flat: int) -> tuple[int, ...]:
        """Get the multi-index ``(i_1, ..., i_D)`` of a flat index.

        Raises:
            IndexError: If flat is out of range.
            TypeError: If flat is not an integer.
        """
        flat = operator.index(flat)
        if not 0 <= flat < self._num_entries:
            raise IndexError(f"Flat index {flat} out of range for {self._num_entries} entries")
        return tuple(int(i) for i in self._table[flat])

    def flat_indices(self, multi: npt.ArrayLike) -> npt.NDArray[np.int64]:
        """Vectorised flat_index for an array of multi-indices.

        Args:
            multi (npt.ArrayLike): Integer array of shape (..., dim).

        Returns:
            npt.NDArray[np.int64]: Flat indices, of shape multi.shape[:-1].

        Raises:
            DimensionMismatchError: If the last axis does not have length dim.
            IndexError: If any index is out of range.
        """
        multi_arr = np.asarray(multi, dtype=np.int64)
        if multi_arr.ndim == 0 or multi_arr.shape[-1] != self.dim:
            raise DimensionMismatchError(
                f"Multi-indices must have a last axis of length {self.dim}"
            )
        if np.any(multi_arr < 0) or np.any(multi_arr >= np.array(self._shape)):
            raise IndexError("Multi-index out of range")
        return multi_arr @ np.array(self._strides, dtype=np.int64)

    def corner_indices(self) -> npt.NDArray[np.int64]:
        """Get the flat indices of the 2^dim corner entries.

        Corners are ordered like the entries of a 2 x ... x 2 indexer: corner
        ``c`` has, along axis ``d``, the last index if bit ``d`` of ``c`` is
        set and the first one otherwise.
        """
        corners = TensorProductIndexer((2,) * self.dim).table
        return self.flat_indices(corners * (np.array(self._shape, dtype=np.int64) - 1))
