"""
Tensor shape value type.

A `Shape` describes the per-axis dimensions of a value together with a
batch multiplier ``k``:

    Shape()          == Shape([1, 1, ...], 1): scalar
    Shape([n])       == Shape([n, 1, ...], 1): column vector
    Shape([n, m])    == Shape([n, m, 1, ...], 1): matrix
    Shape([...], k)  : k-parallelized data (mini-batch)

Missing trailing axes are implicitly 1, so trailing 1-sized axes are
dropped on construction and ``Shape([3, 1]) == Shape([3])``.
"""

from __future__ import annotations

from functools import reduce
from operator import mul
from typing import Iterable, Tuple

from typing_extensions import Self


class Shape:
    """
    Immutable description of tensor dimensionality and batch size.

    Parameters
    ----------
    dims : Iterable[int], optional
        Per-axis sizes. Defaults to an empty sequence (scalar).
    batch_size : int, optional
        Batch multiplier ``k``. Must be >= 1. Defaults to 1.

    Raises
    ------
    ValueError
        If any axis size or the batch size is not a positive integer.
    """

    __slots__ = ("_dims", "_k")

    def __init__(self, dims: Iterable[int] = (), batch_size: int = 1) -> None:
        normalized = [int(d) for d in dims]
        for d in normalized:
            if d < 1:
                raise ValueError(f"Invalid axis size {d} in {list(dims)!r}")
        if int(batch_size) < 1:
            raise ValueError(f"Invalid batch size {batch_size}")
        while normalized and normalized[-1] == 1:
            normalized.pop()
        self._dims: Tuple[int, ...] = tuple(normalized)
        self._k: int = int(batch_size)

    @property
    def dims(self) -> Tuple[int, ...]:
        """Normalized per-axis sizes (trailing 1-sized axes removed)."""
        return self._dims

    @property
    def batch_size(self) -> int:
        """Batch multiplier ``k``."""
        return self._k

    def dim_size(self, i: int) -> int:
        """
        Return the size of the i-th axis.

        Parameters
        ----------
        i : int
            Axis index. Axes beyond the stored ones have size 1.

        Returns
        -------
        int
            Size of the requested axis.
        """
        return self._dims[i] if i < len(self._dims) else 1

    def depth(self) -> int:
        """Number of stored (non-trivial trailing) axes."""
        return len(self._dims)

    def volume(self) -> int:
        """Number of elements in a single batch item."""
        return reduce(mul, self._dims, 1)

    def size(self) -> int:
        """
        Return the total number of elements, ``k * prod(dims)``.
        """
        return self._k * self.volume()

    def has_batch(self) -> bool:
        return self._k > 1

    def has_compatible_batch(self, other: "Shape") -> bool:
        """
        Check whether two shapes can be combined along the batch axis.

        Batch sizes are compatible when they are equal or one of them is 1
        (the single item is then broadcast over the batch).
        """
        return self._k == other._k or self._k == 1 or other._k == 1

    def resize_batch(self, batch_size: int) -> Self:
        """
        Return a copy of this shape with another batch size.
        """
        return type(self)(self._dims, batch_size)

    def numpy_shape(self) -> Tuple[int, ...]:
        """
        Return the storage layout ``(k, *dims)`` used by NumPy-backed tensors.
        """
        return (self._k,) + self._dims

    def to_string(self) -> str:
        """
        Return the encoded representation ``"[n,m,...]xk"``.
        """
        return "[" + ",".join(str(d) for d in self._dims) + f"]x{self._k}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Shape):
            return NotImplemented
        return self._dims == other._dims and self._k == other._k

    def __hash__(self) -> int:
        return hash((self._dims, self._k))

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Shape({list(self._dims)!r}, {self._k})"
