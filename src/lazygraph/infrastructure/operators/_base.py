"""
Shared helpers for the concrete operations.

Operations work directly on NumPy storage laid out as ``(k, *dims)``. The
helpers here cover the rules several operations share: argument-count
checks, the elementwise shape rule with batch broadcasting, and the
reduction of a broadcast gradient back to the batch size of an argument.
"""

from typing import Sequence

import numpy as np

from ...domain._errors import ShapeError
from ...domain._shape import Shape
from ..tensor._tensor import Tensor


def check_num_args(name: str, arg_shapes: Sequence[Shape], expected: int) -> None:
    if len(arg_shapes) != expected:
        raise ShapeError(
            f"{name} expects {expected} argument(s), got {len(arg_shapes)}"
        )


def elementwise_shape(name: str, a: Shape, b: Shape) -> Shape:
    """
    Return the result shape of an elementwise binary operation.

    Dimensions must be equal. Batch sizes must be equal or one of them 1, in
    which case the single item is broadcast over the batch.

    Raises
    ------
    ShapeError
        If the shapes are not compatible.
    """
    if a.dims != b.dims or not a.has_compatible_batch(b):
        raise ShapeError(f"Shape mismatched in {name}. a: {a}, b: {b}")
    return a.resize_batch(max(a.batch_size, b.batch_size))


def reduce_to_batch(grad: np.ndarray, shape: Shape) -> np.ndarray:
    """
    Sum a (possibly batch-broadcast) gradient back to the layout of `shape`.
    """
    if grad.shape[0] != shape.batch_size:
        grad = grad.sum(axis=0, keepdims=True)
    return grad.reshape(shape.numpy_shape())


def result(shape: Shape, like: Tensor, data: np.ndarray) -> Tensor:
    """
    Wrap `data` as a tensor of `shape` on the device of `like`.
    """
    arr = np.ascontiguousarray(data, dtype=like.data.dtype)
    return Tensor(shape, like.device, arr.reshape(shape.numpy_shape()))


def broadcast_shape(a: Tensor, b: Tensor) -> Shape:
    return a.shape.resize_batch(max(a.shape.batch_size, b.shape.batch_size))
