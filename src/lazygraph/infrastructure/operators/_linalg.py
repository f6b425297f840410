"""
Matrix multiplication.

Operands are at most 2-D: a shape ``[n]`` is treated as the column vector
``[n, 1]``. Batch sizes follow the elementwise rule (equal, or 1 broadcast
over the other operand).

    y = a @ b
    da += g @ b^T
    db += a^T @ g
"""

from typing import Sequence

import numpy as np

from ...domain._errors import ShapeError
from ...domain._operation import Operation
from ...domain._shape import Shape
from ..tensor._tensor import Tensor
from ._base import check_num_args, reduce_to_batch, result


def _as_matrices(t: Tensor) -> np.ndarray:
    s = t.shape
    return t.data.reshape(s.batch_size, s.dim_size(0), s.dim_size(1))


class MatMul(Operation):
    def name(self) -> str:
        return "MatMul"

    def infer_output_shape(self, arg_shapes: Sequence[Shape]) -> Shape:
        check_num_args(self.name(), arg_shapes, 2)
        a, b = arg_shapes
        if (
            a.depth() > 2
            or b.depth() > 2
            or a.dim_size(1) != b.dim_size(0)
            or not a.has_compatible_batch(b)
        ):
            raise ShapeError(f"Shape mismatched in {self.name()}. a: {a}, b: {b}")
        return Shape(
            [a.dim_size(0), b.dim_size(1)], max(a.batch_size, b.batch_size)
        )

    def forward(self, arg_values: Sequence[Tensor]) -> Tensor:
        a, b = arg_values
        out = np.matmul(_as_matrices(a), _as_matrices(b))
        shape = Shape(out.shape[1:], out.shape[0])
        return result(shape, a, out)

    def backward(self, cur_value, cur_grad, arg_values, arg_grads) -> None:
        a, b = arg_values
        am, bm = _as_matrices(a), _as_matrices(b)
        g = cur_grad.data.reshape(
            cur_value.shape.batch_size,
            cur_value.shape.dim_size(0),
            cur_value.shape.dim_size(1),
        )
        ga = np.matmul(g, np.swapaxes(bm, 1, 2))
        gb = np.matmul(np.swapaxes(am, 1, 2), g)
        arg_grads[0].accumulate(reduce_to_batch(ga, a.shape))
        arg_grads[1].accumulate(reduce_to_batch(gb, b.shape))
