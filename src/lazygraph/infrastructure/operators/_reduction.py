"""
Reductions and elementwise activations.

    ReLU:      y = max(x, 0)          dx += g * [y > 0]
    Sum:       y_k = sum_i x_{k,i}    dx_{k,i} += g_k
    BatchSum:  y_i = sum_k x_{k,i}    dx_{k,i} += g_i

`Sum` reduces every axis of each batch item to a scalar; `BatchSum`
reduces the batch axis only. Either is typically applied before `backward`
so the seeded node is a scalar.
"""

from typing import Sequence

import numpy as np

from ...domain._operation import Operation
from ...domain._shape import Shape
from ..tensor._tensor import Tensor
from ._base import check_num_args, result


class ReLU(Operation):
    def name(self) -> str:
        return "ReLU"

    def infer_output_shape(self, arg_shapes: Sequence[Shape]) -> Shape:
        check_num_args(self.name(), arg_shapes, 1)
        return arg_shapes[0]

    def forward(self, arg_values: Sequence[Tensor]) -> Tensor:
        (x,) = arg_values
        return result(x.shape, x, np.maximum(x.data, 0.0))

    def backward(self, cur_value, cur_grad, arg_values, arg_grads) -> None:
        mask = (cur_value.data > 0).astype(cur_grad.data.dtype)
        arg_grads[0].accumulate(cur_grad.data * mask)


class Sum(Operation):
    def name(self) -> str:
        return "Sum"

    def infer_output_shape(self, arg_shapes: Sequence[Shape]) -> Shape:
        check_num_args(self.name(), arg_shapes, 1)
        return Shape([], arg_shapes[0].batch_size)

    def forward(self, arg_values: Sequence[Tensor]) -> Tensor:
        (x,) = arg_values
        k = x.shape.batch_size
        return result(Shape([], k), x, x.data.reshape(k, -1).sum(axis=1))

    def backward(self, cur_value, cur_grad, arg_values, arg_grads) -> None:
        (x,) = arg_values
        layout = x.shape.numpy_shape()
        g = cur_grad.data.reshape((layout[0],) + (1,) * (len(layout) - 1))
        arg_grads[0].accumulate(np.broadcast_to(g, layout))


class BatchSum(Operation):
    def name(self) -> str:
        return "BatchSum"

    def infer_output_shape(self, arg_shapes: Sequence[Shape]) -> Shape:
        check_num_args(self.name(), arg_shapes, 1)
        return arg_shapes[0].resize_batch(1)

    def forward(self, arg_values: Sequence[Tensor]) -> Tensor:
        (x,) = arg_values
        return result(x.shape.resize_batch(1), x, x.data.sum(axis=0, keepdims=True))

    def backward(self, cur_value, cur_grad, arg_values, arg_grads) -> None:
        (x,) = arg_values
        arg_grads[0].accumulate(
            np.broadcast_to(cur_grad.data, x.shape.numpy_shape())
        )
