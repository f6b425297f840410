"""
Elementwise arithmetic operations.

Binary operations require equal dimensions and compatible batch sizes (a
batch of 1 is broadcast over the other operand's batch). Their backward
passes sum broadcast gradients back over the batch axis.

Implements:

    Add:       y = a + b        da += g,        db += g
    Subtract:  y = a - b        da += g,        db -= g
    Multiply:  y = a * b        da += g * b,    db += g * a
    Scale:     y = c * x        dx += c * g
    AddConst:  y = x + c        dx += g
    Negate:    y = -x           dx -= g
"""

from typing import Sequence

from ...domain._operation import Operation
from ...domain._shape import Shape
from ..tensor._tensor import Tensor
from ._base import (
    broadcast_shape,
    check_num_args,
    elementwise_shape,
    reduce_to_batch,
    result,
)


class _Binary(Operation):
    def infer_output_shape(self, arg_shapes: Sequence[Shape]) -> Shape:
        check_num_args(self.name(), arg_shapes, 2)
        return elementwise_shape(self.name(), arg_shapes[0], arg_shapes[1])


class _Unary(Operation):
    def infer_output_shape(self, arg_shapes: Sequence[Shape]) -> Shape:
        check_num_args(self.name(), arg_shapes, 1)
        return arg_shapes[0]


class Add(_Binary):
    def name(self) -> str:
        return "Add"

    def forward(self, arg_values: Sequence[Tensor]) -> Tensor:
        a, b = arg_values
        return result(broadcast_shape(a, b), a, a.data + b.data)

    def backward(self, cur_value, cur_grad, arg_values, arg_grads) -> None:
        a, b = arg_values
        arg_grads[0].accumulate(reduce_to_batch(cur_grad.data, a.shape))
        arg_grads[1].accumulate(reduce_to_batch(cur_grad.data, b.shape))


class Subtract(_Binary):
    def name(self) -> str:
        return "Subtract"

    def forward(self, arg_values: Sequence[Tensor]) -> Tensor:
        a, b = arg_values
        return result(broadcast_shape(a, b), a, a.data - b.data)

    def backward(self, cur_value, cur_grad, arg_values, arg_grads) -> None:
        a, b = arg_values
        arg_grads[0].accumulate(reduce_to_batch(cur_grad.data, a.shape))
        arg_grads[1].accumulate(reduce_to_batch(-cur_grad.data, b.shape))


class Multiply(_Binary):
    def name(self) -> str:
        return "Multiply"

    def forward(self, arg_values: Sequence[Tensor]) -> Tensor:
        a, b = arg_values
        return result(broadcast_shape(a, b), a, a.data * b.data)

    def backward(self, cur_value, cur_grad, arg_values, arg_grads) -> None:
        a, b = arg_values
        g = cur_grad.data
        arg_grads[0].accumulate(reduce_to_batch(g * b.data, a.shape))
        arg_grads[1].accumulate(reduce_to_batch(g * a.data, b.shape))


class Scale(_Unary):
    """
    Multiply by a constant factor.

    Parameters
    ----------
    factor : float
        Constant multiplier.
    """

    def __init__(self, factor: float) -> None:
        self._factor = float(factor)

    def name(self) -> str:
        return f"Scale({self._factor:g})"

    def forward(self, arg_values: Sequence[Tensor]) -> Tensor:
        (x,) = arg_values
        return result(x.shape, x, self._factor * x.data)

    def backward(self, cur_value, cur_grad, arg_values, arg_grads) -> None:
        arg_grads[0].accumulate(self._factor * cur_grad.data)


class AddConst(_Unary):
    """
    Add a constant to every element.
    """

    def __init__(self, k: float) -> None:
        self._k = float(k)

    def name(self) -> str:
        return f"AddConst({self._k:g})"

    def forward(self, arg_values: Sequence[Tensor]) -> Tensor:
        (x,) = arg_values
        return result(x.shape, x, x.data + self._k)

    def backward(self, cur_value, cur_grad, arg_values, arg_grads) -> None:
        arg_grads[0].accumulate(cur_grad.data)


class Negate(_Unary):
    def name(self) -> str:
        return "Negate"

    def forward(self, arg_values: Sequence[Tensor]) -> Tensor:
        (x,) = arg_values
        return result(x.shape, x, -x.data)

    def backward(self, cur_value, cur_grad, arg_values, arg_grads) -> None:
        arg_grads[0].accumulate(-cur_grad.data)
