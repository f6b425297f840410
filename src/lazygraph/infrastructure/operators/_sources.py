"""
Source operations: values that enter a graph from outside.

Both operations expose their value through `inner_value`, so the graph
never runs their `forward` and never memoizes a copy. They also keep the
gradient they receive, since the graph releases step gradients as soon as
a backward pass has propagated them.
"""

from typing import Optional, Sequence

from ...domain._errors import ShapeError
from ...domain._operation import Operation
from ...domain._shape import Shape
from ..devices._compute_device import ComputeDevice
from .._parameter import Parameter
from ..tensor._tensor import Tensor


class Input(Operation):
    """
    Constant input data.

    Parameters
    ----------
    shape : Shape
        Shape of the data.
    values : Sequence[float]
        Exactly `shape.size()` elements, batch item by batch item.
    device : ComputeDevice
        Device receiving the data.
    """

    def __init__(self, shape: Shape, values: Sequence[float], device: ComputeDevice) -> None:
        self._shape = shape
        self._device = device
        self._value = device.new_tensor_from_values(shape, values)
        self._grad: Optional[Tensor] = None

    def name(self) -> str:
        return "Input"

    def declared_device(self) -> ComputeDevice:
        return self._device

    def infer_output_shape(self, arg_shapes: Sequence[Shape]) -> Shape:
        if arg_shapes:
            raise ShapeError(f"Input takes no arguments, got {len(arg_shapes)}")
        return self._shape

    def inner_value(self) -> Tensor:
        return self._value

    def retained_gradient(self) -> Optional[Tensor]:
        return self._grad

    def forward(self, arg_values: Sequence[Tensor]) -> Tensor:
        return self._value

    def backward(self, cur_value, cur_grad, arg_values, arg_grads) -> None:
        if self._grad is None:
            self._grad = self._device.new_tensor(self._shape, 0.0)
        self._grad.accumulate(cur_grad)


class ParameterInput(Operation):
    """
    Reference to a `Parameter`.

    The parameter's value tensor is used as-is; gradients reaching this
    step are accumulated into the parameter's gradient.
    """

    def __init__(self, param: Parameter) -> None:
        self._param = param

    @property
    def parameter(self) -> Parameter:
        return self._param

    def name(self) -> str:
        return f"Parameter({self._param.name})"

    def declared_device(self) -> ComputeDevice:
        return self._param.device

    def infer_output_shape(self, arg_shapes: Sequence[Shape]) -> Shape:
        if arg_shapes:
            raise ShapeError(f"Parameter takes no arguments, got {len(arg_shapes)}")
        return self._param.shape

    def inner_value(self) -> Tensor:
        return self._param.value

    def retained_gradient(self) -> Tensor:
        return self._param.gradient

    def forward(self, arg_values: Sequence[Tensor]) -> Tensor:
        return self._param.value

    def backward(self, cur_value, cur_grad, arg_values, arg_grads) -> None:
        self._param.accumulate_gradient(cur_grad)
