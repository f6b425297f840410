"""
Cross-device transfer.

`Copy` is the only way to move a value between devices inside a graph: it
declares its target device explicitly, so every operation downstream of it
inherits the target through device forwarding.
"""

from typing import Sequence

from ...domain._operation import Operation
from ...domain._shape import Shape
from ..devices._compute_device import ComputeDevice
from ..tensor._tensor import Tensor
from ._base import check_num_args


class Copy(Operation):
    """
    Copy a value onto another device.

    Parameters
    ----------
    device : ComputeDevice
        Target device.

    Notes
    -----
    The transfer is synchronous. The backward pass copies the gradient back
    to the device of the argument.
    """

    def __init__(self, device: ComputeDevice) -> None:
        self._device = device

    def name(self) -> str:
        return f"Copy({self._device.descriptor})"

    def declared_device(self) -> ComputeDevice:
        return self._device

    def infer_output_shape(self, arg_shapes: Sequence[Shape]) -> Shape:
        check_num_args(self.name(), arg_shapes, 1)
        return arg_shapes[0]

    def forward(self, arg_values: Sequence[Tensor]) -> Tensor:
        return self._device.copy_tensor(arg_values[0])

    def backward(self, cur_value, cur_grad, arg_values, arg_grads) -> None:
        target = arg_grads[0]
        target.accumulate(target.device.copy_tensor(cur_grad))
