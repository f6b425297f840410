"""
Trainable parameter storage.

A `Parameter` owns a value tensor and a gradient tensor that outlive any
single computation graph. Graphs refer to a parameter through the
`ParameterInput` operation: its value is used directly as the step's inner
value, and every backward pass reaching that step accumulates into the
parameter's gradient.

Design notes
------------
- Gradients accumulate across backward passes until `reset_gradient` is
  called, which is what optimizers expect between updates.
- Update rules are not part of this package; callers read `value` and
  `gradient` and write back through `value.data`.
"""

from __future__ import annotations

from typing import Sequence, Union

from ..domain._shape import Shape
from .devices._compute_device import ComputeDevice
from .tensor._tensor import Tensor


class Parameter:
    """
    Named value/gradient pair living on a device.

    Parameters
    ----------
    name : str
        Identifier used in diagnostics.
    shape : Shape
        Shape of the parameter.
    device : ComputeDevice
        Device owning the value and gradient.
    init : float or Sequence[float], optional
        Either a scalar used to fill the value, or exactly `shape.size()`
        elements. Defaults to 0.0.

    Raises
    ------
    ValueError
        If `init` is a sequence of the wrong length, or the shape is batched.
    """

    def __init__(
        self,
        name: str,
        shape: Shape,
        device: ComputeDevice,
        init: Union[float, Sequence[float]] = 0.0,
    ) -> None:
        if shape.has_batch():
            raise ValueError(f"Parameter '{name}' cannot have a batched shape {shape}")
        self._name = name
        self._shape = shape
        self._device = device
        if isinstance(init, (int, float)):
            self._value = device.new_tensor(shape, float(init))
        else:
            self._value = device.new_tensor_from_values(shape, init)
        self._gradient = device.new_tensor(shape, 0.0)

    @property
    def name(self) -> str:
        return self._name

    @property
    def shape(self) -> Shape:
        return self._shape

    @property
    def device(self) -> ComputeDevice:
        return self._device

    @property
    def value(self) -> Tensor:
        return self._value

    @property
    def gradient(self) -> Tensor:
        """
        Return the gradient accumulated since the last `reset_gradient`.
        """
        return self._gradient

    def reset_gradient(self) -> None:
        """
        Set the accumulated gradient back to zeros.

        Notes
        -----
        Training loops call this before each backward pass to avoid
        accumulating gradients across steps.
        """
        self._gradient = self._device.new_tensor(self._shape, 0.0)

    def accumulate_gradient(self, grad: Tensor) -> None:
        """
        Add an incoming gradient contribution.
        """
        self._gradient.accumulate(grad)

    def __repr__(self) -> str:
        return f"Parameter(name={self._name!r}, shape={self._shape}, device={self._device})"
