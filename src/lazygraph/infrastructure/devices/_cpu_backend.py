"""
NumPy storage routines for CPU devices.

This module registers the CPU implementations of the `ComputeDevice`
allocation and transfer routines via `device_control_path_manager`:

- `new_tensor_cpu`: allocates a tensor filled with a scalar.
- `new_tensor_from_values_cpu`: allocates a tensor from a flat sequence.
- `copy_tensor_cpu`: copies a tensor from any device into host memory
  owned by this device.

Notes
-----
Every CPU index ("cpu", "cpu:1", ...) shares these routines; the index only
distinguishes devices logically.
"""

from typing import Sequence

import numpy as np

from ...domain._shape import Shape
from ...domain.device._device import DeviceType
from ..tensor._tensor import DEFAULT_DTYPE, Tensor
from ._compute_device import (
    ComputeDevice,
    device_control_path_manager,
    device_not_supported,
)


@device_control_path_manager(
    ComputeDevice, ComputeDevice.new_tensor, DeviceType.CPU, device_not_supported
)
def new_tensor_cpu(self: ComputeDevice, shape: Shape, value: float) -> Tensor:
    data = np.full(shape.numpy_shape(), value, dtype=DEFAULT_DTYPE)
    return Tensor(shape, self, data)


@device_control_path_manager(
    ComputeDevice,
    ComputeDevice.new_tensor_from_values,
    DeviceType.CPU,
    device_not_supported,
)
def new_tensor_from_values_cpu(
    self: ComputeDevice, shape: Shape, values: Sequence[float]
) -> Tensor:
    """
    Allocate a CPU tensor holding `values`.

    Raises
    ------
    ValueError
        If the number of elements does not match `shape.size()`.
    """
    arr = np.asarray(values, dtype=DEFAULT_DTYPE).reshape(-1)
    if arr.size != shape.size():
        raise ValueError(
            f"Data sizes mismatched: required {shape.size()} ({shape}), "
            f"but got {arr.size}"
        )
    return Tensor(shape, self, arr.reshape(shape.numpy_shape()))


@device_control_path_manager(
    ComputeDevice, ComputeDevice.copy_tensor, DeviceType.CPU, device_not_supported
)
def copy_tensor_cpu(self: ComputeDevice, tensor: Tensor) -> Tensor:
    # Source storage is always host memory for now.
    return Tensor(tensor.shape, self, np.array(tensor.data, dtype=DEFAULT_DTYPE))
