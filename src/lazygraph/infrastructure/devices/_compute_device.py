"""
Concrete devices owning tensor storage.

A `ComputeDevice` pairs a `Device` descriptor with the allocation and
transfer routines the graph engine needs. The routines are selected by
device type through the shared control-path manager: CPU slots are backed
by NumPy (see `_cpu_backend`), and device types without a registered
backend raise `DeviceNotSupportedError` when used.

Values are compared by descriptor, so two `ComputeDevice("cpu:1")`
instances address the same device.
"""

from __future__ import annotations

from typing import Sequence, Union

from ...domain._errors import DeviceNotSupportedError
from ...domain._shape import Shape
from ...domain.device._device import Device, DeviceType
from ...domain.utils._control_path import create_path_builder
from ..tensor._tensor import Tensor

device_control_path_manager = create_path_builder("kind")
"""Control-path manager dispatching device routines on `self.kind`."""


def device_not_supported(method, device: "ComputeDevice") -> DeviceNotSupportedError:
    """Build the error raised when a device type has no registered backend."""
    return DeviceNotSupportedError(method.__name__, str(device.descriptor))


class ComputeDevice:
    """
    Device owning the storage of graph values.

    Parameters
    ----------
    device : Union[str, Device], optional
        Descriptor of the device, e.g. "cpu", "cpu:1" or "cuda:0".
        Defaults to "cpu".
    """

    def __init__(self, device: Union[str, Device] = "cpu") -> None:
        self._descriptor = device if isinstance(device, Device) else Device(device)

    @property
    def descriptor(self) -> Device:
        return self._descriptor

    @property
    def kind(self) -> DeviceType:
        """Device type used to select the storage backend."""
        return self._descriptor.type

    def new_tensor(self, shape: Shape, value: float) -> Tensor:
        """
        Allocate a tensor filled with a scalar.

        Parameters
        ----------
        shape : Shape
            Shape of the new tensor.
        value : float
            Value written into every element.

        Returns
        -------
        Tensor
            A new tensor owned by this device.
        """
        raise NotImplementedError

    def new_tensor_from_values(self, shape: Shape, values: Sequence[float]) -> Tensor:
        """
        Allocate a tensor holding the given elements.

        Parameters
        ----------
        shape : Shape
            Shape of the new tensor.
        values : Sequence[float]
            Exactly `shape.size()` elements, batch item by batch item.

        Raises
        ------
        ValueError
            If the number of elements does not match the shape.
        """
        raise NotImplementedError

    def copy_tensor(self, tensor: Tensor) -> Tensor:
        """
        Copy a tensor (possibly owned by another device) onto this device.
        """
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ComputeDevice):
            return NotImplemented
        return self._descriptor == other._descriptor

    def __hash__(self) -> int:
        return hash(self._descriptor)

    def __repr__(self) -> str:
        return f"ComputeDevice('{self._descriptor}')"



# Registers the NumPy routines for CPU slots on `ComputeDevice`.
from . import _cpu_backend  # noqa: E402,F401
