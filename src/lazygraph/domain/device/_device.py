"""
Device descriptor utilities.

This module defines lightweight value types naming a computation device
(a CPU slot or a CUDA GPU) independently of any backend:

- `DeviceType`: an enumeration of supported device categories
- `Device`: a descriptor that validates and normalizes user-facing device
  strings such as "cpu", "cpu:1" or "cuda:0"

Several CPU descriptors with distinct indices may coexist. They let a
single machine host independent devices, which is how multi-device graphs
are exercised without GPUs.
"""

from enum import Enum
import re


class DeviceType(Enum):
    """
    Enumeration of supported device categories.

    Attributes
    ----------
    CPU : DeviceType
        Central Processing Unit.
    CUDA : DeviceType
        NVIDIA CUDA-enabled Graphics Processing Unit.
    """

    CPU = "cpu"
    CUDA = "cuda"


class Device:
    """
    Concrete computation device descriptor.

    Parameters
    ----------
    device : str
        Device identifier string. Must be one of:
        - "cpu" (same as "cpu:0")
        - "cpu:<index>"
        - "cuda:<index>", where <index> is a non-negative integer

    Raises
    ------
    ValueError
        If the provided device string does not match the supported formats.

    Notes
    -----
    This class does not allocate or manage any backend resources; see
    `lazygraph.infrastructure.devices` for devices that own storage.
    """

    __slots__ = ("type", "index")

    _PATTERN = re.compile(r"^(cpu|cuda):(\d+)$")

    def __init__(self, device: str):
        if device == "cpu":
            self.type = DeviceType.CPU
            self.index = 0
            return
        m = self._PATTERN.match(device)
        if not m:
            raise ValueError(
                f"Invalid device '{device}'. Expected 'cpu', 'cpu:<index>' "
                f"or 'cuda:<index>'"
            )
        self.type = DeviceType(m.group(1))
        self.index = int(m.group(2))

    def __str__(self) -> str:
        """
        Return the canonical string representation of the device.

        Returns
        -------
        str
            "cpu" for the first CPU slot, otherwise "<type>:<index>".
        """
        if self.type is DeviceType.CPU and self.index == 0:
            return "cpu"
        return f"{self.type.value}:{self.index}"

    def __repr__(self) -> str:
        return f"Device('{self}')"

    def __eq__(self, other: object) -> bool:
        """
        Compare two descriptors for semantic equality.

        Descriptors are equal if they share the device type and index.
        """
        if not isinstance(other, Device):
            return NotImplemented
        return (self.type, self.index) == (other.type, other.index)

    def __hash__(self) -> int:
        return hash((self.type, self.index))

    def is_cpu(self) -> bool:
        """
        Check whether this device represents a CPU slot.
        """
        return self.type is DeviceType.CPU

    def is_cuda(self) -> bool:
        """
        Check whether this device represents a CUDA GPU.
        """
        return self.type is DeviceType.CUDA
