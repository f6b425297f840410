"""
Tensor interface definitions.

This module defines the domain-level interface for tensor-like values that
flow through a computation graph. The interface captures only what the
graph engine relies on: a validity predicate (has the slot been computed
yet), the shape, the owning device and in-place gradient accumulation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ._shape import Shape
    from .device._device_protocol import DeviceLike


@runtime_checkable
class ITensor(Protocol):
    """
    Tensor interface.

    An `ITensor` is either *valid* (it carries storage on a device) or
    *empty*, standing for a value or gradient slot that has not been
    computed yet.
    """

    @property
    def shape(self) -> "Shape":
        """
        Return the shape of the tensor.
        """
        ...

    @property
    def device(self) -> "DeviceLike":
        """
        Return the device owning this tensor's storage.
        """
        ...

    def valid(self) -> bool:
        """
        Return True if the tensor carries storage.
        """
        ...

    def accumulate(self, delta: Any) -> None:
        """
        Add `delta` into this tensor in place.
        """
        ...
