"""
Device capability contract for lazygraph.

The graph engine never allocates storage itself. Whenever it needs a fresh
tensor (the seed gradient of `Graph.backward` or a zero-initialized
gradient accumulator) it asks the device that owns the value. This module
describes that capability structurally, so the engine does not depend on a
concrete device class.

Design notes
------------
- Uses `typing.Protocol` and `@runtime_checkable` to allow both static and
  runtime validation of device-like objects.
- Devices are referenced, never owned, by graph records; their lifetime is
  managed by user code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence, runtime_checkable

from ._device import Device

if TYPE_CHECKING:
    from .._shape import Shape
    from .._tensor import ITensor


@runtime_checkable
class DeviceLike(Protocol):
    """
    Duck-typed device contract.

    Any object that provides these members can own values in a graph,
    regardless of its concrete class identity.
    """

    @property
    def descriptor(self) -> Device: ...

    def new_tensor(self, shape: "Shape", value: float) -> "ITensor": ...

    def new_tensor_from_values(
        self, shape: "Shape", values: Sequence[float]
    ) -> "ITensor": ...

    def copy_tensor(self, tensor: "ITensor") -> "ITensor": ...
