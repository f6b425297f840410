"""
Bookkeeping records stored by a `Graph`.

- `Address` points at one output slot of one step without copying it.
- `NodeInfo` is the per-slot record: shape, owning device, the lazily
  computed value and gradient, and the ids of the steps consuming it.
- `FunctionInfo` is the per-step record: the owned operation, its argument
  addresses and its output slots.

Steps are stored in an append-only list, so addresses are plain indices
and every argument address of step ``i`` has ``fid < i``.
"""

from dataclasses import dataclass, field
from typing import List, NamedTuple

from ...domain._operation import Operation
from ...domain._shape import Shape
from ...domain.device._device_protocol import DeviceLike
from ..tensor._tensor import Tensor


class Address(NamedTuple):
    """
    Location of a produced value: step id and output slot id.
    """

    fid: int
    vid: int


@dataclass
class NodeInfo:
    """
    Record of a single output slot.

    Attributes
    ----------
    shape : Shape
        Inferred shape of the value, fixed at construction.
    device : DeviceLike
        Device owning the value. Referenced, not owned.
    value : Tensor
        Memoized forward value; empty until first evaluated.
    grad : Tensor
        Gradient buffer; populated during a backward pass and emptied once
        it has been propagated to the step's arguments.
    sinks : list[int]
        Ids of the steps consuming this value, in insertion order.
    """

    shape: Shape
    device: DeviceLike
    value: Tensor = field(default_factory=Tensor)
    grad: Tensor = field(default_factory=Tensor)
    sinks: List[int] = field(default_factory=list)


@dataclass
class FunctionInfo:
    """
    Record of a single graph step.

    Attributes
    ----------
    operation : Operation
        Operation applied at this step. Owned exclusively by the step.
    args : list[Address]
        Argument addresses in argument order.
    rets : list[NodeInfo]
        Output slots. Only slot 0 is populated by the engine; the list form
        leaves room for operations with several results.
    """

    operation: Operation
    args: List[Address]
    rets: List[NodeInfo]
