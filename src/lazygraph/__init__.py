"""
lazygraph: a lazily evaluated computation graph with reverse-mode
differentiation over values that may live on several devices.
"""

from .domain._errors import (
    DeviceMismatchError,
    DeviceNotSupportedError,
    DeviceResolutionError,
    GraphError,
    GraphMismatchError,
    InvalidNodeError,
    NoDefaultGraphError,
    ShapeError,
)
from .domain._operation import Operation
from .domain._shape import Shape
from .domain.device._device import Device, DeviceType
from .infrastructure import operators
from .infrastructure._parameter import Parameter
from .infrastructure.devices import ComputeDevice
from .infrastructure.graph import (
    Graph,
    Node,
    default_graph,
    get_default,
    set_default,
    unset_default,
)
from .infrastructure.tensor import Tensor

__version__ = "0.1.0"

__all__ = [
    "ComputeDevice",
    "Device",
    "DeviceMismatchError",
    "DeviceNotSupportedError",
    "DeviceResolutionError",
    "DeviceType",
    "Graph",
    "GraphError",
    "GraphMismatchError",
    "InvalidNodeError",
    "Node",
    "NoDefaultGraphError",
    "Operation",
    "Parameter",
    "Shape",
    "ShapeError",
    "Tensor",
    "default_graph",
    "get_default",
    "operators",
    "set_default",
    "unset_default",
]
