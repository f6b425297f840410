"""
Graph-, shape- and device-related exceptions for lazygraph.

This module defines the runtime errors raised by the computation-graph
engine and by the tensor/device layer underneath it. Every error is raised
eagerly at the point of misuse so that callers can reject the offending
operation without the graph being left half-updated.

Two of these errors are treated differently from the rest:

- `InvalidNodeError` signals a stale or corrupted node handle. It is a
  programming error and the engine never catches it.
- `DeviceNotSupportedError` / `DeviceMismatchError` come from the
  device/tensor layer rather than from the graph itself.
"""


class GraphError(RuntimeError):
    """
    Base class for errors raised by the computation-graph engine.
    """


class GraphMismatchError(GraphError):
    """
    Raised when a node is used with a graph other than the one that owns it.

    Attributes
    ----------
    expected : str
        Description of the graph the node was used with.
    actual : str
        Description of the graph the node belongs to.
    """

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"Graph mismatched. node graph: {actual} != this: {expected}")
        self.expected = expected
        self.actual = actual


class InvalidNodeError(GraphError):
    """
    Raised when a node handle does not address an existing output slot.

    This happens when the node was created before `Graph.clear()`, when its
    graph has been destroyed, or when its step/slot ids are out of range.

    Notes
    -----
    This is a fatal-class error: it indicates a bug in the calling code and
    is never recovered from inside the package.
    """

    def __init__(self, fid: int, vid: int, reason: str) -> None:
        super().__init__(f"Invalid node detected [fid={fid}, vid={vid}]: {reason}")
        self.fid = fid
        self.vid = vid
        self.reason = reason


class ShapeError(GraphError, ValueError):
    """
    Raised when an operation rejects the shapes of its arguments.
    """


class DeviceResolutionError(GraphError):
    """
    Raised when no device can be determined for a new step's output.

    Attributes
    ----------
    op : str
        Name of the operation being added.
    num_args : int
        Number of arguments given to the operation.
    """

    def __init__(self, op: str, num_args: int) -> None:
        super().__init__(
            f"Bad device forwarding of function '{op}' with {num_args} argument(s)."
        )
        self.op = op
        self.num_args = num_args


class NoDefaultGraphError(GraphError):
    """
    Raised when the default graph is requested but none is registered.
    """

    def __init__(self) -> None:
        super().__init__("Default graph is null.")


class DeviceNotSupportedError(RuntimeError):
    """
    Raised when a tensor operation is requested on a device backend
    that is not implemented.

    Attributes
    ----------
    op : str
        The name of the operation that was attempted (e.g., "new_tensor").
    device : str
        String representation of the device on which the operation
        was attempted.
    """

    def __init__(self, op: str, device: str) -> None:
        super().__init__(f"{op} is not implemented for device '{device}'.")
        self.op = op
        self.device = device


class DeviceMismatchError(RuntimeError):
    """
    Raised when values living on different devices are combined.

    Combining such values requires an explicit `copy` operation that moves
    one of them first.
    """

    def __init__(self, device_a: str, device_b: str) -> None:
        super().__init__(f"Device mismatch: '{device_a}' vs '{device_b}'.")
        self.device_a = device_a
        self.device_b = device_b
