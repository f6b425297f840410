"""
Builder functions recording operations into a graph.

Each function constructs an operation and records it with
`Graph.add_operation`, returning the new `Node`. Nothing is computed until
the node is forwarded.

The graph is chosen as follows:
- an explicit `graph=` argument wins,
- otherwise operations with arguments use the graph of their first
  argument,
- otherwise (sources) the default graph registered with `set_default` /
  `default_graph` is used.

Every argument must belong to that graph; otherwise `GraphMismatchError` is
raised before any other check.

Elementwise and matrix operations require their arguments to live on the
same device; use `copy` to move a value first.
"""

from __future__ import annotations

from typing import Optional, Sequence

from ...domain._errors import DeviceMismatchError, GraphMismatchError
from ...domain._operation import Operation
from ...domain._shape import Shape
from ..devices._compute_device import ComputeDevice
from ..graph._default_graph import get_default
from ..graph._graph import Graph
from ..graph._node import Node
from .._parameter import Parameter
from ._arithmetic import Add, AddConst, Multiply, Negate, Scale, Subtract
from ._copy import Copy
from ._linalg import MatMul
from ._reduction import BatchSum, ReLU, Sum
from ._sources import Input, ParameterInput


def _target_graph(args: Sequence[Node], graph: Optional[Graph]) -> Graph:
    if graph is None:
        graph = args[0].graph if args else get_default()
    for arg in args:
        owner = arg.graph
        if owner is not graph:
            raise GraphMismatchError(repr(graph), repr(owner))
    return graph


def _record(op: Operation, args: Sequence[Node], graph: Optional[Graph]) -> Node:
    return _target_graph(args, graph).add_operation(op, args)


def _record_binary(
    op: Operation, a: Node, b: Node, graph: Optional[Graph]
) -> Node:
    # Foreign graphs are reported before devices are compared.
    target = _target_graph((a, b), graph)
    _check_same_device(a, b)
    return target.add_operation(op, (a, b))


def _check_same_device(a: Node, b: Node) -> None:
    da, db = a.device(), b.device()
    if da.descriptor != db.descriptor:
        raise DeviceMismatchError(str(da.descriptor), str(db.descriptor))


def input(
    values: Sequence[float],
    shape: Optional[Shape] = None,
    device: Optional[ComputeDevice] = None,
    graph: Optional[Graph] = None,
) -> Node:
    """
    Record constant input data.

    Parameters
    ----------
    values : Sequence[float]
        Elements of the data, batch item by batch item.
    shape : Optional[Shape]
        Shape of the data. Defaults to a vector of ``len(values)`` elements.
    device : Optional[ComputeDevice]
        Device receiving the data. Defaults to ``ComputeDevice("cpu")``.
    graph : Optional[Graph]
        Graph to record into. Defaults to the default graph.

    Returns
    -------
    Node
        Node holding the data.
    """
    values = list(values)
    if shape is None:
        shape = Shape([len(values)])
    if device is None:
        device = ComputeDevice("cpu")
    return _record(Input(shape, values, device), (), graph)


def parameter(param: Parameter, graph: Optional[Graph] = None) -> Node:
    """
    Record a reference to a trainable parameter.
    """
    return _record(ParameterInput(param), (), graph)


def copy(x: Node, device: ComputeDevice, graph: Optional[Graph] = None) -> Node:
    """
    Record a transfer of `x` onto `device`.
    """
    return _record(Copy(device), (x,), graph)


def add(a: Node, b: Node, graph: Optional[Graph] = None) -> Node:
    return _record_binary(Add(), a, b, graph)


def subtract(a: Node, b: Node, graph: Optional[Graph] = None) -> Node:
    return _record_binary(Subtract(), a, b, graph)


def multiply(a: Node, b: Node, graph: Optional[Graph] = None) -> Node:
    return _record_binary(Multiply(), a, b, graph)


def matmul(a: Node, b: Node, graph: Optional[Graph] = None) -> Node:
    return _record_binary(MatMul(), a, b, graph)


def scale(x: Node, factor: float, graph: Optional[Graph] = None) -> Node:
    return _record(Scale(factor), (x,), graph)


def add_const(x: Node, k: float, graph: Optional[Graph] = None) -> Node:
    return _record(AddConst(k), (x,), graph)


def negate(x: Node, graph: Optional[Graph] = None) -> Node:
    return _record(Negate(), (x,), graph)


def relu(x: Node, graph: Optional[Graph] = None) -> Node:
    return _record(ReLU(), (x,), graph)


def sum(x: Node, graph: Optional[Graph] = None) -> Node:
    """
    Record the sum of every element of each batch item of `x`.
    """
    return _record(Sum(), (x,), graph)


def batch_sum(x: Node, graph: Optional[Graph] = None) -> Node:
    """
    Record the sum of `x` over its batch axis.
    """
    return _record(BatchSum(), (x,), graph)
