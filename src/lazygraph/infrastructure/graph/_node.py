"""
User-facing handles to graph values.

A `Node` names one output slot of one step of a `Graph`. It is a capability
to look the value up, not the value itself: every use goes through the
owning graph, which validates the handle first.

Nodes hold only a weak reference to their graph. Once the graph is
destroyed, or cleared, its old nodes fail with `InvalidNodeError`.
"""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, List, Optional, Union

import numpy as np

from ...domain._errors import InvalidNodeError
from ...domain._shape import Shape
from ...domain.device._device_protocol import DeviceLike

if TYPE_CHECKING:
    from ..tensor._tensor import Tensor
    from ._graph import Graph

Number = Union[int, float]


class Node:
    """
    Handle of a value produced by a graph step.

    Parameters
    ----------
    graph : Graph
        Graph owning the value.
    fid : int
        Step id.
    vid : int
        Output slot id within the step.
    generation : int
        Clear-generation of `graph` at the time the node was issued.
    """

    __slots__ = ("_graph_ref", "_fid", "_vid", "_generation")

    def __init__(self, graph: "Graph", fid: int, vid: int, generation: int) -> None:
        self._graph_ref = weakref.ref(graph)
        self._fid = fid
        self._vid = vid
        self._generation = generation

    @property
    def fid(self) -> int:
        return self._fid

    @property
    def vid(self) -> int:
        return self._vid

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def graph(self) -> "Graph":
        """
        Return the owning graph.

        Raises
        ------
        InvalidNodeError
            If the graph has been destroyed.
        """
        g = self._graph_ref()
        if g is None:
            raise InvalidNodeError(self._fid, self._vid, "owning graph was destroyed")
        return g

    def graph_or_none(self) -> Optional["Graph"]:
        """Return the owning graph, or None if it has been destroyed."""
        return self._graph_ref()

    def valid(self) -> bool:
        """
        Return True if this node still addresses a live slot of its graph.
        """
        g = self._graph_ref()
        return g is not None and g.is_valid_node(self)

    def shape(self) -> Shape:
        return self.graph.shape_of(self)

    def device(self) -> DeviceLike:
        return self.graph.device_of(self)

    def value(self) -> "Tensor":
        """
        Evaluate this node and return its (memoized) value.
        """
        return self.graph.forward(self)

    def to_list(self) -> List[float]:
        return self.value().to_list()

    def to_numpy(self) -> np.ndarray:
        return self.value().to_numpy()

    def to_float(self) -> float:
        return self.value().to_float()

    def backward(self) -> None:
        """
        Run a backward pass seeded at this node.
        """
        self.graph.backward(self)

    # Operator sugar; operators import the graph layer, hence the local imports.
    def __add__(self, other: Union["Node", Number]) -> "Node":
        from ..operators import _functional as F

        if isinstance(other, Node):
            return F.add(self, other)
        return F.add_const(self, float(other))

    def __radd__(self, other: Number) -> "Node":
        from ..operators import _functional as F

        return F.add_const(self, float(other))

    def __sub__(self, other: Union["Node", Number]) -> "Node":
        from ..operators import _functional as F

        if isinstance(other, Node):
            return F.subtract(self, other)
        return F.add_const(self, -float(other))

    def __rsub__(self, other: Number) -> "Node":
        from ..operators import _functional as F

        return F.add_const(F.negate(self), float(other))

    def __mul__(self, other: Union["Node", Number]) -> "Node":
        from ..operators import _functional as F

        if isinstance(other, Node):
            return F.multiply(self, other)
        return F.scale(self, float(other))

    def __rmul__(self, other: Number) -> "Node":
        from ..operators import _functional as F

        return F.scale(self, float(other))

    def __neg__(self) -> "Node":
        from ..operators import _functional as F

        return F.negate(self)

    def __matmul__(self, other: "Node") -> "Node":
        from ..operators import _functional as F

        return F.matmul(self, other)

    def __repr__(self) -> str:
        return f"Node(fid={self._fid}, vid={self._vid}, generation={self._generation})"
