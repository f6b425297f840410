from ._default_graph import (
    default_graph,
    get_default,
    has_default,
    set_default,
    unset_default,
)
from ._graph import Graph
from ._node import Node
from ._records import Address, FunctionInfo, NodeInfo

__all__ = [
    Address.__name__,
    FunctionInfo.__name__,
    Graph.__name__,
    Node.__name__,
    NodeInfo.__name__,
    default_graph.__name__,
    get_default.__name__,
    has_default.__name__,
    set_default.__name__,
    unset_default.__name__,
]
