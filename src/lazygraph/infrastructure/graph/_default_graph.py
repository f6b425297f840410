"""
Ambient ("default") graph registry.

Builder functions such as `lazygraph.operators.input` need a graph to
record into. Instead of threading one through every call, user code may
register a default graph:

    g = Graph()
    with default_graph(g):
        x = F.input([1, 2, 3], device=dev)

The slot is a `contextvars.ContextVar`, so each thread and each asyncio
task sees its own registration. It stores a weak reference: destroying the
registered graph implicitly clears the registration.
"""

from __future__ import annotations

import weakref
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from ...domain._errors import NoDefaultGraphError
from ._graph import Graph

_default_graph: ContextVar[Optional["weakref.ref[Graph]"]] = ContextVar(
    "lazygraph_default_graph", default=None
)


def set_default(graph: Graph) -> None:
    """
    Register `graph` as the default graph of the current context.

    Parameters
    ----------
    graph : Graph
        Graph to register. It is referenced weakly, not owned.
    """
    _default_graph.set(weakref.ref(graph))


def unset_default() -> None:
    """
    Remove the default-graph registration of the current context.
    """
    _default_graph.set(None)


def get_default() -> Graph:
    """
    Return the default graph of the current context.

    Raises
    ------
    NoDefaultGraphError
        If no graph is registered, or the registered graph was destroyed.
    """
    ref = _default_graph.get()
    graph = ref() if ref is not None else None
    if graph is None:
        raise NoDefaultGraphError()
    return graph


def has_default() -> bool:
    ref = _default_graph.get()
    return ref is not None and ref() is not None


@contextmanager
def default_graph(graph: Graph) -> Iterator[Graph]:
    """
    Register `graph` as the default graph for the duration of a block.

    The previous registration (if any) is restored on exit, so scopes nest.

    Parameters
    ----------
    graph : Graph
        Graph to register.

    Yields
    ------
    Graph
        The registered graph.
    """
    token = _default_graph.set(weakref.ref(graph))
    try:
        yield graph
    finally:
        _default_graph.reset(token)
