"""
Computation graph with lazy evaluation and reverse-mode differentiation.

A `Graph` records operations as an append-only sequence of steps. Adding a
step only infers its output shape and device; the numeric value is computed
the first time it is requested through `forward` and memoized afterwards.
`backward` seeds a gradient of ones at a node and walks the steps in
decreasing id order, letting each operation accumulate gradients into its
arguments.

Ordering invariant
------------------
Steps are only ever appended, and a step can only reference values that
already exist, so every argument of step ``i`` lives in a step ``< i``.
Increasing step ids are therefore a valid evaluation order and decreasing
ids a valid differentiation order: by the time a step is visited backward,
every consumer of its value has already contributed to its gradient.
"""

from __future__ import annotations

import logging
import sys
from typing import List, Optional, Sequence, TextIO

from ...domain._errors import (
    DeviceResolutionError,
    GraphMismatchError,
    InvalidNodeError,
)
from ...domain._operation import Operation
from ...domain._shape import Shape
from ...domain.device._device_protocol import DeviceLike
from ..tensor._tensor import Tensor
from ._node import Node
from ._records import Address, FunctionInfo, NodeInfo

logger = logging.getLogger(__name__)


class Graph:
    """
    Append-only computation graph.

    Notes
    -----
    - A graph is not thread-safe. `add_operation` and `clear` mutate the
      step list and must not run concurrently with any other call on the
      same graph.
    - Independent graphs share no mutable state.
    """

    def __init__(self) -> None:
        self._funcs: List[FunctionInfo] = []
        self._generation = 0

    def __len__(self) -> int:
        return len(self._funcs)

    def __repr__(self) -> str:
        return f"<Graph at {id(self):#x}: {len(self._funcs)} step(s)>"

    def num_operations(self) -> int:
        """
        Return the number of recorded steps.
        """
        return len(self._funcs)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def is_valid_node(self, node: Node) -> bool:
        """
        Return True if `node` addresses a live slot of this graph.
        """
        return (
            node.graph_or_none() is self
            and node.generation == self._generation
            and 0 <= node.fid < len(self._funcs)
            and 0 <= node.vid < len(self._funcs[node.fid].rets)
        )

    def _invalid(self, node: Node, reason: str) -> InvalidNodeError:
        logger.critical(
            "Invalid node detected. This is a bug in the calling code. "
            "graph=%r fid=%d vid=%d generation=%d: %s",
            self,
            node.fid,
            node.vid,
            node.generation,
            reason,
        )
        return InvalidNodeError(node.fid, node.vid, reason)

    def _check_node(self, node: Node) -> NodeInfo:
        """
        Validate `node` against this graph and return its slot record.

        Raises
        ------
        GraphMismatchError
            If `node` belongs to another live graph.
        InvalidNodeError
            If `node` is stale (its graph was cleared or destroyed) or its
            ids are out of range.
        """
        owner = node.graph_or_none()
        if owner is None:
            raise self._invalid(node, "owning graph was destroyed")
        if owner is not self:
            raise GraphMismatchError(repr(self), repr(owner))
        if node.generation != self._generation:
            raise self._invalid(node, "graph was cleared after the node was created")
        if not 0 <= node.fid < len(self._funcs):
            raise self._invalid(node, "step id out of range")
        rets = self._funcs[node.fid].rets
        if not 0 <= node.vid < len(rets):
            raise self._invalid(node, "slot id out of range")
        return rets[node.vid]

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def clear(self) -> None:
        """
        Drop every step together with its operation, values and gradients.

        Nodes issued before the call become invalid; the graph itself stays
        usable.
        """
        for f in self._funcs:
            for n in f.rets:
                n.value.invalidate()
                n.grad.invalidate()
        self._funcs = []
        self._generation += 1
        logger.debug("Cleared %r (generation %d)", self, self._generation)

    def add_operation(self, operation: Operation, args: Sequence[Node] = ()) -> Node:
        """
        Append a step applying `operation` to `args`.

        Parameters
        ----------
        operation : Operation
            Operation to record. The graph takes exclusive ownership.
        args : Sequence[Node]
            Argument nodes, all owned by this graph.

        Returns
        -------
        Node
            Handle of the new step's first output slot.

        Raises
        ------
        GraphMismatchError
            If an argument belongs to another graph.
        InvalidNodeError
            If an argument is stale.
        ShapeError
            If `operation` rejects the argument shapes.
        DeviceResolutionError
            If `operation` declares no device and has no arguments.

        Notes
        -----
        Nothing is committed unless every check succeeds.
        """
        arg_addrs: List[Address] = []
        arg_infos: List[NodeInfo] = []
        for arg in args:
            info = self._check_node(arg)
            arg_addrs.append(Address(arg.fid, arg.vid))
            arg_infos.append(info)

        ret_shape = operation.infer_output_shape([info.shape for info in arg_infos])

        ret_device: Optional[DeviceLike] = operation.declared_device()
        if ret_device is None:
            if not arg_infos:
                raise DeviceResolutionError(operation.name(), len(arg_infos))
            ret_device = arg_infos[0].device

        ret_fid = len(self._funcs)
        for info in arg_infos:
            info.sinks.append(ret_fid)
        self._funcs.append(
            FunctionInfo(
                operation=operation,
                args=arg_addrs,
                rets=[NodeInfo(shape=ret_shape, device=ret_device)],
            )
        )
        logger.debug(
            "Added step %d: %s args=%s shape=%s device=%s",
            ret_fid,
            operation.name(),
            [f"{a.fid}:{a.vid}" for a in arg_addrs],
            ret_shape,
            ret_device.descriptor,
        )
        return Node(self, ret_fid, 0, self._generation)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def _value_at(self, addr: Address) -> Optional[Tensor]:
        f = self._funcs[addr.fid]
        inner = f.operation.inner_value()
        if inner is not None:
            return inner
        value = f.rets[addr.vid].value
        return value if value.valid() else None

    def forward(self, node: Node) -> Tensor:
        """
        Compute (or fetch) the value of `node`.

        Every step the node depends on is evaluated at most once; results
        are memoized until `clear`.

        Parameters
        ----------
        node : Node
            Node to evaluate.

        Returns
        -------
        Tensor
            The value, owned by the graph. It must not be used after `clear`.

        Notes
        -----
        The traversal is an explicit depth-first walk, so deep graphs do not
        hit the interpreter's recursion limit. Arguments are evaluated in
        argument order. Failures of an operation's `forward` propagate
        unchanged.
        """
        self._check_node(node)
        target = Address(node.fid, node.vid)

        # Entries are (address, expanded); an expanded entry is computed once
        # every argument pushed above it has been resolved.
        stack = [(target, False)]
        while stack:
            addr, expanded = stack.pop()
            if self._value_at(addr) is not None:
                continue
            f = self._funcs[addr.fid]
            if not expanded:
                stack.append((addr, True))
                stack.extend((arg, False) for arg in reversed(f.args))
                continue
            arg_values = [self._value_at(arg) for arg in f.args]
            f.rets[addr.vid].value = f.operation.forward(arg_values)
            logger.debug("Computed step %d: %s", addr.fid, f.operation.name())

        return self._value_at(target)

    def backward(self, node: Node) -> None:
        """
        Propagate gradients from `node` down to every step it depends on.

        The gradient at `node` is seeded with ones of its shape; for a
        non-scalar node this differentiates the sum of its elements. The
        node is evaluated first if needed.

        Parameters
        ----------
        node : Node
            Node to differentiate.

        Notes
        -----
        - Steps are visited in strictly decreasing id order; steps whose
          gradient slot is still empty are off the dependency path and are
          skipped.
        - Argument gradients are zero-initialized on first touch and
          accumulated into, so values feeding several consumers collect
          one contribution per consumer.
        - A step's own gradient is emptied right after it has been
          propagated. Forward values stay memoized.
        - If an operation's `backward` raises, every step gradient up to
          `node` is emptied before the exception propagates, so a retry
          starts clean. Gradients already handed to sources are kept.
        """
        last_n = self._check_node(node)
        last_v = self._value_at(Address(node.fid, node.vid))
        if last_v is None:
            last_v = self.forward(node)

        last_n.grad = last_n.device.new_tensor(last_v.shape, 1.0)
        logger.debug("Backward from step %d over %d step(s)", node.fid, node.fid + 1)

        try:
            for fid in range(node.fid, -1, -1):
                cur_f = self._funcs[fid]
                cur_n = cur_f.rets[0]
                if not cur_n.grad.valid():
                    continue

                arg_values: List[Tensor] = []
                arg_grads: List[Tensor] = []
                for arg in cur_f.args:
                    arg_n = self._funcs[arg.fid].rets[arg.vid]
                    arg_v = self._value_at(arg)
                    if not arg_n.grad.valid():
                        arg_n.grad = arg_n.device.new_tensor(arg_v.shape, 0.0)
                    arg_values.append(arg_v)
                    arg_grads.append(arg_n.grad)

                cur_v = self._value_at(Address(fid, 0))
                cur_f.operation.backward(cur_v, cur_n.grad, arg_values, arg_grads)

                cur_n.grad = Tensor()
        except BaseException:
            # Partial step gradients would leak into the next pass.
            for f in self._funcs[: node.fid + 1]:
                f.rets[0].grad = Tensor()
            logger.debug("Backward from step %d aborted; step gradients reset", node.fid)
            raise

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def shape_of(self, node: Node) -> Shape:
        """
        Return the inferred shape of `node`.
        """
        return self._check_node(node).shape

    def device_of(self, node: Node) -> DeviceLike:
        """
        Return the device owning the value of `node`.
        """
        return self._check_node(node).device

    def operation_of(self, node: Node) -> Operation:
        """
        Return the operation recorded at the step of `node`.
        """
        self._check_node(node)
        return self._funcs[node.fid].operation

    def gradient_of(self, node: Node) -> Optional[Tensor]:
        """
        Return the gradient retained by the source operation of `node`.

        Step gradients are released during `backward`, so only source
        operations (inputs, parameters) that keep what they receive have a
        gradient to report.

        Returns
        -------
        Optional[Tensor]
            The retained gradient, or None if the operation retains none
            or has not received any yet.
        """
        self._check_node(node)
        return self._funcs[node.fid].operation.retained_gradient()

    def arguments_of(self, fid: int) -> List[Address]:
        """
        Return the argument addresses of step `fid`.

        Raises
        ------
        IndexError
            If `fid` is not the id of a recorded step.
        """
        if not 0 <= fid < len(self._funcs):
            raise IndexError(
                f"Step id {fid} out of range for a graph of {len(self._funcs)} step(s)"
            )
        return list(self._funcs[fid].args)

    def sinks_of(self, node: Node) -> List[int]:
        """
        Return the ids of the steps consuming `node`.
        """
        return list(self._check_node(node).sinks)

    def dump_string(self) -> str:
        """
        Return a human-readable listing of every step and output slot.

        The format is meant for debugging and is not stable.
        """
        lines = ["Computation graph:"]
        for i, f in enumerate(self._funcs):
            args = ", ".join(f"{a.fid}:{a.vid}" for a in f.args)
            lines.append(f"Function {i}: name={f.operation.name()}, args=[{args}]")
            for j, n in enumerate(f.rets):
                sinks = ", ".join(str(s) for s in n.sinks)
                lines.append(
                    f"  Return {j}: shape={n.shape.to_string()}, sinks=[{sinks}]"
                )
        return "\n".join(lines)

    def dump(self, file: Optional[TextIO] = None) -> None:
        """
        Print `dump_string()` to `file` (standard output by default).
        """
        print(self.dump_string(), file=file if file is not None else sys.stdout)
