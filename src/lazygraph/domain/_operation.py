"""
Operation interface definitions.

This module defines the abstract base class for the operations recorded by
a computation graph. The graph engine owns one `Operation` instance per
step and drives it through four contracts:

- shape inference, called once when the step is added,
- an optional inner value, for sources whose result is already known,
- the forward computation, called lazily the first time the value is needed,
- the backward computation, which accumulates argument gradients.

Source operations may additionally keep the gradient they receive
(`retained_gradient`), since the graph frees step gradients eagerly.

Unlike a function-level autograd API, operations here do not keep a
per-call context: the graph hands the memoized forward values back to
`backward`, so an operation only stores its own configuration.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from ._shape import Shape
    from ._tensor import ITensor
    from .device._device_protocol import DeviceLike


class Operation(ABC):
    """
    Abstract base class for graph operations.

    Subclasses must implement `name`, `infer_output_shape`, `forward` and
    `backward`. Source operations (inputs, parameters, constants) override
    `inner_value`; operations that choose where their result lives (device
    transfers, sources) override `declared_device`.
    """

    @abstractmethod
    def name(self) -> str:
        """
        Return a short name used in diagnostics.
        """
        ...

    def declared_device(self) -> Optional["DeviceLike"]:
        """
        Return the device that should own this operation's result.

        Returns
        -------
        Optional[DeviceLike]
            The explicit device, or None to inherit the device of the
            first argument.
        """
        return None

    @abstractmethod
    def infer_output_shape(self, arg_shapes: Sequence["Shape"]) -> "Shape":
        """
        Compute the result shape from the argument shapes.

        Parameters
        ----------
        arg_shapes : Sequence[Shape]
            Shapes of the arguments, in argument order.

        Returns
        -------
        Shape
            Shape of the result.

        Raises
        ------
        ShapeError
            If the argument shapes violate the operation's constraints.
        """
        ...

    def inner_value(self) -> Optional["ITensor"]:
        """
        Return a pre-materialized result, if this operation has one.

        Returns
        -------
        Optional[ITensor]
            The constant result for source operations, otherwise None.
        """
        return None

    def retained_gradient(self) -> Optional["ITensor"]:
        """
        Return the gradient this operation has kept from backward passes.

        The graph releases step gradients as soon as they are propagated.
        Source operations that want their gradient to stay observable
        accumulate it into their own buffer and report it here.

        Returns
        -------
        Optional[ITensor]
            The retained gradient, or None.
        """
        return None

    @abstractmethod
    def forward(self, arg_values: Sequence["ITensor"]) -> "ITensor":
        """
        Compute the result from the argument values.

        Parameters
        ----------
        arg_values : Sequence[ITensor]
            Forward values of the arguments, in argument order.

        Returns
        -------
        ITensor
            The newly computed result.
        """
        ...

    @abstractmethod
    def backward(
        self,
        cur_value: "ITensor",
        cur_grad: "ITensor",
        arg_values: Sequence["ITensor"],
        arg_grads: Sequence["ITensor"],
    ) -> None:
        """
        Propagate the gradient of this operation's result to its arguments.

        Parameters
        ----------
        cur_value : ITensor
            Forward value of this operation.
        cur_grad : ITensor
            Gradient with respect to this operation's result.
        arg_values : Sequence[ITensor]
            Forward values of the arguments.
        arg_grads : Sequence[ITensor]
            Gradient accumulators of the arguments.

        Notes
        -----
        Implementations must add their contribution into each entry of
        `arg_grads` (via `accumulate`) and must never overwrite it: a value
        consumed by several operations receives one contribution from each.
        """
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name()}>"
