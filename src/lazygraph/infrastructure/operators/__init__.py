"""
Concrete operations and the builder functions recording them.

Typical usage::

    from lazygraph.infrastructure import operators as F

    x = F.input([1, 2, 3], device=dev, graph=g)
    y = F.sum(F.relu(x * 2.0))
"""

from ._arithmetic import Add, AddConst, Multiply, Negate, Scale, Subtract
from ._copy import Copy
from ._functional import (
    add,
    add_const,
    batch_sum,
    copy,
    input,
    matmul,
    multiply,
    negate,
    parameter,
    relu,
    scale,
    subtract,
    sum,
)
from ._linalg import MatMul
from ._reduction import BatchSum, ReLU, Sum
from ._sources import Input, ParameterInput

__all__ = [
    "Add",
    "AddConst",
    "BatchSum",
    "Copy",
    "Input",
    "MatMul",
    "Multiply",
    "Negate",
    "ParameterInput",
    "ReLU",
    "Scale",
    "Subtract",
    "Sum",
    "add",
    "add_const",
    "batch_sum",
    "copy",
    "input",
    "matmul",
    "multiply",
    "negate",
    "parameter",
    "relu",
    "scale",
    "subtract",
    "sum",
]
