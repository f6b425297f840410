from ._tensor import DEFAULT_DTYPE, Tensor

__all__ = ["DEFAULT_DTYPE", Tensor.__name__]
