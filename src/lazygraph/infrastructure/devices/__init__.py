from ._compute_device import ComputeDevice

__all__ = [ComputeDevice.__name__]
