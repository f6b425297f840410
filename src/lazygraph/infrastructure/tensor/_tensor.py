"""
Concrete Tensor implementation (NumPy backend).

A `Tensor` here is a plain value container: a `Shape`, the device owning
the storage and, once computed, a NumPy array laid out as
``(batch_size, *dims)``. It carries no autograd state; gradients live in
the computation graph, which stores them in separate tensors.

A tensor constructed without storage (``Tensor()``) is *empty*. The graph
uses empty tensors to mark value and gradient slots that have not been
computed yet, and `valid()` tells the two states apart.
"""

from __future__ import annotations

from typing import Any, List, Optional, Union

import numpy as np

from ...domain._errors import DeviceMismatchError, ShapeError
from ...domain._shape import Shape
from ...domain.device._device_protocol import DeviceLike

DEFAULT_DTYPE = np.float32
"""Element dtype used for every tensor allocated by lazygraph devices."""


class Tensor:
    """
    Shape-annotated NumPy storage bound to a device.

    Parameters
    ----------
    shape : Optional[Shape]
        Logical shape of the value. Omit to create an empty tensor.
    device : Optional[DeviceLike]
        Device owning the storage. Omit to create an empty tensor.
    data : Optional[np.ndarray]
        Storage. Must have the layout ``shape.numpy_shape()``.

    Raises
    ------
    ValueError
        If only some of the arguments are given, or if `data` does not
        match the layout implied by `shape`.

    Notes
    -----
    Tensors are normally created by a device (`new_tensor`,
    `new_tensor_from_values`, `copy_tensor`) or by operations wrapping the
    result of a NumPy kernel, never by user code directly.
    """

    def __init__(
        self,
        shape: Optional[Shape] = None,
        device: Optional[DeviceLike] = None,
        data: Optional[np.ndarray] = None,
    ) -> None:
        given = [x is not None for x in (shape, device, data)]
        if any(given) and not all(given):
            raise ValueError("Tensor requires shape, device and data together")
        if data is not None and tuple(data.shape) != shape.numpy_shape():
            raise ValueError(
                f"Storage layout {tuple(data.shape)} does not match shape {shape}"
            )
        self._shape = shape
        self._device = device
        self._data = data

    def valid(self) -> bool:
        """
        Return True if this tensor carries storage.
        """
        return self._data is not None

    def invalidate(self) -> None:
        """
        Drop the storage, turning this tensor into an empty one.
        """
        self._shape = None
        self._device = None
        self._data = None

    def _require_valid(self) -> None:
        if self._data is None:
            raise ValueError("Attempted to access an empty tensor")

    @property
    def shape(self) -> Shape:
        """
        Return the logical shape.

        Raises
        ------
        ValueError
            If the tensor is empty.
        """
        self._require_valid()
        return self._shape

    @property
    def device(self) -> DeviceLike:
        """
        Return the device owning the storage.

        Raises
        ------
        ValueError
            If the tensor is empty.
        """
        self._require_valid()
        return self._device

    @property
    def data(self) -> np.ndarray:
        """
        Return the underlying NumPy array (not a copy).

        Raises
        ------
        ValueError
            If the tensor is empty.
        """
        self._require_valid()
        return self._data

    def to_numpy(self) -> np.ndarray:
        """
        Return a copy of the storage with layout ``(batch_size, *dims)``.
        """
        return self.data.copy()

    def to_list(self) -> List[float]:
        """
        Return every element as a flat list, batch item by batch item.
        """
        return [float(x) for x in self.data.reshape(-1)]

    def to_float(self) -> float:
        """
        Return the only element of a single-element tensor.

        Raises
        ------
        ShapeError
            If the tensor holds more than one element.
        """
        if self.shape.size() != 1:
            raise ShapeError(f"to_float requires a single element, got {self.shape}")
        return float(self.data.reshape(-1)[0])

    def accumulate(self, delta: Union["Tensor", np.ndarray, Any]) -> None:
        """
        Add `delta` into this tensor in place.

        Parameters
        ----------
        delta : Tensor or array-like
            Contribution to add. A `Tensor` must live on the same device and
            have the same shape; an array must match the storage layout.

        Raises
        ------
        DeviceMismatchError
            If `delta` is a tensor owned by another device.
        ShapeError
            If the shapes differ.
        """
        self._require_valid()
        if isinstance(delta, Tensor):
            if delta.device.descriptor != self._device.descriptor:
                raise DeviceMismatchError(
                    str(self._device.descriptor), str(delta.device.descriptor)
                )
            if delta.shape != self._shape:
                raise ShapeError(
                    f"Cannot accumulate shape {delta.shape} into {self._shape}"
                )
            arr = delta.data
        else:
            arr = np.asarray(delta, dtype=self._data.dtype)
            if arr.shape != self._data.shape:
                raise ShapeError(
                    f"Cannot accumulate layout {arr.shape} into {self._data.shape}"
                )
        np.add(self._data, arr, out=self._data)

    def __repr__(self) -> str:
        if self._data is None:
            return "Tensor(<empty>)"
        return (
            f"Tensor(shape={self._shape}, device={self._device.descriptor}, "
            f"dtype={self._data.dtype})"
        )
