"""
Tensor descriptor and the shape handle tensors share.

A ``Shape`` is created by exactly one tensor (its owner) and handed to any
number of aliasing tensors via ``Tensor.alias``. Aliases hold the very same
object, so a dimension written by the owner is seen by every alias and no two
tensors sharing a shape can drift apart. ``Shape.refs`` counts live holders.
"""
from __future__ import annotations

from math import prod
from typing import Iterable, Tuple

import numpy as np

from kernels.dtypes import DType
from utils.errors import InvalidGraphError, ShapeMismatchError


class Shape:
    __slots__ = ("_dims", "_refs")

    def __init__(self, dims: Iterable[int]):
        self._dims = [int(d) for d in dims]
        self._refs = 1

    def alias(self) -> "Shape":
        self._refs += 1
        return self

    def release(self) -> None:
        if self._refs <= 0:
            raise InvalidGraphError("shape released more often than aliased")
        self._refs -= 1

    @property
    def refs(self) -> int:
        return self._refs

    @property
    def dims(self) -> Tuple[int, ...]:
        return tuple(self._dims)

    @property
    def size(self) -> int:
        return prod(self._dims)

    def __len__(self) -> int:
        return len(self._dims)

    def __getitem__(self, i: int) -> int:
        return self._dims[i]

    def __setitem__(self, i: int, value: int) -> None:
        self._dims[i] = int(value)

    def __iter__(self):
        return iter(self._dims)

    def __repr__(self) -> str:
        return f"Shape({self._dims})"


def array_module(data):
    if data is None or isinstance(data, np.ndarray):
        return np
    import cupy as cp
    return cp.get_array_module(data)


class Tensor:
    def __init__(self, dtype: DType, shape, data=None, tensor_params=None):
        self.dtype = dtype
        self.shape = shape if isinstance(shape, Shape) else Shape(shape)
        self.data = None
        self.tensor_params = tensor_params
        if data is not None:
            self.bind(data, tensor_params)

    @property
    def dim(self) -> int:
        return len(self.shape)

    @property
    def is_bound(self) -> bool:
        return self.data is not None

    def extent(self) -> Tuple[int, ...]:
        return self.shape.dims

    def alias(self) -> "Tensor":
        return Tensor(self.dtype, self.shape.alias())

    def bind(self, data, tensor_params=None) -> "Tensor":
        if tuple(data.shape) != self.extent():
            raise ShapeMismatchError(
                f"storage extent {tuple(data.shape)} does not match shape {self.extent()}",
                context={"expected": self.extent(), "got": tuple(data.shape)},
            )
        if data.dtype != np.dtype(self.dtype.storage):
            raise InvalidGraphError(
                f"storage dtype {data.dtype} does not match {self.dtype.name}",
                context={"expected": self.dtype.storage, "got": str(data.dtype)},
            )
        self.data = data
        if tensor_params is not None:
            self.tensor_params = tensor_params
        return self

    def allocate(self, xp=np) -> "Tensor":
        return self.bind(xp.zeros(self.extent(), dtype=self.dtype.storage))

    def __repr__(self) -> str:
        return f"Tensor({self.dtype.name}, shape={list(self.shape)}, bound={self.is_bound})"


def sizeof_tensor_params(tensor: Tensor) -> int:
    return tensor.dtype.params_size


def sizeof_tensor_data(tensor: Tensor) -> int:
    return tensor.shape.size * tensor.dtype.size


def sizeof_tensor(tensor: Tensor) -> int:
    return sizeof_tensor_params(tensor) + sizeof_tensor_data(tensor)
