from __future__ import annotations

from typing import Sequence

from kernels.dtypes import F32, DType
from layers.abs_layer import Layer, LayerType
from tensors.tensor import Shape, Tensor
from utils.errors import InvalidGraphError


def _print_input_specs(layer: "InputLayer", print_fn) -> None:
    print_fn(f"Dim: {layer.result.dim}; Shape: {list(layer.result.shape)}")


INPUT_TYPE = LayerType("Input", _print_input_specs)


class InputLayer(Layer):
    """Head of a chain. Owns the shape every following activation layer aliases."""
    layer_type = INPUT_TYPE

    def __init__(self, shape: Sequence[int], dtype: DType = F32):
        super().__init__()
        if len(shape) != 2:
            raise InvalidGraphError("input layer expects a (batch, features) shape", context={"shape": tuple(shape)})
        self.dtype = dtype
        self.result = Tensor(dtype, Shape(shape))
        self._initialized = True

    def initialize(self, input_layer: Layer) -> Layer:
        raise InvalidGraphError("input layer takes no predecessor")

    def forward(self) -> None:
        return

    def backward(self) -> None:
        return
