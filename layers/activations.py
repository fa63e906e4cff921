from __future__ import annotations

from typing import Optional

from kernels.base import ActivationOps, MathBackend
from kernels.defaults import default_backend
from kernels.dtypes import F32
from layers.abs_layer import Layer, LayerType
from tensors.arena import ScratchArena, default_arena


def _resolve_backend(backend: Optional[MathBackend], input_layer) -> MathBackend:
    if backend is not None:
        return backend
    x_in = getattr(input_layer, "result", None)
    return default_backend(x_in.dtype if x_in is not None else F32)


def _print_leaky_relu_specs(layer: "LeakyReLU", print_fn) -> None:
    print_fn("alpha: ")
    layer.dtype.print_scalar(layer.alpha, print_fn)


def _print_sigmoid_specs(layer: "Sigmoid", print_fn) -> None:
    return


LEAKY_RELU_TYPE = LayerType("Leaky ReLU", _print_leaky_relu_specs)
SIGMOID_TYPE = LayerType("Sigmoid", _print_sigmoid_specs)


class LeakyReLU(Layer):
    """
    y = alpha * x for x < 0, y = x otherwise.

    The derivative is alpha for x < 0 and 1 otherwise, so x == 0 sits on the
    non-negative branch in both directions.
    """
    layer_type = LEAKY_RELU_TYPE

    def __init__(self, input_layer: Layer, alpha, backend: Optional[MathBackend] = None):
        super().__init__()
        self.backend = _resolve_backend(backend, input_layer)
        self.dtype = self.backend.dtype
        self._alpha = self.dtype.scalar(alpha)
        self.ops = ActivationOps.from_backend(self.backend, "leaky_relu", "d_leaky_relu", "multiply")
        self.initialize(input_layer)

    @property
    def alpha(self):
        return self._alpha

    def forward(self) -> None:
        leaky_relu, = self.ops.require("activate")
        self._check_forward()
        leaky_relu(self.input_layer.result, self._alpha, self.result)

    def backward(self) -> None:
        d_leaky_relu, multiply = self.ops.require("derivative", "multiply")
        self._check_backward()
        x_in = self.input_layer.result
        delta_in = self.deltas
        delta_out = self.output_layer.deltas

        # delta_in = delta_out .* leaky_relu'(x_in)
        d_leaky_relu(x_in, self._alpha, delta_in)
        multiply(delta_in, delta_out, delta_in)


class Sigmoid(Layer):
    """
    y = 1 / (1 + exp(-x)).

    The derivative is expressed on the sigmoid output, s * (1 - s). The only
    cached activation reachable in backward is the input result, so backward
    recomputes s into a scratch tensor that lives for that one call.
    """
    layer_type = SIGMOID_TYPE

    def __init__(self, input_layer: Layer, backend: Optional[MathBackend] = None,
                 arena: Optional[ScratchArena] = None):
        super().__init__()
        self.backend = _resolve_backend(backend, input_layer)
        self.dtype = self.backend.dtype
        self.ops = ActivationOps.from_backend(self.backend, "sigmoid", "d_sigmoid", "multiply")
        self._arena = arena
        self.initialize(input_layer)

    @property
    def arena(self) -> ScratchArena:
        return self._arena if self._arena is not None else default_arena()

    def forward(self) -> None:
        sigmoid, = self.ops.require("activate")
        self._check_forward()
        sigmoid(self.input_layer.result, self.result)

    def backward(self) -> None:
        sigmoid, d_sigmoid, multiply = self.ops.require("activate", "derivative", "multiply")
        self._check_backward()
        x_in = self.input_layer.result
        delta_in = self.deltas
        delta_out = self.output_layer.deltas

        # delta_in = delta_out .* sigmoid'(x_in)
        with self.arena.scratch_tensor(x_in) as temp_result:
            sigmoid(x_in, temp_result)
            d_sigmoid(temp_result, temp_result)
            multiply(temp_result, delta_out, delta_in)
