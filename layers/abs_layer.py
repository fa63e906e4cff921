from __future__ import annotations

import builtins
import functools
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional

from config import get_config
from kernels.dtypes import DType
from tensors.tensor import Tensor
from utils.errors import InvalidGraphError, MissingCapabilityError, ShapeMismatchError
from utils.log import get_logger

log = get_logger(__name__)

PrintFn = Callable[[str], Any]


@dataclass(frozen=True)
class LayerType:
    """Shared identity of one layer kind. Compared with ``is``."""
    name: str
    printer: Optional[Callable[["Layer", PrintFn], None]] = None

    @property
    def print_specs(self) -> Optional[Callable[["Layer", PrintFn], None]]:
        if not get_config().debug_print_specs:
            return None
        return self.printer


class Layer(ABC):
    """
    Node of a chain of layers.

    A node reads ``input_layer.result`` in ``forward`` and writes its own
    ``result``. In ``backward`` it reads ``output_layer.deltas`` (already
    written by the successor) and writes its own ``deltas``. Forward runs
    front to back, backward back to front.
    """
    layer_type: LayerType = None
    dtype: DType = None

    def __init__(self):
        self.input_layer: Optional[Layer] = None
        self.output_layer: Optional[Layer] = None
        self.result: Optional[Tensor] = None
        self.deltas: Optional[Tensor] = None
        self.trainable_params_count = 0
        self._initialized = False

    def initialize(self, input_layer: "Layer") -> "Layer":
        """Link to ``input_layer`` and share its result shape. Runs once."""
        if self._initialized:
            raise InvalidGraphError(f"{self._name()} layer is already initialized")
        if not isinstance(input_layer, Layer):
            raise InvalidGraphError(f"input of {self._name()} layer is not a layer",
                                    context={"input": repr(input_layer)})
        x_in = input_layer.result
        if x_in is None:
            raise InvalidGraphError(f"input of {self._name()} layer has no result tensor, initialize it first",
                                    context={"input": repr(input_layer)})
        if input_layer.output_layer is not None:
            raise InvalidGraphError(f"input of {self._name()} layer already feeds another layer",
                                    context={"input": repr(input_layer), "output": repr(input_layer.output_layer)})
        if x_in.dim != 2:
            raise InvalidGraphError(f"{self._name()} layer expects a 2-D (batch x features) input",
                                    context={"shape": x_in.extent()})
        if self.dtype is not None and x_in.dtype is not self.dtype:
            raise InvalidGraphError(
                f"{self._name()} layer kernels are {self.dtype.name}, input is {x_in.dtype.name}",
                context={"expected": self.dtype.name, "got": x_in.dtype.name},
            )

        self.input_layer = input_layer
        input_layer.output_layer = self

        self.result = x_in.alias()
        self.deltas = self.result.alias()

        self.trainable_params_count = 0
        self._initialized = True
        log.debug("layer_initialized", layer=self._name(), shape=self.result.extent(), dtype=self.result.dtype.name)
        return self

    @abstractmethod
    def forward(self) -> None:
        pass

    @abstractmethod
    def backward(self) -> None:
        pass

    def calc_result_shape(self) -> None:
        # shape is shared with the input result, nothing to recompute
        return

    def sizeof_paramem(self) -> int:
        return 0

    def set_paramem(self, memory) -> None:
        _accept_no_memory(self, memory, "parameter")

    def sizeof_trainmem(self) -> int:
        return 0

    def set_trainmem(self, memory) -> None:
        _accept_no_memory(self, memory, "training")

    def print_specs(self, print_fn: Optional[PrintFn] = None) -> None:
        printer = self.layer_type.print_specs if self.layer_type else None
        if printer is None:
            raise MissingCapabilityError(f"print_specs is not available for {self._name()} layer",
                                         context={"debug_print_specs": get_config().debug_print_specs})
        printer(self, print_fn or functools.partial(builtins.print, end=""))

    def _name(self) -> str:
        return self.layer_type.name if self.layer_type else type(self).__name__

    def _check_forward(self) -> None:
        x_in = self._linked("input_layer").result
        _require_storage(self, x_in, "input result")
        _require_storage(self, self.result, "result")

    def _check_backward(self) -> None:
        x_in = self._linked("input_layer").result
        delta_out = self._linked("output_layer").deltas
        if delta_out is None:
            raise InvalidGraphError(f"successor of {self._name()} layer has no gradient tensor")
        _require_storage(self, x_in, "input result")
        _require_storage(self, self.deltas, "deltas")
        _require_storage(self, delta_out, "successor deltas")

    def _linked(self, attr: str) -> "Layer":
        node = getattr(self, attr)
        if node is None:
            raise InvalidGraphError(f"{self._name()} layer has no {attr.replace('_', ' ')}")
        return node

    def __repr__(self) -> str:
        if self.result is None:
            return f"{type(self).__name__}(uninitialized)"
        return f"{type(self).__name__}(shape={list(self.result.shape)}, dtype={self.result.dtype.name})"


def _require_storage(layer: Layer, tensor: Tensor, what: str) -> None:
    if tensor is None or not tensor.is_bound:
        raise InvalidGraphError(f"{what} of {layer._name()} layer has no storage bound", context={"tensor": what})
    expected = layer.result.extent()
    if tuple(tensor.data.shape) != expected:
        raise ShapeMismatchError(
            f"{what} of {layer._name()} layer has extent {tuple(tensor.data.shape)}, expected {expected}",
            context={"tensor": what, "expected": expected, "got": tuple(tensor.data.shape)},
        )


def _accept_no_memory(layer: Layer, memory, kind: str) -> None:
    if memory is not None and len(memory) != 0:
        raise InvalidGraphError(f"{layer._name()} layer holds no {kind} memory, got {len(memory)} bytes")
