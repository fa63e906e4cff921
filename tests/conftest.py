# tests/conftest.py
import os
import sys

# Ensure project root is importable (so layers.* imports work when running from repo root)
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import numpy as np
import pytest

from config import get_config, set_config
from kernels.dtypes import F32, Q7, Q7Params, fit_q7_params, quantize_q7
from layers.abs_layer import Layer, LayerType
from layers.input import InputLayer
from tensors.arena import ScratchArena
from utils.log import configure_logging


@pytest.fixture(scope="session", autouse=True)
def _quiet_logging():
    configure_logging("WARNING")
    yield


SINK_TYPE = LayerType("Gradient sink")


class GradientSink(Layer):
    """Stands in for whatever follows the layer under test and holds its gradient."""
    layer_type = SINK_TYPE

    def forward(self):
        pass

    def backward(self):
        pass


class Dangling(Layer):
    """A layer that was never initialized."""

    def forward(self):
        pass

    def backward(self):
        pass


def q7_tensor_data(values):
    values = np.asarray(values, dtype=np.float32)
    params = fit_q7_params(values.min(), values.max()) if values.size else Q7Params(0, 0)
    return quantize_q7(values, params), params


@pytest.fixture
def input_factory():
    def make(values, dtype=F32):
        values = np.atleast_2d(np.asarray(values, dtype=np.float32))
        layer = InputLayer(values.shape, dtype=dtype)
        if dtype is Q7:
            q, params = q7_tensor_data(values)
            layer.result.bind(q, params)
        else:
            layer.result.bind(values)
        return layer
    return make


@pytest.fixture
def sink_factory():
    def make(layer, grad):
        sink = GradientSink()
        sink.initialize(layer)
        grad = np.atleast_2d(np.asarray(grad, dtype=np.float32))
        if layer.result.dtype is Q7:
            q, params = q7_tensor_data(grad)
            sink.deltas.bind(q, params)
        else:
            sink.deltas.bind(grad)
        return sink
    return make


@pytest.fixture
def allocate():
    def bind(*layers):
        for layer in layers:
            layer.result.allocate()
            layer.deltas.allocate()
        return layers
    return bind


@pytest.fixture
def arena():
    return ScratchArena(1 << 16)


@pytest.fixture
def debug_config():
    previous = set_config(get_config().with_(debug_print_specs=True))
    yield get_config()
    set_config(previous)


@pytest.fixture
def config_override():
    saved = get_config()

    def apply(**kwargs):
        set_config(saved.with_(**kwargs))
        return get_config()
    yield apply
    set_config(saved)
