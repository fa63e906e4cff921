# tests/test_leaky_relu.py
import numpy as np
import pytest

from kernels.base import ActivationOps
from kernels.dtypes import Q7, Q7Scalar, dequantize_q7
from layers.activations import LeakyReLU
from utils.errors import MissingCapabilityError, ShapeMismatchError


def build(input_factory, sink_factory, allocate, x, g, alpha=0.1, dtype=None):
    inp = input_factory(x) if dtype is None else input_factory(x, dtype=dtype)
    layer = LeakyReLU(inp, alpha)
    allocate(layer)
    sink = sink_factory(layer, g)
    return inp, layer, sink


def test_forward(input_factory, sink_factory, allocate):
    x = [[-4.0, -0.5, 0.0, 0.5, 4.0]]
    _, layer, _ = build(input_factory, sink_factory, allocate, x, np.ones((1, 5)), alpha=0.25)
    layer.forward()
    np.testing.assert_allclose(layer.result.data, [[-1.0, -0.125, 0.0, 0.5, 4.0]])


def test_backward_scenario(input_factory, sink_factory, allocate):
    _, layer, _ = build(input_factory, sink_factory, allocate, [-2.0, 0.0, 3.0], [1.0, 1.0, 1.0])
    layer.forward()
    layer.backward()
    np.testing.assert_allclose(layer.deltas.data, [[0.1, 1.0, 1.0]], rtol=1e-6)


def test_backward_applies_chain_rule(input_factory, sink_factory, allocate):
    _, layer, _ = build(input_factory, sink_factory, allocate, [-2.0, 0.0, 3.0], [2.0, -3.0, 0.5])
    layer.backward()
    np.testing.assert_allclose(layer.deltas.data, [[0.2, -3.0, 0.5]], rtol=1e-6)


def test_backward_ignores_previous_slot_contents(input_factory, sink_factory, allocate):
    _, layer, _ = build(input_factory, sink_factory, allocate, [-2.0, 0.0, 3.0], [1.0, 1.0, 1.0])
    layer.deltas.data[...] = 99.0
    layer.backward()
    first = layer.deltas.data.copy()
    layer.backward()
    np.testing.assert_array_equal(layer.deltas.data, first)


def test_shape_is_preserved_not_recomputed(input_factory, sink_factory, allocate):
    inp, layer, _ = build(input_factory, sink_factory, allocate, np.zeros((4, 3)), np.zeros((4, 3)))
    layer.forward()
    layer.backward()
    assert layer.result.data.shape == layer.deltas.data.shape == (4, 3)
    assert layer.result.shape is inp.result.shape
    assert layer.result.dtype is inp.result.dtype


def test_alpha_is_read_only(input_factory):
    layer = LeakyReLU(input_factory([1.0]), 0.1)
    with pytest.raises(AttributeError):
        layer.alpha = 0.5


def test_extent_mismatch_aborts_without_writes(input_factory, sink_factory, allocate):
    inp, layer, sink = build(input_factory, sink_factory, allocate, [-1.0, 2.0], [1.0, 1.0])
    layer.result.data[...] = 7.0
    layer.deltas.data[...] = 7.0
    inp.result.data = np.zeros((1, 3), dtype=np.float32)
    with pytest.raises(ShapeMismatchError) as exc:
        layer.forward()
    assert exc.value.context["expected"] == (1, 2)
    with pytest.raises(ShapeMismatchError):
        layer.backward()
    np.testing.assert_array_equal(layer.result.data, [[7.0, 7.0]])
    np.testing.assert_array_equal(layer.deltas.data, [[7.0, 7.0]])
    np.testing.assert_array_equal(sink.deltas.data, [[1.0, 1.0]])


def test_missing_kernel_fails_on_first_use(input_factory, sink_factory, allocate):
    _, layer, _ = build(input_factory, sink_factory, allocate, [-1.0, 2.0], [1.0, 1.0])
    layer.forward()
    layer.ops = ActivationOps(activate=layer.ops.activate, derivative=layer.ops.derivative)
    layer.deltas.data[...] = 5.0
    layer.forward()
    with pytest.raises(MissingCapabilityError):
        layer.backward()
    np.testing.assert_array_equal(layer.deltas.data, [[5.0, 5.0]])


def test_q7_backward_scenario(input_factory, sink_factory, allocate):
    _, layer, _ = build(input_factory, sink_factory, allocate, [-2.0, 0.0, 3.0], [1.0, 1.0, 1.0], dtype=Q7)
    assert isinstance(layer.alpha, Q7Scalar)
    layer.forward()
    result = dequantize_q7(layer.result.data, layer.result.tensor_params)
    np.testing.assert_allclose(result, [[-0.2, 0.0, 3.0]], atol=0.04)
    layer.backward()
    deltas = dequantize_q7(layer.deltas.data, layer.deltas.tensor_params)
    np.testing.assert_allclose(deltas, [[0.1, 1.0, 1.0]], atol=0.02)


def test_q7_slope_out_of_range_rejected(input_factory):
    inp = input_factory([-1.0, 1.0], dtype=Q7)
    with pytest.raises(ValueError):
        LeakyReLU(inp, 200.0)
    assert inp.output_layer is None
