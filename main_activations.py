import numpy as np

from config import get_config, set_config
from kernels.dtypes import Q7, dequantize_q7, fit_q7_params, quantize_q7
from layers.activations import LeakyReLU, Sigmoid
from layers.input import InputLayer
from tensors.arena import default_arena
from utils.log import configure_logging


def run(x: np.ndarray, grad: np.ndarray, dtype=None):
    inp = InputLayer(x.shape) if dtype is None else InputLayer(x.shape, dtype=dtype)
    if inp.dtype is Q7:
        params = fit_q7_params(x.min(), x.max())
        inp.result.bind(quantize_q7(x, params), params)
    else:
        inp.result.bind(x)

    leaky = LeakyReLU(inp, 0.1)
    sig = Sigmoid(leaky)
    head = Sigmoid(sig)
    for layer in (leaky, sig, head):
        layer.result.allocate()
        layer.deltas.allocate()

    # the head stands in for a loss; its deltas are what a loss layer would leave behind
    if inp.dtype is Q7:
        params = fit_q7_params(grad.min(), grad.max())
        head.deltas.bind(quantize_q7(grad, params), params)
    else:
        head.deltas.bind(grad)

    layers = [inp, leaky, sig, head]
    for layer in layers:
        layer.forward()
    for layer in reversed(layers[:-1]):
        layer.backward()

    for layer in layers[1:]:
        print(layer)
        layer.print_specs()
        print()
    return leaky


if __name__ == '__main__':
    set_config(get_config().with_(debug_print_specs=True))
    configure_logging()
    x = np.array([[-2.0, 0.0, 3.0], [1.5, -0.5, 0.25]], dtype=np.float32)
    grad = np.ones_like(x)

    leaky = run(x, grad)
    print("F32 input gradient:\n", leaky.deltas.data)

    leaky = run(x, grad, dtype=Q7)
    print("Q7 input gradient:\n", dequantize_q7(leaky.deltas.data, leaky.deltas.tensor_params))

    print("scratch peak bytes: ", default_arena().peak, " in use: ", default_arena().in_use)
