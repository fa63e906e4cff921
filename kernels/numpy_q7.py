"""
Q7 kernels: dequantize, compute in float32, requantize.

Output quantization parameters are chosen by the kernel and written to the
output tensor's parameter block. Inputs are always read before the output is
touched so that in-place calls are safe.
"""
import numpy as np

from kernels.base import MathBackend, is_negative
from kernels.dtypes import Q7, Q7Params, dequantize_q7, fit_q7_params, quantize_q7
from utils.errors import InvalidGraphError

SIGMOID_PARAMS = Q7Params(shift=8, zero_point=-128)    # [0, 1)
D_SIGMOID_PARAMS = Q7Params(shift=9, zero_point=-128)   # [0, 0.5), peak 0.25 is q = 0


def _real(tensor):
    if tensor.tensor_params is None:
        raise InvalidGraphError("Q7 tensor has no quantization parameters", context={"tensor": repr(tensor)})
    return dequantize_q7(tensor.data, tensor.tensor_params)


def _store(result, real, params: Q7Params) -> None:
    result.tensor_params = params
    result.data[...] = quantize_q7(real, params)


class NumpyQ7Backend(MathBackend):
    name = "numpy_q7"
    dtype = Q7

    def leaky_relu(self, x, alpha, result) -> None:
        v = _real(x)
        out = np.where(is_negative(v), v * np.float32(alpha.to_float()), v)
        _store(result, out, x.tensor_params)

    def d_leaky_relu(self, x, alpha, result) -> None:
        a = np.float32(alpha.to_float())
        out = np.where(is_negative(_real(x)), a, np.float32(1))
        _store(result, out, fit_q7_params(a, 1.0))

    def sigmoid(self, x, result) -> None:
        with np.errstate(over="ignore"):
            out = 1 / (1 + np.exp(-_real(x)))
        _store(result, out, SIGMOID_PARAMS)

    def d_sigmoid(self, s, result) -> None:
        v = _real(s)
        _store(result, v * (1 - v), D_SIGMOID_PARAMS)

    def multiply(self, a, b, result) -> None:
        out = _real(a) * _real(b)
        if out.size:
            params = fit_q7_params(out.min(), out.max())
        else:
            params = Q7Params(shift=0, zero_point=0)
        _store(result, out, params)
