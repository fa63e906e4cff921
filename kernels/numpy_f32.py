import numpy as np

from kernels.base import MathBackend, is_negative
from kernels.dtypes import F32


class F32Backend(MathBackend):
    """float32 kernels written against an array module (``xp``)."""
    dtype = F32
    xp = None

    def leaky_relu(self, x, alpha, result) -> None:
        xp = self.xp
        v = x.data
        result.data[...] = xp.where(is_negative(v), v * xp.float32(alpha), v)

    def d_leaky_relu(self, x, alpha, result) -> None:
        mask = is_negative(x.data)
        result.data[...] = 1
        result.data[mask] = alpha

    def sigmoid(self, x, result) -> None:
        xp = self.xp
        result.data[...] = 1 / (1 + xp.exp(-x.data))

    def d_sigmoid(self, s, result) -> None:
        v = s.data
        result.data[...] = v * (1 - v)

    def multiply(self, a, b, result) -> None:
        self.xp.multiply(a.data, b.data, out=result.data)


class NumpyF32Backend(F32Backend):
    name = "numpy_f32"
    xp = np

    def sigmoid(self, x, result) -> None:
        # exp overflows to inf for very negative inputs, which still yields 0
        with np.errstate(over="ignore"):
            super().sigmoid(x, result)
