"""
Numeric representations a tensor can carry.

A ``DType`` is an immutable descriptor: element size, size of the per-tensor
parameter block, the array dtype used for storage and the scalar helpers.
``F32`` is plain float32. ``Q7`` is 8-bit affine quantization where
``real = (q - zero_point) / 2**shift``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import numpy as np

Q7_MIN = -128
Q7_MAX = 127
Q7_MAX_SHIFT = 15


@dataclass(frozen=True)
class Q7Params:
    shift: int
    zero_point: int


@dataclass(frozen=True)
class Q7Scalar:
    value: int
    shift: int
    zero_point: int = 0

    @classmethod
    def from_float(cls, x: float) -> "Q7Scalar":
        params = fit_q7_params(x, x)
        if round(abs(float(x))) > Q7_MAX:
            raise ValueError(f"{x} does not fit a Q7 scalar (|value| must round to at most {Q7_MAX})")
        return cls(int(quantize_q7(np.float32(x), params)), params.shift, params.zero_point)

    def to_float(self) -> float:
        return (self.value - self.zero_point) / float(1 << self.shift)


def fit_q7_params(lo: float, hi: float) -> Q7Params:
    """Largest shift (zero point 0) that keeps [lo, hi] inside the int8 range."""
    m = max(abs(float(lo)), abs(float(hi)))
    shift = Q7_MAX_SHIFT
    while shift > 0 and m * (1 << shift) > Q7_MAX:
        shift -= 1
    return Q7Params(shift=shift, zero_point=0)


def quantize_q7(real, params: Q7Params):
    q = np.round(np.asarray(real, dtype=np.float32) * np.float32(1 << params.shift)) + params.zero_point
    return np.clip(q, Q7_MIN, Q7_MAX).astype(np.int8)


def dequantize_q7(q, params: Q7Params):
    return (np.asarray(q, dtype=np.float32) - np.float32(params.zero_point)) / np.float32(1 << params.shift)


PrintFn = Callable[[str], Any]


def _print_f32(value, print_fn: PrintFn) -> None:
    print_fn(f"{float(value):f}")


def _print_q7(value: Q7Scalar, print_fn: PrintFn) -> None:
    print_fn(f"{value.to_float():f} (V: {value.value}; S: {value.shift}; Z: {value.zero_point})")


def _f32_scalar(value) -> float:
    return float(np.float32(value))


def _q7_scalar(value) -> Q7Scalar:
    if isinstance(value, Q7Scalar):
        return value
    return Q7Scalar.from_float(value)


@dataclass(frozen=True)
class DType:
    name: str
    size: int
    params_size: int
    storage: str
    to_scalar: Callable[[Any], Any]
    print_scalar: Callable[[Any, PrintFn], None]

    def scalar(self, value):
        return self.to_scalar(value)

    def __repr__(self) -> str:
        return f"DType({self.name})"


F32 = DType(name="F32", size=4, params_size=0, storage="float32",
            to_scalar=_f32_scalar, print_scalar=_print_f32)

# uint16 shift + int8 zero point, padded to 4 bytes
Q7 = DType(name="Q7", size=1, params_size=4, storage="int8",
           to_scalar=_q7_scalar, print_scalar=_print_q7)
