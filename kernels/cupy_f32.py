import cupy as cp

from kernels.numpy_f32 import F32Backend


class CupyF32Backend(F32Backend):
    name = "cupy_f32"
    xp = cp
