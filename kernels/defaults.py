from kernels.base import MathBackend
from kernels.dtypes import F32, Q7, DType
from kernels.numpy_f32 import NumpyF32Backend
from kernels.numpy_q7 import NumpyQ7Backend
from utils.errors import MissingCapabilityError

_DEFAULTS = {
    F32.name: NumpyF32Backend(),
    Q7.name: NumpyQ7Backend(),
}


def default_backend(dtype: DType) -> MathBackend:
    try:
        return _DEFAULTS[dtype.name]
    except KeyError:
        raise MissingCapabilityError(f"no default kernels for dtype {dtype.name}",
                                     context={"dtype": dtype.name}) from None
