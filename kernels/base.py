from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from kernels.dtypes import DType
from utils.errors import MissingCapabilityError


def is_negative(values):
    # x == 0 belongs to the non-negative branch for every kernel that splits on sign
    return values < 0


class MathBackend:
    """
    Elementwise kernels bound to one numeric representation.

    Subclasses implement any subset of ``leaky_relu``, ``d_leaky_relu``,
    ``sigmoid``, ``d_sigmoid`` and ``multiply``. Every kernel takes
    input tensor(s), an optional scalar and an output tensor, writes the output
    in place and must tolerate the output aliasing an input.
    """
    name: str = "abstract"
    dtype: DType = None

    def supports(self, kernel: str) -> bool:
        return callable(getattr(self, kernel, None))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.dtype.name if self.dtype else '-'})"


@dataclass(frozen=True)
class ActivationOps:
    activate: Optional[Callable] = None
    derivative: Optional[Callable] = None
    multiply: Optional[Callable] = None

    @classmethod
    def from_backend(cls, backend: MathBackend, activate: str, derivative: str,
                     multiply: str = "multiply") -> "ActivationOps":
        return cls(
            activate=getattr(backend, activate, None),
            derivative=getattr(backend, derivative, None),
            multiply=getattr(backend, multiply, None),
        )

    def require(self, *slots: str) -> Tuple[Callable, ...]:
        missing = [slot for slot in slots if getattr(self, slot) is None]
        if missing:
            raise MissingCapabilityError(
                f"kernel slot(s) not set: {', '.join(missing)}",
                context={"missing": missing},
            )
        return tuple(getattr(self, slot) for slot in slots)
