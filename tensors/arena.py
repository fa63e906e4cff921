from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from config import get_config
from tensors.tensor import Tensor, array_module, sizeof_tensor
from utils.errors import ResourceExhaustedError
from utils.log import get_logger

log = get_logger(__name__)


class ScratchArena:
    """
    Byte budget for transient tensors.

    Every reservation is scoped to a ``with`` block and returned on exit,
    whatever the exit path, so nothing is held between calls.
    """

    def __init__(self, capacity: int):
        if capacity < 0:
            raise ValueError("capacity must be non-negative")
        self.capacity = int(capacity)
        self._in_use = 0
        self._peak = 0

    @property
    def in_use(self) -> int:
        return self._in_use

    @property
    def peak(self) -> int:
        return self._peak

    @contextmanager
    def reserve(self, nbytes: int) -> Iterator[int]:
        if nbytes > self.capacity - self._in_use:
            log.warning("scratch_exhausted", requested=nbytes, in_use=self._in_use, capacity=self.capacity)
            raise ResourceExhaustedError(
                f"scratch request of {nbytes} bytes exceeds free arena space",
                context={"requested": nbytes, "in_use": self._in_use, "capacity": self.capacity},
            )
        self._in_use += nbytes
        self._peak = max(self._peak, self._in_use)
        try:
            yield nbytes
        finally:
            self._in_use -= nbytes

    @contextmanager
    def scratch_tensor(self, like: Tensor) -> Iterator[Tensor]:
        """Temporary tensor with ``like``'s dtype and shared shape, sized from its footprint."""
        nbytes = sizeof_tensor(like)
        with self.reserve(nbytes):
            xp = array_module(like.data)
            try:
                data = xp.empty(like.extent(), dtype=like.dtype.storage)
            except MemoryError as exc:
                # cupy.cuda.memory.OutOfMemoryError is a MemoryError too
                log.warning("scratch_allocation_failed", requested=nbytes, in_use=self._in_use, capacity=self.capacity)
                raise ResourceExhaustedError(
                    f"allocating {nbytes} bytes of scratch storage failed",
                    context={"requested": nbytes, "in_use": self._in_use, "capacity": self.capacity},
                ) from exc
            temp = Tensor(like.dtype, like.shape.alias())
            try:
                temp.bind(data)
                yield temp
            finally:
                temp.data = None
                temp.shape.release()


_default_arena = None


def default_arena() -> ScratchArena:
    global _default_arena
    capacity = get_config().scratch_capacity
    if _default_arena is None or _default_arena.capacity != capacity:
        _default_arena = ScratchArena(capacity)
    return _default_arena
