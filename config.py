# config.py
import logging
import os
from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class LibConfig:
    # debug
    debug_print_specs: bool = False
    log_level: str = "WARNING"

    # scratch arena
    scratch_capacity: int = 1 << 20

    def __post_init__(self):
        if not isinstance(logging.getLevelName(str(self.log_level).upper()), int):
            raise ValueError(
                f"log_level {self.log_level!r} is not a logging level name "
                "(set through LibConfig.log_level or MICROLAYERS_LOG_LEVEL)"
            )

    def with_(self, **kwargs) -> "LibConfig":
        """Convenience: clone with updated values"""
        return replace(self, **kwargs)

    @classmethod
    def from_env(cls) -> "LibConfig":
        base = cls()
        return cls(
            debug_print_specs=os.environ.get("MICROLAYERS_DEBUG_PRINT_SPECS", "0").lower() in ("1", "true", "yes"),
            log_level=os.environ.get("MICROLAYERS_LOG_LEVEL", base.log_level).upper(),
            scratch_capacity=int(os.environ.get("MICROLAYERS_SCRATCH_CAPACITY", base.scratch_capacity)),
        )


_config = LibConfig.from_env()


def get_config() -> LibConfig:
    return _config


def set_config(config: LibConfig) -> LibConfig:
    """Install a new process-wide config and return the previous one."""
    global _config
    previous, _config = _config, config
    return previous
