# Shared utilities: errors, logging, I/O, timers, run config. Explicit re-exports for a clean public API.

from .config import (
    TrainConfig as TrainConfig,
    build_optimizer as build_optimizer,
    load_config as load_config,
)
from .errors import (
    DimensionMismatchError as DimensionMismatchError,
    InvalidInputError as InvalidInputError,
    SoftlearnError as SoftlearnError,
)
from .io import (
    ensure_dir as ensure_dir,
    load_json as load_json,
    load_payload as load_payload,
    load_yaml as load_yaml,
    save_json as save_json,
    save_payload as save_payload,
    save_yaml as save_yaml,
)
from .log import get_logger as get_logger
from .timers import Timer as Timer, timed as timed

__all__ = [
    "TrainConfig",
    "build_optimizer",
    "load_config",
    "DimensionMismatchError",
    "InvalidInputError",
    "SoftlearnError",
    "ensure_dir",
    "load_json",
    "load_payload",
    "load_yaml",
    "save_json",
    "save_payload",
    "save_yaml",
    "get_logger",
    "Timer",
    "timed",
]
