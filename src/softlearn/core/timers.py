from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional


class Timer:
    def __init__(self):
        self.reset()

    def reset(self):
        self._t0 = time.perf_counter()

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self._t0

    def __repr__(self) -> str:
        return f"{self.elapsed:.3f}s"


@contextmanager
def timed(label: str, logger: Optional[logging.Logger] = None) -> Iterator[Timer]:
    t = Timer()
    yield t
    log = logger or logging.getLogger("softlearn.timer")
    log.info("[timer] %s: %.3fs", label, t.elapsed)
