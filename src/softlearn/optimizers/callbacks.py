from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

"""
src/softlearn/optimizers/callbacks.py

Per-iteration minimizer callbacks, called as fn(iteration, parameters, objective):
- PrintLoss: log the objective every N iterations
- ObjectiveHistory: keep the objective trace in memory
- EarlyStopping: request a stop when the objective stops improving
"""


class PrintLoss:
    def __init__(self, every: int = 1, logger: Optional[logging.Logger] = None) -> None:
        self.every = max(1, int(every))
        self.log = logger or logging.getLogger("softlearn.optimizers")

    def __call__(self, iteration: int, parameters: np.ndarray, objective: float) -> None:
        if iteration % self.every == 0:
            self.log.info("iter=%d objective=%.6f", iteration, objective)


class ObjectiveHistory:
    """Capture the objective after every iteration."""

    def __init__(self) -> None:
        self.values: List[float] = []

    def __call__(self, iteration: int, parameters: np.ndarray, objective: float) -> None:
        self.values.append(float(objective))


class EarlyStopping:
    """
    Stop once the objective has not improved by at least min_delta
    for `patience` consecutive iterations.
    """

    def __init__(self, patience: int = 5, min_delta: float = 0.0) -> None:
        self.patience = max(1, patience)
        self.min_delta = float(min_delta)
        self.best = float("inf")
        self.stalled = 0

    def __call__(self, iteration: int, parameters: np.ndarray, objective: float) -> bool:
        if (self.best - objective) > self.min_delta:
            self.best = objective
            self.stalled = 0
            return False
        self.stalled += 1
        return self.stalled >= self.patience
