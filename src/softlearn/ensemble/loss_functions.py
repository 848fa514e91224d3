# src/softlearn/ensemble/loss_functions.py
from __future__ import annotations

import numpy as np

from softlearn.core.errors import InvalidInputError


def exponential_loss(errors: np.ndarray) -> np.ndarray:
    """
    Per-sample loss used to weight estimators in an adaboost regressor:

        loss_i = 1 - exp(-|e_i| / max(e))

    max(e) is the signed maximum of the raw errors (not max |e|); when it is
    exactly 0 it is replaced by 1. An all-negative error vector therefore gets
    a negative denominator.
    """
    e = np.asarray(errors, dtype=np.float64)
    if e.size == 0:
        raise InvalidInputError("exponential loss needs at least one error value")
    max_error = float(e.max())
    if max_error == 0.0:
        max_error = 1.0
    return 1.0 - np.exp(-np.abs(e) / max_error)


class ExponentialLoss:
    """Stateless wrapper so the loss can be passed around as a strategy object."""

    @staticmethod
    def calculate(errors: np.ndarray) -> np.ndarray:
        return exponential_loss(errors)

    def __call__(self, errors: np.ndarray) -> np.ndarray:
        return exponential_loss(errors)
