# src/softlearn/models/softmax_function.py
from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
from scipy.special import logsumexp

from softlearn.core.errors import InvalidInputError


def check_labels(labels, num_samples: int, num_classes: int) -> np.ndarray:
    """
    Validate and return labels as a 1-D int64 array.
    Raises InvalidInputError on length mismatch, non-integral values or
    values outside [0, num_classes).
    """
    y = np.asarray(labels).ravel()
    if y.size != num_samples:
        raise InvalidInputError(f"got {y.size} labels for {num_samples} samples")
    if num_classes < 1:
        raise InvalidInputError(f"num_classes must be >= 1, got {num_classes}")
    if y.size == 0:
        return y.astype(np.int64)
    if not np.issubdtype(y.dtype, np.integer):
        if not np.issubdtype(y.dtype, np.number) or not np.all(np.mod(y, 1) == 0):
            raise InvalidInputError("labels must be integral class indices")
    y = y.astype(np.int64)
    if y.min() < 0 or y.max() >= num_classes:
        raise InvalidInputError(
            f"labels must lie in [0, {num_classes}), got range [{y.min()}, {y.max()}]"
        )
    return y


def add_intercept(X: np.ndarray) -> np.ndarray:
    """Append a row of ones to a (d, n) column-sample matrix."""
    return np.r_[X, np.ones((1, X.shape[1]))]


def one_hot(y: np.ndarray, num_classes: int) -> np.ndarray:
    """(num_classes, n) indicator matrix with Y[y_i, i] = 1."""
    Y = np.zeros((num_classes, y.size), dtype=np.float64)
    Y[y, np.arange(y.size)] = 1.0
    return Y


def softmax(scores: np.ndarray) -> np.ndarray:
    """Column-wise softmax of a (num_classes, n) score matrix."""
    z = scores - scores.max(axis=0, keepdims=True)
    e = np.exp(z)
    return e / e.sum(axis=0, keepdims=True)


def initial_parameters(num_classes: int, num_cols: int, seed: Optional[int] = None) -> np.ndarray:
    """Small zero-centred random weights: 0.005 * N(0, 1)."""
    rng = np.random.default_rng(seed)
    return 0.005 * rng.standard_normal(size=(num_classes, num_cols))


class SoftmaxRegressionFunction:
    """
    Regularized multinomial negative log-likelihood over a parameter matrix.

        J(W) = -(1/n) * sum_i log P(y_i | x_i, W) + (lambda/2) * ||W||_F^2
        P(k | x, W) = exp(z_k - max z) / sum_j exp(z_j - max z),   z = W x

    Samples are the columns of `data` (d, n). With fit_intercept the input is
    augmented with a trailing row of ones, so W has shape (num_classes, d + 1).
    The whole dataset is used on every evaluation.
    """

    def __init__(
        self,
        data: np.ndarray,
        labels: np.ndarray,
        num_classes: int,
        lambda_: float = 1e-4,
        fit_intercept: bool = False,
    ):
        X = np.asarray(data, dtype=np.float64)
        if X.ndim != 2:
            raise InvalidInputError(f"data must be 2-D (features x samples), got shape {X.shape}")
        y = check_labels(labels, X.shape[1], int(num_classes))
        if y.size == 0:
            raise InvalidInputError("cannot build an objective over zero samples")

        self._num_classes = int(num_classes)
        self._lambda = float(lambda_)
        self._fit_intercept = bool(fit_intercept)
        self._feature_dim = X.shape[0]
        self._X = add_intercept(X) if self._fit_intercept else X  # (d(+1), n)
        self._y = y
        self._Y = one_hot(y, self._num_classes)  # (K, n)

    # --------------- Properties ---------------

    @property
    def num_classes(self) -> int:
        return self._num_classes

    @property
    def lambda_(self) -> float:
        return self._lambda

    @property
    def fit_intercept(self) -> bool:
        return self._fit_intercept

    @property
    def num_samples(self) -> int:
        return self._y.size

    @property
    def feature_dim(self) -> int:
        return self._feature_dim

    @property
    def ground_truth(self) -> np.ndarray:
        return self._Y

    def initial_point(self, seed: Optional[int] = None) -> np.ndarray:
        return initial_parameters(self._num_classes, self._X.shape[0], seed)

    # --------------- Evaluation ---------------

    def _check_shape(self, W: np.ndarray) -> np.ndarray:
        W = np.asarray(W, dtype=np.float64)
        expected = (self._num_classes, self._X.shape[0])
        if W.shape != expected:
            raise InvalidInputError(f"parameters must have shape {expected}, got {W.shape}")
        return W

    def _log_probabilities(self, W: np.ndarray) -> np.ndarray:
        scores = W @ self._X  # (K, n)
        # log-softmax; logsumexp subtracts the column max internally
        return scores - logsumexp(scores, axis=0, keepdims=True)

    def _value(self, W: np.ndarray, log_p: np.ndarray) -> float:
        nll = -float(np.sum(self._Y * log_p)) / self.num_samples
        return nll + 0.5 * self._lambda * float(np.sum(W * W))

    def _grad(self, W: np.ndarray, P: np.ndarray) -> np.ndarray:
        return -((self._Y - P) @ self._X.T) / self.num_samples + self._lambda * W

    def probabilities(self, W: np.ndarray) -> np.ndarray:
        """(num_classes, n) class probabilities of the bound samples."""
        W = self._check_shape(W)
        return softmax(W @ self._X)

    def evaluate(self, W: np.ndarray) -> float:
        W = self._check_shape(W)
        return self._value(W, self._log_probabilities(W))

    def gradient(self, W: np.ndarray) -> np.ndarray:
        W = self._check_shape(W)
        return self._grad(W, np.exp(self._log_probabilities(W)))

    def evaluate_with_gradient(self, W: np.ndarray) -> Tuple[float, np.ndarray]:
        W = self._check_shape(W)
        log_p = self._log_probabilities(W)
        return self._value(W, log_p), self._grad(W, np.exp(log_p))
