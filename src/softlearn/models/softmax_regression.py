# src/softlearn/models/softmax_regression.py
from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from softlearn.core.errors import DimensionMismatchError, InvalidInputError
from softlearn.core.timers import Timer
from softlearn.models.softmax_function import (
    SoftmaxRegressionFunction,
    add_intercept,
    initial_parameters,
    softmax,
)
from softlearn.optimizers.optimizers import LBFGS, Callback, Minimizer

log = logging.getLogger("softlearn.models")


class SoftmaxRegression:
    """
    Multi-class linear classifier fit by minimizing the regularized softmax
    negative log-likelihood (see SoftmaxRegressionFunction).

    Samples are COLUMNS: data has shape (input_size, n). Parameters have shape
    (num_classes, input_size [+1 with intercept]); the intercept is the last column.

    Usage:
        model = SoftmaxRegression(input_size=X.shape[0], num_classes=3)
        model.train(X, y, optimizer=LBFGS(num_basis=5, max_iterations=100))
        labels = model.classify(X_test)
        labels, probs = model.classify(X_test, return_probabilities=True)

    Calling classify()/compute_accuracy() before train() returns well-defined
    but meaningless output (all-zero parameters -> label 0, uniform probabilities).
    """

    def __init__(
        self,
        input_size: int = 0,
        num_classes: int = 0,
        fit_intercept: bool = False,
        lambda_: float = 1e-4,
        seed: Optional[int] = None,
    ):
        if input_size < 0 or num_classes < 0:
            raise InvalidInputError("input_size and num_classes must be non-negative")
        self._fit_intercept = bool(fit_intercept)
        self._num_classes = int(num_classes)
        self._lambda = float(lambda_)
        self._parameters = np.zeros((self._num_classes, int(input_size) + int(self._fit_intercept)))
        self._trained = False
        self.seed = seed

    @classmethod
    def from_data(
        cls,
        data: np.ndarray,
        labels: np.ndarray,
        num_classes: int,
        lambda_: float = 1e-4,
        fit_intercept: bool = False,
        optimizer: Optional[Minimizer] = None,
        seed: Optional[int] = None,
        callbacks: Sequence[Callback] = (),
    ) -> "SoftmaxRegression":
        """Construct and train in one go."""
        X = np.asarray(data)
        input_size = X.shape[0] if X.ndim == 2 else 0
        model = cls(input_size, num_classes, fit_intercept=fit_intercept, lambda_=lambda_, seed=seed)
        model.train(X, labels, num_classes, optimizer=optimizer, callbacks=callbacks)
        return model

    # --------------- Accessors ---------------

    @property
    def num_classes(self) -> int:
        return self._num_classes

    @num_classes.setter
    def num_classes(self, value: int) -> None:
        # Only affects the next train(); a changed count re-initializes the parameters there.
        if int(value) < 0:
            raise InvalidInputError(f"num_classes must be non-negative, got {value}")
        self._num_classes = int(value)

    @property
    def lambda_(self) -> float:
        return self._lambda

    @lambda_.setter
    def lambda_(self, value: float) -> None:
        if float(value) < 0.0:
            raise InvalidInputError(f"lambda must be non-negative, got {value}")
        self._lambda = float(value)

    @property
    def fit_intercept(self) -> bool:
        return self._fit_intercept

    @property
    def parameters(self) -> np.ndarray:
        return self._parameters

    @parameters.setter
    def parameters(self, value: np.ndarray) -> None:
        W = np.array(value, dtype=np.float64)
        if W.ndim != 2 or W.shape[1] < int(self._fit_intercept):
            raise InvalidInputError(f"parameters must be a 2-D (num_classes, features) matrix, got {W.shape}")
        self._parameters = W
        self._num_classes = W.shape[0]
        self._trained = True

    @property
    def feature_size(self) -> int:
        cols = self._parameters.shape[1]
        return cols - 1 if self._fit_intercept else cols

    @property
    def is_trained(self) -> bool:
        return self._trained

    def __repr__(self) -> str:
        return (
            f"SoftmaxRegression(input_size={self.feature_size}, num_classes={self._num_classes}, "
            f"fit_intercept={self._fit_intercept}, lambda_={self._lambda}, trained={self._trained})"
        )

    # --------------- Training ---------------

    def train(
        self,
        data: np.ndarray,
        labels: np.ndarray,
        num_classes: Optional[int] = None,
        optimizer: Optional[Minimizer] = None,
        callbacks: Sequence[Callback] = (),
    ) -> float:
        """
        Fit the parameters on (data, labels) and return the final objective value.

        Warm-starts from the current parameters when the model is trained and
        the shape (num_classes, input_size) is unchanged; otherwise starts from
        small random weights. On any error the model is left untouched.
        """
        k = self._num_classes if num_classes is None else int(num_classes)
        function = SoftmaxRegressionFunction(data, labels, k, self._lambda, self._fit_intercept)
        shape = (k, function.feature_dim + int(self._fit_intercept))
        if shape[1] == 0:
            raise InvalidInputError("data has no features and no intercept is fit")

        if self._trained and self._parameters.shape == shape:
            initial = self._parameters.copy()
            start = "warm"
        else:
            initial = initial_parameters(shape[0], shape[1], self.seed)
            start = "random"

        optimizer = optimizer if optimizer is not None else LBFGS()
        log.info(
            "training softmax regression: classes=%d features=%d samples=%d lambda=%g intercept=%s start=%s optimizer=%s",
            k,
            function.feature_dim,
            function.num_samples,
            self._lambda,
            self._fit_intercept,
            start,
            type(optimizer).__name__,
        )
        t = Timer()
        result = optimizer.minimize(function, initial, callbacks)

        self._parameters = np.asarray(result.parameters, dtype=np.float64).reshape(shape)
        self._num_classes = k
        self._trained = True
        log.info(
            "training finished in %s: objective=%.6f iterations=%d converged=%s",
            t,
            result.objective,
            result.iterations,
            result.converged,
        )
        return float(result.objective)

    # --------------- Inference ---------------

    def _scores(self, data: np.ndarray) -> np.ndarray:
        X = np.asarray(data, dtype=np.float64)
        if X.ndim != 2:
            raise DimensionMismatchError(f"expected a 2-D (features x samples) matrix, got shape {X.shape}")
        if X.shape[0] != self.feature_size:
            raise DimensionMismatchError(f"data has {X.shape[0]} features, model expects {self.feature_size}")
        if self._num_classes == 0:
            raise InvalidInputError("model has no classes")
        if self._fit_intercept:
            X = add_intercept(X)
        return self._parameters @ X  # (K, n)

    def probabilities(self, data: np.ndarray) -> np.ndarray:
        """(num_classes, n) class probabilities; every column sums to 1."""
        return softmax(self._scores(data))

    def classify(
        self, data: np.ndarray, return_probabilities: bool = False
    ) -> Union[np.ndarray, Tuple[np.ndarray, np.ndarray]]:
        """
        Predicted label per column of `data`: arg-max of the raw scores W x,
        lowest class index wins ties. With return_probabilities=True, returns
        (labels, probabilities).
        """
        scores = self._scores(data)
        labels = scores.argmax(axis=0).astype(np.int64)
        if return_probabilities:
            return labels, softmax(scores)
        return labels

    def classify_point(self, point: np.ndarray) -> int:
        x = np.asarray(point, dtype=np.float64).reshape(-1)
        if x.size != self.feature_size:
            raise DimensionMismatchError(f"point has {x.size} features, model expects {self.feature_size}")
        return int(self.classify(x[:, None])[0])

    def compute_accuracy(self, data: np.ndarray, labels: np.ndarray) -> float:
        """Percentage (0-100) of samples whose predicted label matches `labels`."""
        y_hat = self.classify(data)
        y = np.asarray(labels).ravel()
        if y_hat.size == 0:
            raise InvalidInputError("cannot compute accuracy on an empty dataset")
        if y.size != y_hat.size:
            raise InvalidInputError(f"got {y.size} labels for {y_hat.size} samples")
        return float((y_hat == y).sum()) / y.size * 100.0
