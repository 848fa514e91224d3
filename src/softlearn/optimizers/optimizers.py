# src/softlearn/optimizers/optimizers.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Tuple

import numpy as np
from scipy.optimize import minimize as scipy_minimize

log = logging.getLogger("softlearn.optimizers")

# fn(iteration, parameters, objective) -> truthy to request a stop
Callback = Callable[[int, np.ndarray, float], Optional[bool]]


class DifferentiableFunction(Protocol):
    def evaluate_with_gradient(self, parameters: np.ndarray) -> Tuple[float, np.ndarray]: ...


@dataclass
class OptimizeResult:
    parameters: np.ndarray
    objective: float
    iterations: int
    converged: bool
    message: str = ""


def _notify(callbacks: Sequence[Callback], iteration: int, params: np.ndarray, objective: float) -> bool:
    stop = False
    for cb in callbacks:
        if cb(iteration, params, objective):
            stop = True
    return stop


# -------------------------------
# Step rules
# -------------------------------


@dataclass
class SGD:
    lr: float = 0.1

    def step(self, w: np.ndarray, grad: np.ndarray) -> np.ndarray:
        return w - self.lr * grad

    def reset(self) -> None:
        pass


@dataclass
class Momentum:
    lr: float = 0.05
    beta: float = 0.9
    v: np.ndarray | None = None

    def step(self, w: np.ndarray, grad: np.ndarray) -> np.ndarray:
        if self.v is None or self.v.shape != w.shape:
            self.v = np.zeros_like(w)
        self.v = self.beta * self.v + (1 - self.beta) * grad
        return w - self.lr * self.v

    def reset(self) -> None:
        self.v = None


@dataclass
class Adam:
    lr: float = 0.02
    b1: float = 0.9
    b2: float = 0.999
    eps: float = 1e-8
    m: np.ndarray | None = None
    v: np.ndarray | None = None
    t: int = 0

    def step(self, w: np.ndarray, grad: np.ndarray) -> np.ndarray:
        if self.m is None or self.m.shape != w.shape:
            self.m = np.zeros_like(w)
            self.v = np.zeros_like(w)
            self.t = 0
        self.t += 1

        self.m = self.b1 * self.m + (1 - self.b1) * grad
        self.v = self.b2 * self.v + (1 - self.b2) * (grad ** 2)
        m_hat = self.m / (1 - self.b1 ** self.t)
        v_hat = self.v / (1 - self.b2 ** self.t)
        return w - self.lr * m_hat / (np.sqrt(v_hat) + self.eps)

    def reset(self) -> None:
        self.m = None
        self.v = None
        self.t = 0


# -------------------------------
# Minimizers
# -------------------------------


class Minimizer(ABC):
    """Anything that minimizes a differentiable objective from an initial point."""

    @abstractmethod
    def minimize(
        self,
        function: DifferentiableFunction,
        initial: np.ndarray,
        callbacks: Sequence[Callback] = (),
    ) -> OptimizeResult:
        """Return the final point and objective value."""


@dataclass
class GradientDescent(Minimizer):
    """
    Full-batch first-order descent: W <- rule.step(W, dJ/dW).
    Stops once |J_prev - J| < tolerance or after max_iterations steps.
    """

    rule: Optional[object] = None  # SGD | Momentum | Adam; defaults to SGD()
    max_iterations: int = 1000
    tolerance: float = 1e-9

    def minimize(self, function, initial, callbacks=()):
        rule = self.rule if self.rule is not None else SGD()
        rule.reset()
        W = np.array(initial, dtype=np.float64, copy=True)
        f, g = function.evaluate_with_gradient(W)
        W_last, f_last = W, f  # last iterate with a finite objective
        converged = False
        stopped = False
        message = "max_iterations reached"
        it = 0
        for it in range(1, self.max_iterations + 1):
            W = rule.step(W, g)
            f_new, g = function.evaluate_with_gradient(W)
            log.debug("gd iter=%d objective=%.6f", it, f_new)
            if not np.isfinite(f_new):
                message = "objective is not finite; step size too large?"
                break
            W_last, f_last = W, f_new
            stop = _notify(callbacks, it, W, f_new)
            delta = abs(f - f_new)
            f = f_new
            if delta < self.tolerance:
                converged = True
                message = "objective change below tolerance"
                break
            if stop:
                stopped = True
                message = "stopped by callback"
                break
        if not (converged or stopped):
            log.warning("GradientDescent did not converge after %d iterations: %s", it, message)
        return OptimizeResult(
            parameters=W_last, objective=float(f_last), iterations=it, converged=converged, message=message
        )


@dataclass
class LBFGS(Minimizer):
    """
    Limited-memory BFGS via scipy's L-BFGS-B (unbounded).

    num_basis          -> number of stored correction pairs (scipy 'maxcor')
    max_iterations     -> 0 means scipy's default cap of 15000
    min_gradient_norm  -> projected-gradient stopping threshold ('gtol')
    factr              -> relative objective-decrease threshold ('ftol')
    """

    num_basis: int = 10
    max_iterations: int = 10000
    min_gradient_norm: float = 1e-6
    factr: float = 1e-15

    def minimize(self, function, initial, callbacks=()):
        W0 = np.array(initial, dtype=np.float64, copy=True)
        shape = W0.shape

        def fun(x: np.ndarray):
            f, g = function.evaluate_with_gradient(x.reshape(shape))
            return float(f), np.asarray(g, dtype=np.float64).ravel()

        it = 0
        stopped = False

        def on_iteration(intermediate_result):
            nonlocal it, stopped
            it += 1
            W = intermediate_result.x.reshape(shape)
            f = float(intermediate_result.fun)
            log.debug("lbfgs iter=%d objective=%.6f", it, f)
            if _notify(callbacks, it, W, f):
                stopped = True
                raise StopIteration

        maxiter = self.max_iterations if self.max_iterations > 0 else 15000
        res = scipy_minimize(
            fun,
            W0.ravel(),
            jac=True,
            method="L-BFGS-B",
            callback=on_iteration,
            options={
                "maxcor": self.num_basis,
                "maxiter": maxiter,
                "maxfun": max(15000, 2 * maxiter),
                "gtol": self.min_gradient_norm,
                "ftol": self.factr,
            },
        )
        message = "stopped by callback" if stopped else str(res.message)
        if stopped:
            log.info("L-BFGS stopped by callback after %d iterations", res.nit)
        elif not res.success:
            log.warning("L-BFGS did not converge after %d iterations: %s", res.nit, message)
        return OptimizeResult(
            parameters=np.asarray(res.x, dtype=np.float64).reshape(shape),
            objective=float(res.fun),
            iterations=int(res.nit),
            converged=bool(res.success),
            message=message,
        )
