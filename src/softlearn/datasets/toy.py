from __future__ import annotations
import numpy as np
from dataclasses import dataclass

@dataclass
class StandardizeResult:
    X: np.ndarray
    mean: np.ndarray
    std: np.ndarray

def standardize(X: np.ndarray, eps: float = 1e-8) -> StandardizeResult:
    """Standardize each feature (row) of a (d, n) column-sample matrix."""
    mean = X.mean(axis=1, keepdims=True)
    std = X.std(axis=1, keepdims=True) + eps
    return StandardizeResult((X - mean) / std, mean.squeeze(1), std.squeeze(1))

def make_multiclass(n: int = 300, k: int = 3, d: int = 4, margin: float = 0.8, seed: int = 0, flip_prob: float = 0.0):
    """
    Generate a (d, n) feature matrix (samples as columns) and labels in [0, k).
    Scores s = W x + b are pushed away from zero by `margin * sign(s)` before the
    arg-max, which keeps the classes (nearly) linearly separable. Optionally flip
    a fraction of labels to a random other class.
    Returns X, y, W_true (k, d), b_true (k,).
    """
    rng = np.random.default_rng(seed)
    W = rng.normal(size=(k, d))
    # normalize rows so 'margin' has consistent meaning
    W /= np.linalg.norm(W, axis=1, keepdims=True) + 1e-12
    b = rng.normal(size=(k,))
    X = rng.normal(size=(d, n))
    scores = W @ X + b[:, None]
    scores = scores + margin * np.sign(scores)
    y = scores.argmax(axis=0).astype(np.int64)

    if flip_prob > 0.0 and k > 1:
        mask = rng.random(n) < flip_prob
        y[mask] = (y[mask] + rng.integers(1, k, size=int(mask.sum()))) % k

    return X.astype(np.float64), y, W, b

def make_classification_2d(n: int = 300, margin: float = 0.5, seed: int = 42, flip_prob: float = 0.0):
    """
    A *linearly separable* 2-class, 2-feature dataset in (2, n) layout whose separation
    increases with `margin`.
    """
    rng = np.random.default_rng(seed)
    X = rng.normal(size=(2, n))
    w_true = rng.normal(size=(2,))
    w_true = w_true / (np.linalg.norm(w_true) + 1e-12)
    b_true = rng.normal()

    logits = w_true @ X + b_true
    logits = logits + margin * np.sign(logits)  # push away from boundary
    y = (logits > 0.0).astype(np.int64)

    if flip_prob > 0.0:
        mask = rng.random(n) < flip_prob
        y[mask] = 1 - y[mask]

    return X.astype(np.float64), y, w_true, float(b_true)
