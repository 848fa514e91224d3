# src/softlearn/models/serialization.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import numpy as np

from softlearn.core.errors import InvalidInputError
from softlearn.core.io import load_payload, save_payload
from softlearn.models.softmax_regression import SoftmaxRegression

FORMAT_VERSION = 1
_FIELDS = ("format_version", "parameters", "shape", "num_classes", "lambda", "fit_intercept")


def encode(model: SoftmaxRegression) -> Dict[str, Any]:
    """Named-field record of a model. Python floats survive a JSON round trip exactly."""
    W = model.parameters
    return {
        "format_version": FORMAT_VERSION,
        "parameters": W.tolist(),
        "shape": list(W.shape),
        "num_classes": int(model.num_classes),
        "lambda": float(model.lambda_),
        "fit_intercept": bool(model.fit_intercept),
        "trained": bool(model.is_trained),
    }


def decode(payload: Dict[str, Any]) -> SoftmaxRegression:
    missing = [k for k in _FIELDS if k not in payload]
    if missing:
        raise InvalidInputError(f"model payload is missing fields: {missing}")
    version = payload["format_version"]
    if version != FORMAT_VERSION:
        raise InvalidInputError(f"unsupported model format_version {version!r} (expected {FORMAT_VERSION})")

    shape = tuple(int(s) for s in payload["shape"])
    if len(shape) != 2:
        raise InvalidInputError(f"parameter shape must be 2-D, got {shape}")
    try:
        W = np.asarray(payload["parameters"], dtype=np.float64).reshape(shape)
    except ValueError as exc:
        raise InvalidInputError(f"parameters do not match shape {shape}") from exc

    fit_intercept = bool(payload["fit_intercept"])
    model = SoftmaxRegression(
        input_size=max(shape[1] - int(fit_intercept), 0),
        num_classes=int(payload["num_classes"]),
        fit_intercept=fit_intercept,
        lambda_=float(payload["lambda"]),
    )
    # records without a "trained" flag count as trained when any weight is non-zero
    trained = bool(payload.get("trained", bool(np.any(W))))
    if W.size > 0:
        model.parameters = W
    model._trained = trained and W.size > 0
    # keep the stored count even if it disagrees with the parameter rows
    model.num_classes = int(payload["num_classes"])
    return model


def save_model(path: Path | str, model: SoftmaxRegression) -> Path:
    """Write the model as JSON (or YAML for a .yaml/.yml path)."""
    return save_payload(path, encode(model))


def load_model(path: Path | str) -> SoftmaxRegression:
    payload = load_payload(path)
    if not isinstance(payload, dict):
        raise InvalidInputError(f"{path} does not contain a model record")
    return decode(payload)
