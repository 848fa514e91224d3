from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from softlearn.core.errors import InvalidInputError
from softlearn.core.io import load_payload
from softlearn.optimizers.optimizers import LBFGS, SGD, Adam, GradientDescent, Minimizer, Momentum

OPTIMIZERS = ("lbfgs", "sgd", "momentum", "adam")


@dataclass
class TrainConfig:
    # Model
    lambda_: float = 1e-4
    fit_intercept: bool = False
    seed: Optional[int] = None

    # Optimizer
    optimizer: str = "lbfgs"  # lbfgs | sgd | momentum | adam
    max_iterations: int = 10000
    tolerance: float = 1e-9  # gd rules: stop when the objective changes less than this
    min_gradient_norm: float = 1e-6
    num_basis: int = 10  # lbfgs memory
    lr: Optional[float] = None  # step size for gd rules; None -> rule default

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        self.optimizer = self.optimizer.lower()
        if self.optimizer not in OPTIMIZERS:
            raise InvalidInputError(f"optimizer must be one of {OPTIMIZERS}, got {self.optimizer!r}")
        if self.lambda_ < 0:
            raise InvalidInputError(f"lambda_ must be non-negative, got {self.lambda_}")
        if self.max_iterations < 0:
            raise InvalidInputError(f"max_iterations must be non-negative, got {self.max_iterations}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TrainConfig":
        data = dict(payload or {})
        # YAML-friendly alias: 'lambda' is a Python keyword
        if "lambda" in data:
            data["lambda_"] = data.pop("lambda")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidInputError(f"unknown config keys: {unknown}")
        return cls(**data)


def load_config(path: Path | str) -> TrainConfig:
    payload = load_payload(path)
    if payload is not None and not isinstance(payload, dict):
        raise InvalidInputError(f"{path} must contain a mapping of config keys")
    return TrainConfig.from_dict(payload or {})


def build_optimizer(cfg: TrainConfig) -> Minimizer:
    if cfg.optimizer == "lbfgs":
        return LBFGS(
            num_basis=cfg.num_basis,
            max_iterations=cfg.max_iterations,
            min_gradient_norm=cfg.min_gradient_norm,
        )
    if cfg.optimizer == "sgd":
        rule = SGD() if cfg.lr is None else SGD(lr=cfg.lr)
    elif cfg.optimizer == "momentum":
        rule = Momentum() if cfg.lr is None else Momentum(lr=cfg.lr)
    else:
        rule = Adam() if cfg.lr is None else Adam(lr=cfg.lr)
    return GradientDescent(rule=rule, max_iterations=cfg.max_iterations, tolerance=cfg.tolerance)
