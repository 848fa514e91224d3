from pathlib import Path

import pytest

from softlearn.core import TrainConfig, build_optimizer, load_config, save_yaml
from softlearn.core.errors import InvalidInputError
from softlearn.optimizers.optimizers import LBFGS, Adam, GradientDescent


def test_load_yaml_config(tmp_path: Path):
    p = tmp_path / "train.yaml"
    save_yaml(p, {"lambda": 0.01, "fit_intercept": True, "optimizer": "adam", "lr": 0.05, "max_iterations": 50})
    cfg = load_config(p)
    assert cfg.lambda_ == 0.01 and cfg.fit_intercept
    opt = build_optimizer(cfg)
    assert isinstance(opt, GradientDescent)
    assert isinstance(opt.rule, Adam) and opt.rule.lr == 0.05
    assert opt.max_iterations == 50


def test_default_optimizer_is_lbfgs():
    opt = build_optimizer(TrainConfig(num_basis=5, max_iterations=100))
    assert isinstance(opt, LBFGS)
    assert opt.num_basis == 5 and opt.max_iterations == 100


def test_bad_config_values():
    with pytest.raises(InvalidInputError):
        TrainConfig(optimizer="newton")
    with pytest.raises(InvalidInputError):
        TrainConfig.from_dict({"learning_rate": 0.1})
    with pytest.raises(InvalidInputError):
        TrainConfig(lambda_=-1.0)
