# scripts/run_softmax.py
from typing import Optional

import typer

from softlearn.core import TrainConfig, build_optimizer, get_logger, load_config
from softlearn.datasets.toy import make_multiclass, standardize
from softlearn.models.serialization import save_model
from softlearn.models.softmax_regression import SoftmaxRegression
from softlearn.optimizers.callbacks import PrintLoss

app = typer.Typer(add_completion=False)


@app.command()
def main(
    n: int = 600,
    k: int = 3,
    d: int = 4,
    margin: float = 0.8,
    config: Optional[str] = typer.Option(None, help="YAML/JSON TrainConfig; overrides the flags below"),
    optimizer: str = "lbfgs",
    l2: float = 1e-4,
    intercept: bool = True,
    max_iterations: int = 200,
    seed: int = 0,
    print_every: int = 0,
    save: Optional[str] = typer.Option(None, help="write the trained model to this JSON path"),
):
    cfg = load_config(config) if config else TrainConfig(
        lambda_=l2, fit_intercept=intercept, optimizer=optimizer, max_iterations=max_iterations, seed=seed
    )
    log = get_logger("softlearn", cfg.log_level, cfg.log_file)

    X, y, *_ = make_multiclass(n=n, k=k, d=d, margin=margin, seed=seed)
    X = standardize(X).X
    n_train = int(0.8 * n)
    X_tr, y_tr, X_te, y_te = X[:, :n_train], y[:n_train], X[:, n_train:], y[n_train:]

    clf = SoftmaxRegression(X.shape[0], k, fit_intercept=cfg.fit_intercept, lambda_=cfg.lambda_, seed=cfg.seed)
    callbacks = [PrintLoss(every=print_every, logger=log)] if print_every > 0 else []
    objective = clf.train(X_tr, y_tr, optimizer=build_optimizer(cfg), callbacks=callbacks)

    typer.echo(f"Softmax ({cfg.optimizer}): objective={objective:.4f}")
    typer.echo(f"train acc={clf.compute_accuracy(X_tr, y_tr):.2f}%  test acc={clf.compute_accuracy(X_te, y_te):.2f}%")
    if save:
        path = save_model(save, clf)
        typer.echo(f"saved model -> {path}")


if __name__ == "__main__":
    app()
