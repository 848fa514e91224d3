import typer

from softlearn.datasets.toy import make_multiclass, standardize
from softlearn.models.softmax_function import SoftmaxRegressionFunction
from softlearn.models.softmax_regression import SoftmaxRegression
from softlearn.optimizers.optimizers import LBFGS, SGD, Adam, GradientDescent, Momentum

app = typer.Typer(add_completion=False)


def run(opt_name: str, steps: int, lr: float, l2: float, seed: int = 0):
    X, y, *_ = make_multiclass(n=500, k=3, d=6, margin=0.5, seed=seed)
    X = standardize(X).X
    if opt_name == "sgd":
        opt = GradientDescent(rule=SGD(lr=lr), max_iterations=steps)
    elif opt_name == "momentum":
        opt = GradientDescent(rule=Momentum(lr=lr), max_iterations=steps)
    elif opt_name == "adam":
        opt = GradientDescent(rule=Adam(lr=lr), max_iterations=steps)
    elif opt_name == "lbfgs":
        opt = LBFGS(max_iterations=steps)
    else:
        raise ValueError("opt_name ∈ {sgd,momentum,adam,lbfgs}")

    clf = SoftmaxRegression(X.shape[0], 3, fit_intercept=True, lambda_=l2, seed=seed)
    clf.train(X, y, optimizer=opt)
    f = SoftmaxRegressionFunction(X, y, 3, lambda_=l2, fit_intercept=True)
    return f.evaluate(clf.parameters), clf.compute_accuracy(X, y)


@app.command()
def main(steps: int = 300, l2: float = 1e-3):
    res = {}
    res["sgd"] = run("sgd", steps=steps, lr=0.1, l2=l2)
    res["momentum"] = run("momentum", steps=steps, lr=0.05, l2=l2)
    res["adam"] = run("adam", steps=steps, lr=0.02, l2=l2)
    res["lbfgs"] = run("lbfgs", steps=steps, lr=0.0, l2=l2)
    for k, (loss, acc) in res.items():
        typer.echo(f"{k:9s} -> loss={loss:.4f}  acc={acc:.2f}%")
    # lbfgs should reach the lowest objective on this convex problem


if __name__ == "__main__":
    app()
