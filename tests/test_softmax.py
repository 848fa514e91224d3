import numpy as np
import pytest

from softlearn.core.errors import DimensionMismatchError, InvalidInputError
from softlearn.datasets.toy import make_classification_2d, make_multiclass, standardize
from softlearn.models.softmax_regression import SoftmaxRegression
from softlearn.optimizers.optimizers import LBFGS, SGD, Adam, GradientDescent


def _make(n=300, k=3, d=4, margin=0.9, seed=0, flip_prob=0.0):
    X, y, *_ = make_multiclass(n=n, k=k, d=d, margin=margin, seed=seed, flip_prob=flip_prob)
    return standardize(X).X, y


def test_softmax_acc():
    X, y = _make()
    clf = SoftmaxRegression.from_data(X, y, 3, lambda_=1e-4, fit_intercept=True, seed=0)
    assert clf.is_trained
    assert clf.compute_accuracy(X, y) >= 90.0


def test_softmax_acc_gradient_descent():
    X, y = _make()
    clf = SoftmaxRegression(X.shape[0], 3, fit_intercept=True, lambda_=1e-4, seed=0)
    clf.train(X, y, optimizer=GradientDescent(rule=Adam(lr=0.05), max_iterations=400))
    assert clf.compute_accuracy(X, y) >= 90.0


def test_exact_three_point_scenario():
    X = np.array([[1.0, 0.0, 1.0], [0.0, 1.0, 1.0]])
    y = np.array([0, 1, 0])
    clf = SoftmaxRegression(2, 2, fit_intercept=False, lambda_=0.0, seed=0)
    clf.train(X, y, optimizer=LBFGS())
    assert clf.compute_accuracy(X, y) == 100.0
    assert [clf.classify_point(X[:, i]) for i in range(3)] == [0, 1, 0]


def test_probabilities_are_normalized_and_match_labels():
    X, y = _make(seed=1)
    clf = SoftmaxRegression.from_data(X, y, 3, fit_intercept=True, seed=0)
    labels, P = clf.classify(X, return_probabilities=True)
    assert P.shape == (3, X.shape[1])
    assert np.allclose(P.sum(axis=0), 1.0, atol=1e-9)
    assert np.all(P >= 0.0)
    assert np.array_equal(labels, P.argmax(axis=0))
    assert np.array_equal(clf.classify(X), labels)
    assert np.allclose(clf.probabilities(X), P)


def test_two_initial_points_reach_same_accuracy():
    X, y, *_ = make_classification_2d(n=200, margin=1.0, seed=7)
    a = SoftmaxRegression(2, 2, fit_intercept=True, lambda_=1e-3, seed=1)
    a.train(X, y)
    b = SoftmaxRegression(2, 2, fit_intercept=True, lambda_=1e-3)
    b.parameters = np.random.default_rng(5).normal(scale=3.0, size=(2, 3))  # far-away warm start
    b.train(X, y)
    acc_a, acc_b = a.compute_accuracy(X, y), b.compute_accuracy(X, y)
    assert acc_a >= 95.0
    assert acc_a == pytest.approx(acc_b, abs=0.5)


def test_larger_lambda_shrinks_weights():
    X, y = _make(n=200, flip_prob=0.1, seed=2)
    norms = []
    for lam in [1e-3, 1e-2, 1e-1, 1.0]:
        clf = SoftmaxRegression(X.shape[0], 3, fit_intercept=True, lambda_=lam, seed=0)
        clf.train(X, y, optimizer=LBFGS(min_gradient_norm=1e-9))
        norms.append(np.linalg.norm(clf.parameters))
    assert all(b <= a + 1e-6 for a, b in zip(norms, norms[1:]))


def test_warm_start_and_reinitialization():
    X, y = _make(seed=3)
    clf = SoftmaxRegression(X.shape[0], 3, fit_intercept=True, seed=0)
    first = clf.train(X, y)
    W = clf.parameters.copy()
    # warm start from the optimum: the objective cannot get worse
    second = clf.train(X, y)
    assert second <= first + 1e-9
    assert clf.parameters.shape == W.shape

    # asking for more classes re-initializes with the new shape
    clf.train(X, y, num_classes=4)
    assert clf.num_classes == 4
    assert clf.parameters.shape == (4, X.shape[0] + 1)

    # one more feature re-initializes too
    d = X.shape[0]
    X_wide = np.r_[X, np.random.default_rng(0).normal(size=(1, X.shape[1]))]
    objective = clf.train(X_wide, y)
    assert np.isfinite(objective)
    assert clf.parameters.shape == (4, d + 2)
    assert clf.feature_size == d + 1
    assert clf.is_trained


def test_failed_train_keeps_parameters():
    X, y = _make(seed=4)
    clf = SoftmaxRegression.from_data(X, y, 3, seed=0)
    W = clf.parameters.copy()
    with pytest.raises(InvalidInputError):
        clf.train(X, y[:-1])
    bad = y.copy()
    bad[0] = 3
    with pytest.raises(InvalidInputError):
        clf.train(X, bad)
    assert np.array_equal(clf.parameters, W)
    assert clf.num_classes == 3


def test_untrained_model_is_uniform():
    clf = SoftmaxRegression(input_size=4, num_classes=3)
    assert not clf.is_trained
    assert clf.parameters.shape == (3, 4)
    X = np.random.default_rng(0).normal(size=(4, 5))
    labels, P = clf.classify(X, return_probabilities=True)
    assert np.array_equal(labels, np.zeros(5, dtype=np.int64))
    assert np.allclose(P, 1.0 / 3.0)


def test_ties_pick_lowest_class_index():
    clf = SoftmaxRegression(input_size=2, num_classes=3)
    clf.parameters = np.array([[0.0, 1.0], [1.0, 0.0], [1.0, 0.0]])
    # classes 1 and 2 tie on the first point, all three tie on the second
    X = np.array([[1.0, 1.0], [0.0, 1.0]])
    assert clf.classify(X).tolist() == [1, 0]


def test_intercept_shapes_and_accessors():
    clf = SoftmaxRegression(input_size=5, num_classes=2, fit_intercept=True, lambda_=0.5)
    assert clf.parameters.shape == (2, 6)
    assert clf.feature_size == 5
    assert clf.fit_intercept
    with pytest.raises(AttributeError):
        clf.fit_intercept = False
    clf.lambda_ = 0.1
    clf.num_classes = 4
    assert clf.lambda_ == 0.1 and clf.num_classes == 4
    with pytest.raises(InvalidInputError):
        clf.lambda_ = -1.0


def test_dimension_mismatch():
    X, y = _make()
    clf = SoftmaxRegression.from_data(X, y, 3, seed=0)
    with pytest.raises(DimensionMismatchError):
        clf.classify_point(np.zeros(X.shape[0] + 1))
    with pytest.raises(DimensionMismatchError):
        clf.classify(np.zeros((X.shape[0] - 1, 3)))
    with pytest.raises(DimensionMismatchError):
        clf.classify(np.zeros(X.shape[0]))


def test_compute_accuracy_edge_cases():
    X, y = _make()
    clf = SoftmaxRegression.from_data(X, y, 3, seed=0)
    with pytest.raises(InvalidInputError):
        clf.compute_accuracy(np.zeros((X.shape[0], 0)), np.zeros(0, dtype=np.int64))
    with pytest.raises(InvalidInputError):
        clf.compute_accuracy(X, y[:-1])
    acc = clf.compute_accuracy(X, y)
    assert 0.0 <= acc <= 100.0


def test_diverging_step_keeps_finite_parameters():
    X, y, *_ = make_multiclass(n=100, k=3, d=4, seed=5)
    X = 1e3 * X
    clf = SoftmaxRegression(X.shape[0], 3, fit_intercept=True, seed=0)
    objective = clf.train(X, y, optimizer=GradientDescent(rule=SGD(lr=1e305), max_iterations=50))
    assert np.isfinite(objective)
    assert np.all(np.isfinite(clf.parameters))
    P = clf.probabilities(X)
    assert np.allclose(P.sum(axis=0), 1.0, atol=1e-9)


def test_labels_use_raw_scores_below_exp_resolution():
    clf = SoftmaxRegression(input_size=1, num_classes=2)
    clf.parameters = np.array([[0.0], [1e-300]])
    # exp() cannot tell the two scores apart, the arg-max of W x still can
    assert clf.classify_point([1.0]) == 1
    labels, P = clf.classify(np.array([[1.0]]), return_probabilities=True)
    assert labels.tolist() == [1]
    assert np.allclose(P.sum(axis=0), 1.0)
