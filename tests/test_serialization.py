import json
from pathlib import Path

import numpy as np
import pytest

from softlearn.core.errors import InvalidInputError
from softlearn.datasets.toy import make_multiclass
from softlearn.models.serialization import FORMAT_VERSION, decode, encode, load_model, save_model
from softlearn.models.softmax_regression import SoftmaxRegression


def _trained():
    X, y, *_ = make_multiclass(n=120, k=3, d=3, seed=4)
    return SoftmaxRegression.from_data(X, y, 3, lambda_=0.01, fit_intercept=True, seed=0), X


def test_json_roundtrip_is_exact(tmp_path: Path):
    clf, X = _trained()
    p = save_model(tmp_path / "models" / "softmax.json", clf)
    loaded = load_model(p)
    assert np.array_equal(loaded.parameters, clf.parameters)
    assert loaded.num_classes == clf.num_classes
    assert loaded.lambda_ == clf.lambda_
    assert loaded.fit_intercept == clf.fit_intercept
    assert loaded.is_trained
    assert np.array_equal(loaded.classify(X), clf.classify(X))
    assert json.loads(p.read_text())["format_version"] == FORMAT_VERSION


def test_untrained_roundtrip():
    clf = SoftmaxRegression(input_size=2, num_classes=3, fit_intercept=False, lambda_=0.25, seed=0)
    loaded = decode(encode(clf))
    assert loaded.parameters.shape == (3, 2)
    assert loaded.lambda_ == 0.25
    assert not loaded.is_trained
    # the next train draws random weights instead of warm-starting from zeros
    X, y, *_ = make_multiclass(n=60, k=3, d=2, seed=1)
    loaded.seed = 0
    loaded.train(X, y)
    assert loaded.is_trained


def test_records_without_trained_flag():
    clf, _ = _trained()
    payload = encode(clf)
    payload.pop("trained")
    assert decode(payload).is_trained
    zeros = encode(SoftmaxRegression(input_size=2, num_classes=3))
    zeros.pop("trained")
    assert not decode(zeros).is_trained


def test_decode_rejects_bad_payloads():
    clf, _ = _trained()
    payload = encode(clf)
    with pytest.raises(InvalidInputError):
        decode({**payload, "format_version": 99})
    missing = dict(payload)
    missing.pop("lambda")
    with pytest.raises(InvalidInputError):
        decode(missing)
    with pytest.raises(InvalidInputError):
        decode({**payload, "shape": [2, 2]})
