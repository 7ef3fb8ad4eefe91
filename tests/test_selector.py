"""Penalized choice of subset size and coefficient refits."""

import numpy as np
import pytest

from subsetcv import (
    backward_elimination, penalized_scores, select_size, select, DegenerateFitError,
)
from subsetcv.core.search import SubsetPath, SubsetResult


def _path(rss, n_samples=100, tss=1000.0):
    p = len(rss)
    results = [SubsetResult(0, np.zeros(p, dtype=bool), tss)]
    for size, value in enumerate(rss, start=1):
        mask = np.zeros(p, dtype=bool)
        mask[:size] = True
        results.append(SubsetResult(size, mask, value))
    return SubsetPath(results, n_samples, tss, [f"x{j}" for j in range(p)], [])


def test_scores_follow_log_rss_plus_linear_penalty():
    path = _path([500.0, 300.0, 250.0])
    scores = penalized_scores(path, penalty=3.0)

    expected = 100 * np.log([1000.0, 500.0, 300.0, 250.0]) + 3.0 * np.array([0, 1, 2, 3])
    assert np.allclose(scores, expected)


def test_chosen_size_never_grows_with_penalty():
    path = _path([500.0, 300.0, 250.0, 240.0, 238.0, 237.5])
    sizes = [select_size(path, penalty) for penalty in np.linspace(0, 200, 201)]

    assert all(a >= b for a, b in zip(sizes, sizes[1:]))
    assert sizes[0] == 6
    assert sizes[-1] == 0


def test_equal_scores_prefer_smaller_size():
    path = _path([500.0, 300.0, 300.0])
    assert select_size(path, penalty=0.0) == 2


def test_exact_fits_are_floored_not_fatal():
    path = _path([10.0, 0.0, 0.0, 0.0])
    scores = penalized_scores(path, penalty=1.0)

    assert np.all(np.isfinite(scores))
    assert select_size(path, penalty=1.0) == 2


def test_constant_target_is_degenerate():
    path = _path([0.0, 0.0], tss=0.0)
    with pytest.raises(DegenerateFitError):
        select_size(path, penalty=1.0)


@pytest.mark.parametrize("bad_rss", [np.nan, np.inf, -5.0])
def test_invalid_rss_is_degenerate(bad_rss):
    path = _path([500.0, bad_rss])
    with pytest.raises(DegenerateFitError):
        penalized_scores(path, penalty=1.0)


def test_negative_penalty_rejected():
    with pytest.raises(ValueError):
        penalized_scores(_path([500.0, 300.0]), penalty=-1.0)


def test_refit_matches_ols_on_selected_columns(linear_data):
    X, y = linear_data
    path = backward_elimination(X, y, max_size=6)
    size, mask, model = select(path, X, y, penalty=2.0)

    design = np.column_stack([np.ones(len(y)), X[:, mask]])
    coef, *_ = np.linalg.lstsq(design, y, rcond=None)

    assert model.size == size
    assert np.array_equal(model.mask, mask)
    assert np.isclose(model.intercept, coef[0])
    assert np.allclose(model.coef, coef[1:])


def test_noise_free_selection_recovers_coefficients(noise_free_data):
    X, y = noise_free_data
    path = backward_elimination(X, y, max_size=5)

    for penalty in (0.0, 0.1, 2.0, 20.0):
        size, mask, model = select(path, X, y, penalty)
        assert size == 2
        assert list(np.flatnonzero(mask)) == [1, 4]
        assert np.allclose(model.coef, [3.0, -2.0])
        assert np.isclose(model.intercept, 4.0)


def test_fitted_model_is_read_only_and_reports_coefficients(linear_data):
    X, y = linear_data
    path = backward_elimination(X, y, max_size=6)
    _, _, model = select(path, X, y, penalty=5.0)

    with pytest.raises(ValueError):
        model.coef[0] = 0.0

    table = model.coefficients()
    assert table.index[0] == "intercept"
    assert list(table.index[1:]) == model.selected_features
    assert np.allclose(model.full_coef()[model.mask], model.coef)


def test_large_penalty_on_pure_noise_keeps_only_the_intercept():
    rng = np.random.default_rng(12)
    X = rng.standard_normal((200, 4))
    y = 3.0 + rng.standard_normal(200)

    path = backward_elimination(X, y, max_size=4)
    size, mask, model = select(path, X, y, penalty=1e6)

    assert size == 0
    assert not mask.any()
    assert model.coef.shape == (0,)
    assert np.isclose(model.intercept, y.mean())
    assert np.allclose(model.predict(X), y.mean())
    assert list(model.coefficients().index) == ["intercept"]
