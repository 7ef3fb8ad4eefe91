"""Final refit, holdout scoring and the scikit-learn wrappers."""

import numpy as np
import pandas as pd
import pytest
from sklearn.base import clone

from subsetcv import (
    BackwardSubsetRegressor, BackwardSubsetCV, fit_final, score, SchemaMismatchError,
)


def test_final_refit_is_bit_identical(linear_data):
    X, y = linear_data
    first = fit_final(X, y, best_penalty=2.0, max_size=6)
    second = fit_final(X, y, best_penalty=2.0, max_size=6)

    assert np.array_equal(first.mask, second.mask)
    assert np.array_equal(first.coef, second.coef)
    assert first.intercept == second.intercept


def test_training_set_mspe_is_in_sample_mean_squared_residual(linear_data):
    X, y = linear_data
    reg = BackwardSubsetRegressor(max_size=6, penalty=2.0).fit(X, y)

    mspe = score(reg.model_, X, y)
    residuals = y - reg.predict(X)
    path_rss = reg.path_.rss[reg.size_]

    assert np.isclose(mspe, np.mean(residuals ** 2))
    assert np.isclose(mspe, path_rss / len(y))


def test_holdout_with_other_columns_is_rejected(linear_data):
    X, y = linear_data
    names = [f"f{j}" for j in range(X.shape[1])]
    model = fit_final(pd.DataFrame(X, columns=names), y, best_penalty=2.0, max_size=6)

    renamed = pd.DataFrame(X, columns=names[:-1] + ["other"])
    with pytest.raises(SchemaMismatchError):
        score(model, renamed, y)
    with pytest.raises(SchemaMismatchError):
        score(model, X[:, :4], y)


def test_holdout_length_must_match(linear_data):
    X, y = linear_data
    model = fit_final(X, y, best_penalty=2.0, max_size=6)
    with pytest.raises(ValueError):
        score(model, X, y[:-1])


def test_regressor_exposes_full_coefficient_vector(noise_free_data):
    X, y = noise_free_data
    reg = BackwardSubsetRegressor(max_size=5, penalty=5.0).fit(X, y)

    assert reg.size_ == 2
    assert np.allclose(reg.coef_, [0.0, 3.0, 0.0, 0.0, -2.0], atol=1e-10)
    assert np.isclose(reg.intercept_, 4.0)
    assert np.allclose(reg.predict(X), y)


def test_cv_estimator_selects_from_grid_and_refits(linear_data):
    X, y = linear_data
    grid = [0.5, 2.0, 10.0]
    est = BackwardSubsetCV(max_size=6, penalties=grid, cv=5, random_state=0).fit(X, y)

    assert est.best_penalty_ in grid
    assert list(est.cv_mse_.index) == grid
    assert est.model_.penalty == est.best_penalty_

    final = fit_final(X, y, est.best_penalty_, max_size=6)
    assert np.array_equal(est.model_.coef, final.coef)
    assert est.predict(X).shape == y.shape


def test_cv_estimator_clones_with_params():
    est = BackwardSubsetCV(max_size=4, penalties=[1.0, 2.0], cv=3, random_state=1)
    params = clone(est).get_params()

    assert params["max_size"] == 4
    assert params["cv"] == 3
    assert params["random_state"] == 1
