import numpy as np
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.utils.validation import check_is_fitted

from .cv import cross_validate
from .search import backward_elimination
from .selector import DEFAULT_RSS_FLOOR, select
from ..mse import mspe


class BackwardSubsetRegressor(BaseEstimator, RegressorMixin):
    """
    Linear regression on the subset chosen by penalized backward elimination.

    Parameters
    ----------
    max_size : int
        The maximum number of columns a selected subset may contain.

    penalty : float, optional (default=2.0)
        Complexity penalty per selected column. Sizes are scored as
        n * ln(RSS) + penalty * size.

    rss_floor : float, optional (default=1e-12)
        RSS values below rss_floor * TSS count as exact fits.
    """
    def __init__(self, max_size, penalty=2.0, rss_floor=DEFAULT_RSS_FLOOR):
        self.max_size = max_size
        self.penalty = penalty
        self.rss_floor = rss_floor

    def fit(self, X, y):
        """
        Run the elimination path on (X, y) and refit the selected subset.

        Returns
        -------
        self : object
        """
        self.path_ = backward_elimination(X, y, self.max_size)
        self.size_, self.mask_, self.model_ = select(
            self.path_, X, y, self.penalty, rss_floor=self.rss_floor)
        self.coef_ = self.model_.full_coef()
        self.intercept_ = self.model_.intercept
        self.n_features_in_ = len(self.mask_)
        return self

    def predict(self, X):
        check_is_fitted(self, 'model_')
        return self.model_.predict(X)


class BackwardSubsetCV(BaseEstimator, RegressorMixin):
    """
    Cross-validated choice of the penalty for BackwardSubsetRegressor.

    Parameters
    ----------
    max_size : int
        The maximum number of columns a selected subset may contain.

    penalties : sequence of float
        Grid of penalty strengths to compare.

    cv : int, default=10
        Number of cross-validation folds.

    random_state : int or None, default=None
        Seed for the fold assignment.

    n_jobs : int or None, default=1
        Worker processes for the fold loop.

    on_fold_error : {'raise', 'skip'}, default='raise'
        What to do when a fold's fit fails.

    rss_floor : float, default=1e-12

    verbose : bool, default=False
    """
    def __init__(self, max_size, penalties, cv=10, random_state=None, n_jobs=1,
                 on_fold_error='raise', rss_floor=DEFAULT_RSS_FLOOR, verbose=False):
        self.max_size = max_size
        self.penalties = penalties
        self.cv = cv
        self.random_state = random_state
        self.n_jobs = n_jobs
        self.on_fold_error = on_fold_error
        self.rss_floor = rss_floor
        self.verbose = verbose

    def fit(self, X, y):
        """Pick the penalty by cross-validation, then refit on all of (X, y)."""
        self.cv_result_ = cross_validate(
            X, y,
            n_folds=self.cv,
            penalties=self.penalties,
            max_size=self.max_size,
            random_state=self.random_state,
            rss_floor=self.rss_floor,
            n_jobs=self.n_jobs,
            on_fold_error=self.on_fold_error,
            verbose=self.verbose,
        )
        self.best_penalty_ = self.cv_result_.best_penalty
        self.cv_mse_ = self.cv_result_.cv_mse

        self.model_ = fit_final(X, y, self.best_penalty_, self.max_size,
                                rss_floor=self.rss_floor)
        self.coef_ = self.model_.full_coef()
        self.intercept_ = self.model_.intercept
        self.n_features_in_ = self.model_.n_features
        return self

    def predict(self, X):
        check_is_fitted(self, 'model_')
        return self.model_.predict(X)


def fit_final(X, y, best_penalty, max_size, rss_floor=DEFAULT_RSS_FLOOR):
    """
    Refit search and selection on the whole training set.

    No resampling is involved, so repeated calls on the same inputs give
    bit-identical coefficients.

    Returns
    -------
    FittedModel
    """
    return BackwardSubsetRegressor(
        max_size=max_size, penalty=best_penalty, rss_floor=rss_floor
    ).fit(X, y).model_


def score(model, X_holdout, y_holdout):
    """
    Holdout mean squared prediction error of a fitted model.

    The holdout design must carry the training schema (same columns, same
    order), otherwise SchemaMismatchError is raised. The result is in
    squared target units.
    """
    y_holdout = np.asarray(y_holdout, dtype=float).ravel()
    y_pred = model.predict(X_holdout)
    if len(y_pred) != len(y_holdout):
        raise ValueError(
            f"Holdout design has {len(y_pred)} rows but target has {len(y_holdout)}"
        )
    return mspe(y_holdout, y_pred)
