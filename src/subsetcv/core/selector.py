import numpy as np
import pandas as pd

from .linalg import center, qr_least_squares
from .validation import as_design, check_same_schema, column_names
from ..exceptions import DegenerateFitError


# Residual sums of squares below rss_floor * TSS are treated as exact fits
DEFAULT_RSS_FLOOR = 1e-12


class FittedModel:
    """
    OLS coefficients bound to one subset of columns.

    Arrays are read-only; a model is produced once and only used to predict.

    Parameters
    ----------
    mask : ndarray of bool, shape (n_features,)
    coef : ndarray, shape (mask.sum(),)
        Coefficients of the selected columns, in column order.
    intercept : float
    feature_names : list of str
    penalty : float or None
        Penalty strength the subset was selected under.
    named : bool
        Whether feature_names came from DataFrame columns. Only named models
        check column names at prediction time.
    """
    def __init__(self, mask, coef, intercept, feature_names, penalty=None, named=False):
        self.mask = np.array(mask, dtype=bool)
        self.coef = np.array(coef, dtype=float)
        self.mask.setflags(write=False)
        self.coef.setflags(write=False)
        self.intercept = float(intercept)
        self.feature_names = list(feature_names)
        self.penalty = penalty
        self.named = named

    @property
    def size(self):
        return int(self.mask.sum())

    @property
    def n_features(self):
        return len(self.mask)

    @property
    def selected_features(self):
        return [name for name, keep in zip(self.feature_names, self.mask) if keep]

    def coefficients(self):
        """Coefficients keyed by 'intercept' and the selected column names."""
        return pd.Series(
            np.concatenate([[self.intercept], self.coef]),
            index=['intercept'] + self.selected_features,
            name='coefficient',
        )

    def full_coef(self):
        """Coefficient vector over all columns, zero outside the subset."""
        beta = np.zeros(self.n_features)
        beta[self.mask] = self.coef
        return beta

    def predict(self, X):
        names = column_names(X)
        X, _ = as_design(X)
        check_same_schema(
            self.n_features,
            self.feature_names if self.named else None,
            X, names, context="prediction",
        )
        return X[:, self.mask] @ self.coef + self.intercept

    def __repr__(self):
        return (f"FittedModel(size={self.size}, penalty={self.penalty}, "
                f"features={self.selected_features})")


def fit_subset(X, y, mask, feature_names, penalty=None, named=False):
    """
    Refit OLS with an intercept on the columns selected by mask.

    An all-false mask gives the intercept-only model, mean(y).

    Raises
    ------
    RankDeficiencyError
        If the selected columns are linearly dependent.
    """
    mask = np.asarray(mask, dtype=bool)
    if not mask.any():
        return FittedModel(mask, np.empty(0), y.mean(), feature_names,
                           penalty=penalty, named=named)

    X_centered, y_centered, X_mean, y_mean = center(X[:, mask], y)
    beta, _, _ = qr_least_squares(X_centered, y_centered)
    intercept = y_mean - X_mean @ beta
    return FittedModel(mask, beta, intercept, feature_names, penalty=penalty, named=named)


def penalized_scores(path, penalty, rss_floor=DEFAULT_RSS_FLOOR):
    """
    Score every size on a path as n * ln(RSS) + penalty * size.

    Size 0, the intercept-only subset, scores n * ln(TSS).

    RSS values are floored at rss_floor * TSS so that exact fits keep the
    logarithm finite; floored sizes then differ only by their penalty.

    Raises
    ------
    DegenerateFitError
        If the response is constant, or an RSS is not finite or is
        negative beyond round-off.
    """
    if penalty < 0:
        raise ValueError(f"penalty must be non-negative, got {penalty}")

    if not np.isfinite(path.tss) or path.tss <= 0:
        raise DegenerateFitError(
            "Response has zero total sum of squares; log-RSS scores are undefined"
        )

    if not rss_floor > 0:
        raise ValueError(f"rss_floor must be positive, got {rss_floor}")

    rss = path.rss
    floor = rss_floor * path.tss
    if not np.all(np.isfinite(rss)):
        raise DegenerateFitError(f"Non-finite residual sum of squares on path: {rss}")
    if np.any(rss < -floor):
        raise DegenerateFitError(f"Negative residual sum of squares on path: {rss.min():.3e}")

    return path.n_samples * np.log(np.maximum(rss, floor)) + penalty * path.sizes


def select_size(path, penalty, rss_floor=DEFAULT_RSS_FLOOR):
    """
    Subset size minimizing the penalized score.

    Equal scores resolve to the smallest size (the path is ordered by size
    and argmin returns the first minimum).
    """
    scores = penalized_scores(path, penalty, rss_floor=rss_floor)
    return int(path.sizes[int(np.argmin(scores))])


def select(path, X, y, penalty, rss_floor=DEFAULT_RSS_FLOOR):
    """
    Pick the best size on a path for one penalty and refit its coefficients.

    Parameters
    ----------
    path : SubsetPath
        Output of backward_elimination on (X, y).
    X, y : array-like
        The same training data the path was built on.
    penalty : float
    rss_floor : float

    Returns
    -------
    tuple
        (best_size, mask, FittedModel)
    """
    X, y, _ = as_design(X, y)
    best_size = select_size(path, penalty, rss_floor=rss_floor)
    mask = path.mask_for(best_size)
    model = fit_subset(X, y, mask, path.feature_names, penalty=penalty, named=path.named)
    return best_size, mask, model
