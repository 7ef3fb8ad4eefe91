import warnings
from concurrent.futures import ProcessPoolExecutor, as_completed
from multiprocessing import cpu_count

import numpy as np
from sklearn.model_selection import KFold
from tqdm import tqdm

from .search import backward_elimination
from .selector import DEFAULT_RSS_FLOOR, select_size, fit_subset
from .validation import as_design, check_same_schema, column_names
from ..exceptions import InvalidFoldCountError, SkippedFoldWarning, SubsetSelectionError
from ..mse import cv_mse_table


def as_penalty_grid(penalties):
    """Validate a penalty grid; order and duplicates are kept as given."""
    grid = np.atleast_1d(np.asarray(penalties, dtype=float))
    if grid.ndim != 1 or grid.size == 0:
        raise ValueError("penalties must be a non-empty 1-d sequence")
    if not np.all(np.isfinite(grid)) or np.any(grid < 0):
        raise ValueError(f"penalties must be finite and non-negative, got {list(grid)}")
    return grid


def assign_folds(n_samples, n_folds, random_state=None):
    """
    Label every row with a fold id in 0..n_folds-1.

    Rows are shuffled with ``random_state`` and dealt into folds whose sizes
    differ by at most one. Pass an int seed for a reproducible assignment.

    Raises
    ------
    InvalidFoldCountError
        If n_folds is not an integer in 2..n_samples.
    """
    if not isinstance(n_folds, (int, np.integer)) or not 1 < n_folds <= n_samples:
        raise InvalidFoldCountError(
            f"n_folds must be an integer between 2 and n_samples ({n_samples}), got {n_folds}"
        )

    fold_ids = np.full(n_samples, -1, dtype=int)
    splitter = KFold(n_splits=int(n_folds), shuffle=True, random_state=random_state)
    for fold, (_, test_idx) in enumerate(splitter.split(np.zeros((n_samples, 1)))):
        fold_ids[test_idx] = fold
    return fold_ids


def predict_fold(X_train, y_train, X_test, penalties, max_size,
                 rss_floor=DEFAULT_RSS_FLOOR, feature_names=None):
    """
    Out-of-fold predictions for every penalty in the grid.

    The backward elimination path does not depend on the penalty, so it is
    built once on the training partition. Each penalty then picks a size on
    that path; refits are shared between penalties that pick the same size.

    Parameters
    ----------
    X_train : array-like, shape (n_train, n_features)
    y_train : array-like, shape (n_train,)
    X_test : array-like, shape (n_test, n_features)
        Must expose the training columns in the training order.
    penalties : sequence of float
    max_size : int
    rss_floor : float
    feature_names : list of str, optional

    Returns
    -------
    ndarray, shape (n_test, n_penalties)

    Raises
    ------
    SchemaMismatchError
        If X_test's columns differ from X_train's.
    """
    train_names = column_names(X_train)
    test_names = column_names(X_test)
    X_train, y_train, _ = as_design(X_train, y_train)
    X_test, _ = as_design(X_test)
    check_same_schema(X_train.shape[1], train_names, X_test, test_names, context="test")
    penalties = as_penalty_grid(penalties)

    if feature_names is None:
        feature_names = train_names
    path = backward_elimination(X_train, y_train, max_size, feature_names=feature_names)

    predictions = np.empty((X_test.shape[0], len(penalties)))
    models = {}
    for j, penalty in enumerate(penalties):
        size = select_size(path, penalty, rss_floor=rss_floor)
        if size not in models:
            models[size] = fit_subset(X_train, y_train, path.mask_for(size),
                                      path.feature_names, penalty=penalty)
        model = models[size]
        predictions[:, j] = X_test[:, model.mask] @ model.coef + model.intercept
    return predictions


def _run_fold(args):
    """
    Worker for one fold. Module level so it can be pickled.

    Selection failures are returned rather than raised so the caller applies
    one fold-error policy for sequential and parallel runs alike.
    """
    fold, X_train, y_train, X_test, penalties, max_size, rss_floor, feature_names = args
    try:
        predictions = predict_fold(X_train, y_train, X_test, penalties, max_size,
                                   rss_floor=rss_floor, feature_names=feature_names)
    except SubsetSelectionError as e:
        return fold, None, e
    return fold, predictions, None


def _iter_folds(jobs, n_jobs):
    if n_jobs == 1:
        for job in jobs:
            yield _run_fold(job)
        return

    with ProcessPoolExecutor(max_workers=n_jobs) as executor:
        futures = [executor.submit(_run_fold, job) for job in jobs]
        for future in as_completed(futures):
            yield future.result()


def choose_best_penalty(cv_mse):
    """Penalty with the lowest CV error; ties go to the smallest penalty."""
    values = cv_mse.to_numpy()
    grid = cv_mse.index.to_numpy(dtype=float)
    tied = np.flatnonzero(values == values.min())
    return float(grid[tied[np.argmin(grid[tied])]])


class CVResult:
    """
    Outcome of one cross-validation run.

    Attributes
    ----------
    best_penalty : float
    cv_mse : pandas.Series
        Out-of-fold mean squared error per grid point, indexed by penalty.
    predictions : ndarray, shape (n_samples, n_penalties)
        Out-of-fold predictions; rows of skipped folds are NaN.
    fold_ids : ndarray, shape (n_samples,)
    penalties : ndarray
    skipped_folds : list of int
    """
    def __init__(self, best_penalty, cv_mse, predictions, fold_ids, penalties, skipped_folds):
        self.best_penalty = best_penalty
        self.cv_mse = cv_mse
        self.predictions = predictions
        self.fold_ids = fold_ids
        self.penalties = penalties
        self.skipped_folds = list(skipped_folds)

    @property
    def n_folds(self):
        return int(self.fold_ids.max()) + 1

    @property
    def fold_sizes(self):
        return np.bincount(self.fold_ids, minlength=self.n_folds)

    def __repr__(self):
        return (f"CVResult(best_penalty={self.best_penalty}, n_folds={self.n_folds}, "
                f"skipped_folds={self.skipped_folds})")


def cross_validate(X, y, n_folds, penalties, max_size, random_state=None,
                   rss_floor=DEFAULT_RSS_FLOOR, n_jobs=1, on_fold_error='raise',
                   verbose=False):
    """
    K-fold cross-validation of penalized backward subset selection.

    Parameters
    ----------
    X : array-like, shape (n_samples, n_features)
    y : array-like, shape (n_samples,)
    n_folds : int
        Number of folds, 2..n_samples.
    penalties : sequence of float
        Non-negative penalty strengths, in any order.
    max_size : int
        Largest subset size considered in each fold.
    random_state : int, RandomState or None
        Seed for the fold assignment.
    rss_floor : float
        Relative RSS floor for the log-penalty score.
    n_jobs : int or None
        Folds run in a process pool when greater than one; None or -1 uses
        every CPU. Results do not depend on n_jobs.
    on_fold_error : {'raise', 'skip'}
        'skip' warns with SkippedFoldWarning, leaves the fold's rows out of
        the error table and records the fold in ``skipped_folds``.
    verbose : bool
        Show a progress bar over folds.

    Returns
    -------
    CVResult
    """
    if on_fold_error not in ('raise', 'skip'):
        raise ValueError("on_fold_error must be 'raise' or 'skip'")

    names = column_names(X)
    X, y, _ = as_design(X, y)
    penalties = as_penalty_grid(penalties)
    n_samples = X.shape[0]

    fold_ids = assign_folds(n_samples, n_folds, random_state=random_state)
    fold_ids.setflags(write=False)

    if n_jobs is None or n_jobs == -1:
        n_jobs = cpu_count()
    if n_jobs < 1:
        raise ValueError("n_jobs must be positive, -1 or None")
    n_jobs = min(n_jobs, n_folds)

    jobs = [
        (fold, X[fold_ids != fold], y[fold_ids != fold], X[fold_ids == fold],
         penalties, max_size, rss_floor, names)
        for fold in range(n_folds)
    ]

    predictions = np.full((n_samples, len(penalties)), np.nan)
    skipped = []
    last_error = None
    with tqdm(total=n_folds, desc="CV folds", disable=not verbose) as pbar:
        for fold, fold_predictions, error in _iter_folds(jobs, n_jobs):
            pbar.update(1)
            if error is not None:
                if on_fold_error == 'raise':
                    raise error
                warnings.warn(
                    f"Skipping fold {fold} ({np.sum(fold_ids == fold)} rows): "
                    f"{type(error).__name__}: {error}",
                    SkippedFoldWarning,
                    stacklevel=2,
                )
                skipped.append(fold)
                last_error = error
                continue
            predictions[fold_ids == fold] = fold_predictions

    if len(skipped) == n_folds:
        raise last_error

    covered = ~np.isin(fold_ids, skipped)
    if np.isnan(predictions[covered]).any():
        raise RuntimeError("Out-of-fold prediction matrix has unfilled rows")

    cv_mse = cv_mse_table(y, predictions, penalties)
    return CVResult(
        best_penalty=choose_best_penalty(cv_mse),
        cv_mse=cv_mse,
        predictions=predictions,
        fold_ids=fold_ids,
        penalties=penalties,
        skipped_folds=sorted(skipped),
    )
