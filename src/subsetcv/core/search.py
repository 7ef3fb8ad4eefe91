from collections import namedtuple
import warnings

import numpy as np

from .linalg import center, qr_least_squares, inverse_upper, removal_costs
from .validation import as_design, default_feature_names
from ..data.matrix_utils import find_constant_columns
from ..exceptions import DroppedColumnWarning


SubsetResult = namedtuple('SubsetResult', ['size', 'mask', 'rss'])


class SubsetPath:
    """
    Best subset found at each size along one backward elimination path.

    Parameters
    ----------
    results : list of SubsetResult
        Ordered by size ascending.
    n_samples : int
        Number of rows the path was fitted on.
    tss : float
        Total sum of squares of the centered response.
    feature_names : list of str
    dropped : ndarray
        Column indices left out because they were constant.
    named : bool
        Whether feature_names came from DataFrame columns.
    """
    def __init__(self, results, n_samples, tss, feature_names, dropped, named=False):
        self.results = list(results)
        self.n_samples = n_samples
        self.tss = tss
        self.feature_names = list(feature_names)
        self.dropped = np.asarray(dropped, dtype=int)
        self.named = named

    def __iter__(self):
        return iter(self.results)

    def __len__(self):
        return len(self.results)

    def __getitem__(self, idx):
        return self.results[idx]

    @property
    def n_features(self):
        return len(self.feature_names)

    @property
    def sizes(self):
        return np.array([r.size for r in self.results], dtype=int)

    @property
    def rss(self):
        return np.array([r.rss for r in self.results], dtype=float)

    def mask_for(self, size):
        for r in self.results:
            if r.size == size:
                return r.mask
        raise KeyError(f"No subset of size {size} on this path")

    def selected_features(self, size):
        mask = self.mask_for(size)
        return [name for name, keep in zip(self.feature_names, mask) if keep]


def backward_elimination(X, y, max_size, feature_names=None):
    """
    Greedy backward elimination over the columns of X.

    Starting from every non-constant column, the column whose removal
    increases the residual sum of squares the least is dropped, one at a
    time, until a single column remains. The subset visited at each size
    is recorded for sizes 1..max_size, followed by the intercept-only
    subset (size 0, all-false mask, RSS equal to the TSS). The path is not
    an exhaustive best subset search: each size only sees the subsets
    reachable by removing columns from the previous one.

    Exact ties in removal cost remove the lowest column index first. When
    every column is constant the path holds only the intercept-only subset.

    Parameters
    ----------
    X : array-like, shape (n_samples, n_features)
    y : array-like, shape (n_samples,)
    max_size : int
        Largest subset size to record. Values above the number of usable
        columns record the full model as the largest entry.
    feature_names : list of str, optional
        Defaults to DataFrame columns, or x0..x{p-1}.

    Returns
    -------
    SubsetPath

    Raises
    ------
    RankDeficiencyError
        If any active set on the path is not full column rank.
    """
    if not (isinstance(max_size, (int, np.integer)) and max_size >= 1):
        raise ValueError("max_size must be a positive integer")

    X, y, names = as_design(X, y)
    n_samples, n_features = X.shape
    named = feature_names is not None or names is not None
    if feature_names is None:
        feature_names = names if names is not None else default_feature_names(n_features)

    dropped = find_constant_columns(X)
    if len(dropped) > 0:
        warnings.warn(
            f"Leaving out constant columns {[feature_names[j] for j in dropped]}",
            DroppedColumnWarning,
            stacklevel=2,
        )

    X_centered, y_centered, _, _ = center(X, y)
    tss = float(y_centered @ y_centered)

    keep = np.ones(n_features, dtype=bool)
    keep[dropped] = False
    active = list(np.flatnonzero(keep))

    results = []
    while active:
        beta, R, rss = qr_least_squares(X_centered[:, active], y_centered)

        if len(active) <= max_size:
            mask = np.zeros(n_features, dtype=bool)
            mask[active] = True
            mask.setflags(write=False)
            results.append(SubsetResult(len(active), mask, rss))

        if len(active) == 1:
            break

        costs = removal_costs(beta, inverse_upper(R))
        # active is kept in ascending column order, so argmin's first hit
        # is the lowest column index among equal costs
        del active[int(np.argmin(costs))]

    empty = np.zeros(n_features, dtype=bool)
    empty.setflags(write=False)
    results.append(SubsetResult(0, empty, tss))

    results.reverse()
    return SubsetPath(results, n_samples, tss, feature_names, dropped, named=named)
