import numpy as np
from scipy import linalg
from numba import jit

from ..exceptions import RankDeficiencyError


@jit(nopython=True)
def removal_costs(beta, R_inv):
    """
    Increase in RSS caused by dropping each column of the current fit.

    For an active set A with OLS coefficients beta, removing column j raises
    the residual sum of squares by beta_j^2 / [(X_A^T X_A)^{-1}]_jj.
    Since X_A^T X_A = R^T R, the diagonal of the inverse is the squared row
    norms of R^{-1} (upper triangular, so row j starts at column j).
    """
    k = beta.shape[0]
    costs = np.empty(k)
    for j in range(k):
        d = 0.0
        for m in range(j, k):
            d += R_inv[j, m] * R_inv[j, m]
        costs[j] = beta[j] * beta[j] / d
    return costs


def center(X, y):
    """Center columns of X and y; the intercept is recovered from the means."""
    X_mean = X.mean(axis=0)
    y_mean = y.mean()
    X_centered = np.ascontiguousarray(X - X_mean)
    y_centered = np.ascontiguousarray(y - y_mean)
    return X_centered, y_centered, X_mean, y_mean


def qr_least_squares(X_centered, y_centered):
    """
    Ordinary least squares on centered data through an economic QR.

    Parameters
    ----------
    X_centered : ndarray, shape (n_samples, k)
        Centered design restricted to the active columns.
    y_centered : ndarray, shape (n_samples,)
        Centered response.

    Returns
    -------
    beta : ndarray, shape (k,)
    R : ndarray, shape (k, k)
        Upper triangular factor, reused for removal costs.
    rss : float
        Residual sum of squares.

    Raises
    ------
    RankDeficiencyError
        If the active columns are not linearly independent, or there are not
        enough samples left after centering to identify k coefficients.
    """
    n, k = X_centered.shape
    if k >= n:
        raise RankDeficiencyError(
            f"Cannot fit {k} coefficients plus an intercept on {n} samples"
        )

    Q, R = linalg.qr(X_centered, mode='economic', check_finite=False)

    # Same tolerance rule as an SVD rank check, applied to the R diagonal
    r_diag = np.abs(np.diag(R))
    tol = r_diag.max() * max(n, k) * np.finfo(float).eps
    if r_diag.min() <= tol:
        raise RankDeficiencyError(
            f"Design is not full column rank: smallest |R_jj| = {r_diag.min():.3e} "
            f"(tolerance {tol:.3e}) with {k} active columns"
        )

    qty = Q.T @ y_centered
    beta = linalg.solve_triangular(R, qty, lower=False, check_finite=False)
    residuals = y_centered - Q @ qty
    rss = float(residuals @ residuals)
    return beta, R, rss


def inverse_upper(R):
    """Inverse of an upper triangular factor."""
    k = R.shape[0]
    return linalg.solve_triangular(R, np.eye(k), lower=False, check_finite=False)
