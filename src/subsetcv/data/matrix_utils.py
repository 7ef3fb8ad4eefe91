"""
Design matrix diagnostics.

Rank and conditioning checks printed before fitting, and the constant-column
detector behind the absent-indicator policy: a column that never varies in a
training partition is left out of that partition's search.
"""

import numpy as np
from typing import Dict, Union


def check_matrix_rank(X: np.ndarray) -> Dict[str, Union[bool, int, float]]:
    """
    Check if a centered design is full column rank.

    Parameters
    ----------
    X : ndarray
        The design matrix to check. Columns are centered first because the
        intercept is always part of the model.

    Returns
    -------
    dict
        Rank, condition number and extreme singular values.
    """
    X_centered = X - X.mean(axis=0)
    n, p = X_centered.shape
    min_dim = min(n - 1, p)

    s = np.linalg.svd(X_centered, compute_uv=False)
    tol = s.max() * max(X_centered.shape) * np.finfo(s.dtype).eps if s.size else 0.0
    rank = int(np.sum(s > tol))

    condition_number = s[0] / s[-1] if s.size and s[-1] > tol else np.inf

    return {
        'is_full_rank': bool(rank == p and p <= n - 1),
        'rank': rank,
        'min_dimension': int(min_dim),
        'condition_number': float(condition_number),
        'smallest_singular_value': float(s[-1]) if s.size else 0.0,
        'largest_singular_value': float(s[0]) if s.size else 0.0,
    }


def print_matrix_diagnostics(X: np.ndarray, matrix_name: str = "X") -> Dict[str, Union[bool, int, float]]:
    """Print rank diagnostics for a design and return them."""
    rank_info = check_matrix_rank(X)

    print(f"Rank check for matrix {matrix_name}:")
    print(f"  - Dimensions: {X.shape}")
    print(f"  - Full rank: {rank_info['is_full_rank']}")
    print(f"  - Rank: {rank_info['rank']} / {rank_info['min_dimension']}")
    print(f"  - Condition number: {rank_info['condition_number']:.4e}")

    if not rank_info['is_full_rank']:
        print(f"WARNING: {matrix_name} is not full rank!")
        print(f"  - Smallest singular value: {rank_info['smallest_singular_value']:.4e}")
        print("  - Constant columns are dropped per fold; other dependencies abort the search.")

    return rank_info


def find_constant_columns(X: np.ndarray) -> np.ndarray:
    """
    Indices of columns that take a single value.

    Only exact constants are reported. Near-constant columns are kept and,
    if they make a fit singular, surface as a rank deficiency instead.
    """
    if X.shape[0] == 0:
        return np.arange(X.shape[1])
    return np.flatnonzero(np.all(X == X[0], axis=0))
