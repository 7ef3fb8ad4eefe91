"""
Input conversion and schema checks shared by the fitting components.

Designs may arrive as ndarrays or DataFrames. DataFrame columns become the
feature names; plain arrays only carry a column count, so two arrays match
whenever their widths agree.
"""

import numpy as np
import pandas as pd
from sklearn.utils import check_array, check_X_y

from ..exceptions import SchemaMismatchError


def column_names(X):
    """Column names of a DataFrame, or None for array-like input."""
    if isinstance(X, pd.DataFrame):
        return [str(c) for c in X.columns]
    return None


def default_feature_names(n_features):
    return [f"x{j}" for j in range(n_features)]


def as_design(X, y=None):
    """
    Convert a design (and optionally a target) to float64 arrays.

    Returns
    -------
    tuple
        (X_array, names) when y is None, else (X_array, y_array, names).
        ``names`` is None unless X was a DataFrame.
    """
    names = column_names(X)
    if y is None:
        X_arr = check_array(X, dtype=np.float64)
        return X_arr, names
    X_arr, y_arr = check_X_y(X, y, dtype=np.float64, y_numeric=True)
    return X_arr, np.asarray(y_arr, dtype=np.float64), names


def check_same_schema(n_features, names, X_arr, X_names, context="test"):
    """
    Require X to expose exactly the reference columns in the same order.

    Raises
    ------
    SchemaMismatchError
        If the widths differ, or both sides are named and the names differ.
    """
    if X_arr.shape[1] != n_features:
        raise SchemaMismatchError(
            f"{context} design has {X_arr.shape[1]} columns, expected {n_features}"
        )
    if names is not None and X_names is not None and list(X_names) != list(names):
        missing = [c for c in names if c not in X_names]
        extra = [c for c in X_names if c not in names]
        if not missing and not extra:
            raise SchemaMismatchError(
                f"{context} design has the expected columns in a different order"
            )
        raise SchemaMismatchError(
            f"{context} design columns differ from training: "
            f"missing {missing}, unexpected {extra}"
        )
