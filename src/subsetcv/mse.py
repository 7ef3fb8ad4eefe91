import numpy as np
import pandas as pd
from sklearn.metrics import mean_squared_error


def mspe(y_true, y_pred):
    """
    Mean squared prediction error.

    Units are squared target units; take the square root to compare against
    the target on its own scale.
    """
    return float(mean_squared_error(y_true, y_pred))


def cv_mse_table(y, predictions, penalties):
    """
    Mean squared out-of-fold error for each penalty.

    Parameters
    ----------
    y : ndarray, shape (n_samples,)
    predictions : ndarray, shape (n_samples, n_penalties)
        Out-of-fold predictions. Rows of skipped folds are NaN and are left
        out of every column's mean.
    penalties : sequence of float

    Returns
    -------
    pandas.Series
        Indexed by penalty, in grid order.
    """
    covered = ~np.isnan(predictions).any(axis=1)
    if not covered.any():
        raise ValueError("No out-of-fold predictions to score")
    y_true = np.tile(y[covered, None], (1, predictions.shape[1]))
    errors = mean_squared_error(y_true, predictions[covered], multioutput='raw_values')
    return pd.Series(
        errors,
        index=pd.Index(list(penalties), name='penalty', dtype=float),
        name='cv_mse',
    )
