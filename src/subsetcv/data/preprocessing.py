"""
Trip record preparation.

Turns raw yellow-taxi trip tables into the numeric design matrix and target
that the selection engine consumes: rename raw columns, derive time features,
drop implausible rows, cap the tip, and expand categoricals into indicator
columns. Categorical levels are fixed up front so that every dataset prepared
here, whatever levels it happens to contain, shares one column schema.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..exceptions import SchemaMismatchError


RAW_COLUMN_MAP = {
    "tpep_pickup_datetime": "pickup_datetime",
    "tpep_dropoff_datetime": "dropoff_datetime",
    "RatecodeID": "rate_code",
}

DEFAULT_CLEANING = {
    "max_fare_amount": 500.0,
    "max_trip_distance": 100.0,
    "max_passenger_count": 6,
    "max_duration_min": 180.0,
    "tip_ceiling": 50.0,
    "tip_pct_ceiling": 100.0,
}

TIME_OF_DAY_LEVELS = ["overnight", "morning", "afternoon", "evening"]

# First level of each list is the reference category
CATEGORY_LEVELS = {
    "rate_code": [1, 2, 3, 4, 5, 6],
    "payment_type": [1, 2, 3, 4],
    "day_of_week": list(range(7)),
    "hour_of_day": list(range(24)),
    "time_of_day": TIME_OF_DAY_LEVELS,
}

DEFAULT_TARGET = "tip_amount"
DEFAULT_NUMERIC_FEATURES = [
    "trip_distance",
    "fare_amount",
    "trip_duration",
    "passenger_count",
    "hour_of_day",
]
DEFAULT_CATEGORICAL_FEATURES = [
    "rate_code",
    "day_of_week",
    "payment_type",
    "time_of_day",
]

REQUIRED_COLUMNS = [
    "tip_amount", "fare_amount", "trip_distance", "passenger_count",
    "trip_duration", "rate_code", "payment_type",
    "day_of_week", "hour_of_day", "time_of_day",
]


def standardize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename raw TLC columns to the names used downstream."""
    return df.rename(columns=RAW_COLUMN_MAP)


def load_trips(path: Union[str, Path]) -> pd.DataFrame:
    """Read a trip CSV and parse its pickup and dropoff timestamps."""
    df = standardize_columns(pd.read_csv(path))
    for col in ("pickup_datetime", "dropoff_datetime"):
        if col not in df.columns:
            raise ValueError(f"Trip file {path} has no {col} column")
        df[col] = pd.to_datetime(df[col], errors="coerce")
    return df


def derive_features(df: pd.DataFrame) -> pd.DataFrame:
    """Add duration, calendar and tip percentage columns to a copy of df."""
    out = df.copy()
    pickup = pd.to_datetime(out["pickup_datetime"], errors="coerce")
    dropoff = pd.to_datetime(out["dropoff_datetime"], errors="coerce")

    out["trip_duration"] = (dropoff - pickup).dt.total_seconds() / 60.0
    out["day_of_week"] = pickup.dt.dayofweek
    out["hour_of_day"] = pickup.dt.hour
    out["time_of_day"] = pd.cut(
        out["hour_of_day"],
        bins=[0, 6, 12, 18, 24],
        right=False,
        labels=TIME_OF_DAY_LEVELS,
    ).astype(object)

    fare = out["fare_amount"].astype(float)
    out["tip_pct"] = np.where(fare > 0, 100.0 * out["tip_amount"] / fare.where(fare > 0), np.nan)
    return out


def clean_trips(df: pd.DataFrame,
                rules: Optional[Dict[str, Any]] = None,
                verbose: bool = False) -> pd.DataFrame:
    """
    Drop implausible trips and cap the tip columns.

    Parameters
    ----------
    df : DataFrame
        Output of derive_features.
    rules : dict, optional
        Overrides for DEFAULT_CLEANING.
    verbose : bool
        Print how many rows each stage removed.

    Returns
    -------
    DataFrame
        New frame with a fresh index. The input is not modified.
    """
    rules = {**DEFAULT_CLEANING, **(rules or {})}
    missing_cols = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing_cols:
        raise ValueError(f"Trip table is missing columns: {missing_cols}")

    rows_in = len(df)
    out = df.dropna(subset=REQUIRED_COLUMNS)
    rows_complete = len(out)

    keep = (
        (out["fare_amount"] > 0)
        & (out["fare_amount"] <= rules["max_fare_amount"])
        & (out["tip_amount"] >= 0)
        & (out["trip_distance"] > 0)
        & (out["trip_distance"] <= rules["max_trip_distance"])
        & (out["passenger_count"] >= 1)
        & (out["passenger_count"] <= rules["max_passenger_count"])
        & (out["trip_duration"] > 0)
        & (out["trip_duration"] <= rules["max_duration_min"])
        & out["rate_code"].isin(CATEGORY_LEVELS["rate_code"])
        & out["payment_type"].isin(CATEGORY_LEVELS["payment_type"])
    )
    out = out.loc[keep].copy()

    capped = int((out["tip_amount"] > rules["tip_ceiling"]).sum())
    out["tip_amount"] = out["tip_amount"].clip(upper=rules["tip_ceiling"])
    out["tip_pct"] = out["tip_pct"].clip(upper=rules["tip_pct_ceiling"])

    for col in ("rate_code", "payment_type", "passenger_count", "day_of_week", "hour_of_day"):
        out[col] = out[col].astype(int)

    if verbose:
        print(f"Cleaning: {rows_in:,} rows in")
        print(f"  - {rows_in - rows_complete:,} dropped for missing values")
        print(f"  - {rows_complete - len(out):,} dropped for implausible values")
        print(f"  - {capped:,} tips capped at {rules['tip_ceiling']}")
        print(f"  - {len(out):,} rows kept")

    return out.reset_index(drop=True)


def encode_design(df: pd.DataFrame,
                  numeric_features: Optional[List[str]] = None,
                  categorical_features: Optional[List[str]] = None,
                  target: str = DEFAULT_TARGET) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Build the numeric design matrix and target vector.

    Each categorical column becomes indicator columns over its fixed levels
    (CATEGORY_LEVELS), with the first level as reference. Indicators for
    levels that do not occur in df are kept as zero columns.

    Returns
    -------
    tuple
        (X, y) as a float DataFrame and a float Series.
    """
    if numeric_features is None:
        numeric_features = DEFAULT_NUMERIC_FEATURES
    if categorical_features is None:
        categorical_features = DEFAULT_CATEGORICAL_FEATURES

    overlap = set(numeric_features) & set(categorical_features)
    if overlap:
        raise ValueError(f"Features listed as both numeric and categorical: {sorted(overlap)}")
    if "hour_of_day" in categorical_features and "time_of_day" in categorical_features:
        raise ValueError(
            "hour_of_day and time_of_day indicators are linearly dependent; "
            "encode at most one of them as categorical"
        )

    parts = [df[numeric_features].astype(float)]
    for col in categorical_features:
        if col not in CATEGORY_LEVELS:
            raise ValueError(f"No fixed levels defined for categorical feature '{col}'")
        values = pd.Categorical(df[col], categories=CATEGORY_LEVELS[col])
        unknown = values.isna() & df[col].notna().to_numpy()
        if unknown.any():
            bad = sorted(set(df.loc[unknown, col]))
            raise ValueError(f"Unexpected levels for '{col}': {bad}")
        dummies = pd.get_dummies(values, prefix=col, drop_first=True, dtype=float)
        dummies.index = df.index
        parts.append(dummies)

    X = pd.concat(parts, axis=1)
    y = df[target].astype(float).rename(target)
    return X, y


def align_design_columns(X: pd.DataFrame, columns: List[str]) -> pd.DataFrame:
    """
    Reorder X to a training schema.

    Indicator columns missing from X are added as zeros. Columns the training
    schema does not know raise SchemaMismatchError.
    """
    unexpected = [c for c in X.columns if c not in columns]
    if unexpected:
        raise SchemaMismatchError(f"Design has columns not in the training schema: {unexpected}")
    return X.reindex(columns=list(columns), fill_value=0.0)


def prepare_dataset(source: Union[str, Path, pd.DataFrame],
                    data_params: Optional[Dict[str, Any]] = None,
                    verbose: bool = False) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Load, derive, clean and encode one trip dataset.

    Parameters
    ----------
    source : path or DataFrame
        CSV path, or an already loaded raw trip table.
    data_params : dict, optional
        The 'data' section of a parameter file.

    Returns
    -------
    tuple
        (X, y) ready for cross_validate / fit_final.
    """
    data_params = data_params or {}
    if isinstance(source, pd.DataFrame):
        df = standardize_columns(source)
    else:
        df = load_trips(source)

    df = derive_features(df)
    df = clean_trips(df, data_params.get("cleaning"), verbose=verbose)
    if len(df) == 0:
        raise ValueError("No trips left after cleaning")

    return encode_design(
        df,
        numeric_features=data_params.get("numeric_features"),
        categorical_features=data_params.get("categorical_features"),
        target=data_params.get("target", DEFAULT_TARGET),
    )
