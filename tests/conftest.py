import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def linear_data():
    """Noisy linear model on 6 columns, only 0 and 2 active."""
    rng = np.random.default_rng(0)
    n, p = 200, 6
    X = rng.standard_normal((n, p))
    y = 1.5 + 2.0 * X[:, 0] - 1.0 * X[:, 2] + 0.5 * rng.standard_normal(n)
    return X, y


@pytest.fixture
def noise_free_data():
    """n=1000, 5 columns, target an exact combination of columns 1 and 4."""
    rng = np.random.default_rng(1)
    X = rng.standard_normal((1000, 5))
    y = 4.0 + 3.0 * X[:, 1] - 2.0 * X[:, 4]
    return X, y


def _make_raw_trips(n, seed, start="2019-01-01"):
    rng = np.random.default_rng(seed)
    pickup = pd.Timestamp(start) + pd.to_timedelta(rng.integers(0, 28 * 24 * 60, n), unit="min")
    duration = rng.uniform(2, 60, n)
    dropoff = pickup + pd.to_timedelta(duration, unit="min")
    distance = np.round(rng.gamma(2.0, 1.5, n) + 0.1, 2)
    fare = np.clip(3.0 + 2.5 * distance + 0.4 * duration + rng.normal(0, 1.0, n), 3.0, None)
    payment = rng.choice([1, 2], size=n, p=[0.75, 0.25])
    rate = rng.choice([1, 2, 5], size=n, p=[0.9, 0.07, 0.03])
    passengers = rng.integers(1, 5, n)
    tip = np.where(payment == 1, np.clip(0.18 * fare + rng.normal(0, 0.8, n), 0, None), 0.0)

    return pd.DataFrame({
        "tpep_pickup_datetime": pickup.strftime("%Y-%m-%d %H:%M:%S"),
        "tpep_dropoff_datetime": dropoff.strftime("%Y-%m-%d %H:%M:%S"),
        "passenger_count": passengers,
        "trip_distance": distance,
        "RatecodeID": rate,
        "payment_type": payment,
        "fare_amount": np.round(fare, 2),
        "tip_amount": np.round(tip, 2),
        "total_amount": np.round(fare + tip, 2),
    })


@pytest.fixture
def raw_trips_factory():
    """Builds raw yellow-taxi style trip tables."""
    return _make_raw_trips
